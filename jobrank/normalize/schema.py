# normalize/schema.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class CandidateJob:
    url: str                           # stable identity for caching and dedup
    title: Optional[str] = None
    company_name: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "CandidateJob":
        """Build a job from a request payload entry (camelCase or snake_case keys)."""
        def _text(*keys: str) -> Optional[str]:
            for key in keys:
                value = data.get(key)
                if value is not None:
                    return str(value)
            return None

        return cls(
            url=_text("url") or "",
            title=_text("title"),
            company_name=_text("companyName", "company_name", "company"),
            description=_text("description"),
        )


@dataclass
class ScoredJob:
    url: str
    title: Optional[str]
    company_name: Optional[str]
    score: int                         # always within [0, 100]
    reasons: List[str] = field(default_factory=list)
    # Text the job was scored against; kept out of responses and caches.
    description: str = field(default="", repr=False, compare=False)

    def to_dict(self) -> Dict[str, object]:
        return {
            "url": self.url,
            "title": self.title,
            "companyName": self.company_name,
            "score": self.score,
            "reasons": list(self.reasons),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "ScoredJob":
        return cls(
            url=str(data.get("url") or ""),
            title=data.get("title"),  # type: ignore[arg-type]
            company_name=data.get("companyName"),  # type: ignore[arg-type]
            score=int(data.get("score") or 0),  # type: ignore[arg-type]
            reasons=[str(r) for r in data.get("reasons") or []],  # type: ignore[union-attr]
        )
