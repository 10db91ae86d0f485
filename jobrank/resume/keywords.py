"""
Weighted keyword extraction.

Keywords are drawn from a curated skill vocabulary, from the titles of
the parsed roles and, for some industries, from a supplemental
lexicon.  Each keyword is then weighted by four independent
multipliers computed from the roles that mention it:

* recency   – how recently the keyword was used (0.5x – 2.0x)
* tenure    – how many years were spent in roles using it (0.8x – 1.5x)
* industry  – used in the résumé's primary industry (1.25x)
* seniority – used in a senior (1.2x) or junior (0.9x) titled role

The final weight is the product of the four multipliers.  Keywords are
ranked by weight with a stable sort, so keywords of equal weight keep
the order in which they were discovered.
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Dict, List, Optional

from .parse_resume import ResumeRole, ResumeStructure, parse_resume_structure, years_between

logger = logging.getLogger(__name__)

SEARCH_KEYWORD_LIMIT = 18
DOMINANT_SKILL_LIMIT = 5

SKILL_VOCABULARY: List[str] = [
    "Business Development", "Sales", "Marketing", "Finance", "Accounting",
    "Engineering", "Software", "Development", "Management", "Leadership",
    "Project Management", "Operations", "Strategy", "Analytics", "Data", "CRM",
    "ERP", "SQL", "Python", "JavaScript", "React", "Node", "AWS", "Azure",
    "Cloud", "DevOps", "Agile", "Scrum", "Lean", "Six Sigma", "Quality",
    "Compliance", "Risk", "Audit", "Legal", "HR", "Recruiting", "Training",
    "Customer Service", "Support", "Technical", "Communication", "Negotiation",
    "Problem Solving", "Team Building", "Coaching", "Mentoring", "Planning",
    "Budgeting", "Forecasting", "Reporting", "Analysis", "Research", "Design",
    "Architecture", "Infrastructure", "Security", "Testing", "QA",
    "Documentation", "Presentation", "Public Speaking", "Writing", "Editing",
    "Translation", "Multilingual", "Bilingual",
]

FINANCE_TERMS = [
    "Commercial Lending", "Loan Approval", "Credit Analysis", "Financial Analysis",
    "Deal Structuring", "Risk Assessment",
]
TECH_TERMS = [
    "Software Development", "API Integration", "Database Design", "Cloud Architecture",
    "CI/CD", "Microservices",
]

TITLE_STOPWORDS = {"the", "and", "for", "with", "from", "into", "unknown"}

SENIOR_MARKERS = re.compile(r"senior|lead|manager|director|vp|ceo|cto|head|principal|chief", re.I)
JUNIOR_MARKERS = re.compile(r"junior|entry|associate|intern|assistant", re.I)

# Longest terms first so "Project Management" wins over "Management" at
# the same position.
_VOCABULARY_RE = re.compile(
    r"\b(" + "|".join(re.escape(t) for t in sorted(SKILL_VOCABULARY, key=len, reverse=True)) + r")\b",
    re.IGNORECASE,
)
_CANONICAL = {term.lower(): term for term in SKILL_VOCABULARY}


@dataclass
class WeightedKeyword:
    keyword: str
    weight: float
    sources: List[str] = field(default_factory=list)  # companies of the matching roles
    recency: float = 1.0
    tenure_years: float = 0.0


@dataclass
class KeywordExtractionResult:
    keywords: List[WeightedKeyword]
    top_keywords: List[str]
    all_keywords: List[str]
    metadata: Dict[str, object]

    def to_dict(self) -> Dict[str, object]:
        return {
            "keywords": [asdict(kw) for kw in self.keywords],
            "top_keywords": list(self.top_keywords),
            "all_keywords": list(self.all_keywords),
            "metadata": dict(self.metadata),
        }


def extract_candidates(resume_text: str, structure: ResumeStructure) -> List[str]:
    """Collect candidate keywords in discovery order, without duplicates."""
    seen: Dict[str, str] = {}

    def _add(term: str) -> None:
        key = term.lower()
        if key not in seen:
            seen[key] = term

    for match in _VOCABULARY_RE.finditer(resume_text or ""):
        _add(_CANONICAL[match.group(1).lower()])

    for role in structure.roles:
        for word in role.title.split():
            word = word.strip(".,;:()[]|/&-–")
            if len(word) > 3 and word.lower() not in TITLE_STOPWORDS:
                _add(word)

    industry = structure.primary_industry
    if "Finance" in industry or "Lending" in industry:
        for term in FINANCE_TERMS:
            _add(term)
    if "Tech" in industry or "Software" in industry:
        for term in TECH_TERMS:
            _add(term)
    return list(seen.values())


def _matching_roles(keyword: str, structure: ResumeStructure) -> List[ResumeRole]:
    needle = keyword.lower()
    return [
        role for role in structure.roles
        if needle in role.title.lower() or needle in role.description.lower()
    ]


def recency_multiplier(roles: List[ResumeRole], today: date) -> float:
    """2.0x for current use down to 0.5x for use ten or more years ago."""
    if not roles:
        return 1.0
    latest = max(roles, key=lambda r: (r.is_current, r.end_date or today, r.start_date))
    years_since = years_between(latest.start_date, today)
    if latest.is_current or years_since < 1:
        return 2.0
    if years_since < 3:
        return 1.5
    if years_since < 5:
        return 1.0
    if years_since < 10:
        return 0.7
    return 0.5


def tenure_multiplier(tenure_years: float) -> float:
    if tenure_years >= 5:
        return 1.5
    if tenure_years >= 3:
        return 1.3
    if tenure_years >= 1:
        return 1.0
    return 0.8


def industry_multiplier(roles: List[ResumeRole], primary_industry: str) -> float:
    return 1.25 if any(r.industry == primary_industry for r in roles) else 1.0


def seniority_multiplier(roles: List[ResumeRole]) -> float:
    # A senior title anywhere outranks a junior one elsewhere.
    if any(SENIOR_MARKERS.search(r.title) for r in roles):
        return 1.2
    if any(JUNIOR_MARKERS.search(r.title) for r in roles):
        return 0.9
    return 1.0


def weigh_keyword(keyword: str, structure: ResumeStructure, today: date) -> WeightedKeyword:
    roles = _matching_roles(keyword, structure)
    tenure = round(sum(r.duration_years for r in roles), 1)
    recency = recency_multiplier(roles, today)
    weight = (
        1.0
        * recency
        * tenure_multiplier(tenure)
        * industry_multiplier(roles, structure.primary_industry)
        * seniority_multiplier(roles)
    )
    sources = list(dict.fromkeys(r.company for r in roles))
    return WeightedKeyword(keyword=keyword, weight=weight, sources=sources, recency=recency, tenure_years=tenure)


def extract_weighted_keywords(
    resume_text: str,
    structure: Optional[ResumeStructure] = None,
    now: Optional[date] = None,
) -> KeywordExtractionResult:
    """Extract and weight keywords from a résumé.

    Args:
        resume_text: Raw résumé text.
        structure: Already parsed structure; parsed from ``resume_text``
            when omitted.
        now: Reference date for recency.  Defaults to today.

    Returns:
        A :class:`KeywordExtractionResult` with every keyword ranked by
        weight, the top 18 as search keywords and summary metadata.
    """
    today = now or date.today()
    if structure is None:
        structure = parse_resume_structure(resume_text, now=today)

    candidates = extract_candidates(resume_text, structure)
    # sorted() is stable, also with reverse=True: ties keep discovery order.
    ranked = sorted(
        (weigh_keyword(kw, structure, today) for kw in candidates),
        key=lambda kw: kw.weight,
        reverse=True,
    )
    for i, kw in enumerate(ranked[:10], 1):
        logger.debug("%2d. %s (weight %.2f, recency %.1fx)", i, kw.keyword, kw.weight, kw.recency)

    metadata: Dict[str, object] = {
        "total_keywords": len(ranked),
        "primary_industry": structure.primary_industry,
        "experience_years": structure.total_experience_years,
        "dominant_skills": [kw.keyword for kw in ranked[:DOMINANT_SKILL_LIMIT]],
        "roles_analyzed": len(structure.roles),
    }
    logger.info(
        "Extracted %d keywords from %d roles (%s)",
        len(ranked), len(structure.roles), structure.primary_industry,
    )
    return KeywordExtractionResult(
        keywords=ranked,
        top_keywords=[kw.keyword for kw in ranked[:SEARCH_KEYWORD_LIMIT]],
        all_keywords=[kw.keyword for kw in ranked],
        metadata=metadata,
    )


def build_search_query(result: KeywordExtractionResult, limit: int = 5) -> str:
    """Join the highest weighted keywords into a job-board search string."""
    return " ".join(result.top_keywords[:limit])
