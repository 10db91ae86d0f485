"""
LLM judgement schema.

Defines the dataclass for one job's outcome when the LLM rerank stage
asks a model to judge a résumé against the top jobs, and the parser
that turns the model's raw reply into those dataclasses.

The model is asked for a JSON array of objects shaped like::

    {"url": "...", "refineScore": 0-100,
     "fitReasons": ["..."], "fixSuggestions": ["..."]}
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from typing import List

from .aggregate import clamp_score, round_half_up

MAX_JUDGEMENT_NOTES = 3


@dataclass
class LLMJudgement:
    """Result of an LLM fit evaluation for one job URL."""

    url: str
    refine_score: int
    fit_reasons: List[str] = field(default_factory=list)
    fix_suggestions: List[str] = field(default_factory=list)


def _notes(value: object) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(v).strip() for v in value if isinstance(v, str) and v.strip()][:MAX_JUDGEMENT_NOTES]


def _json_array(text: str) -> list:
    text = (text or "").strip()
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        # Models sometimes wrap the array in prose or a code fence.
        start, end = text.find("["), text.rfind("]")
        if start == -1 or end <= start:
            raise ValueError("LLM reply contains no JSON array")
        data = json.loads(text[start : end + 1])
    if not isinstance(data, list):
        raise ValueError(f"LLM reply is a JSON {type(data).__name__}, expected an array")
    return data


def parse_judgements(text: str) -> List[LLMJudgement]:
    """Parse a model reply into judgements.

    Entries without a string ``url`` or a numeric ``refineScore`` are
    skipped.  Scores are rounded and clamped to 0–100; at most three
    reasons and three suggestions are kept per job.

    Raises:
        ValueError: If the reply is not a JSON array.
    """
    judgements: List[LLMJudgement] = []
    for item in _json_array(text):
        if not isinstance(item, dict):
            continue
        url = item.get("url")
        score = item.get("refineScore")
        if not isinstance(url, str) or isinstance(score, bool) or not isinstance(score, (int, float)):
            continue
        if not math.isfinite(score):
            continue
        judgements.append(
            LLMJudgement(
                url=url,
                refine_score=clamp_score(round_half_up(score)),
                fit_reasons=_notes(item.get("fitReasons")),
                fix_suggestions=_notes(item.get("fixSuggestions")),
            )
        )
    return judgements
