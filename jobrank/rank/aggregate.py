"""
Score blending helpers.

Both scoring stages produce integer scores on a 0–100 scale and both
blend two signals with fixed weights:

* heuristic score = 0.8 × keyword overlap + 0.2 × embedding similarity
* reranked score  = 0.7 × heuristic score + 0.3 × LLM refine score

Halves round up (``2.5`` → ``3``), matching how the scores have always
been reported, rather than Python's round-half-to-even.
"""

from __future__ import annotations

import math

KEYWORD_WEIGHT = 0.8
EMBEDDING_WEIGHT = 0.2
HEURISTIC_WEIGHT = 0.7
REFINE_WEIGHT = 0.3

# Absorbs float noise such as 0.7 * 1 + 0.3 * 6 == 2.4999999999999996.
_EPSILON = 1e-9


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5 + _EPSILON))


def clamp_score(value: float) -> int:
    """Clamp to the inclusive 0–100 score range."""
    return int(max(0, min(100, value)))


def blend_heuristic(keyword_score: float, embedding_score: float) -> int:
    return clamp_score(round_half_up(keyword_score * KEYWORD_WEIGHT + embedding_score * EMBEDDING_WEIGHT))


def blend_refined(original_score: float, refine_score: float) -> int:
    return clamp_score(round_half_up(original_score * HEURISTIC_WEIGHT + refine_score * REFINE_WEIGHT))
