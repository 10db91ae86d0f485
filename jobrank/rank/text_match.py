"""
Plain term matching between résumé and job text.

These are the two generic text collaborators of the hybrid scorer:
:func:`keyword_overlap_score` gives the share of a job's significant
terms that also occur in the résumé, and :func:`extract_keywords`
lists a job's terms for the "Matches" / "Consider adding" reasons.
"""

from __future__ import annotations

from typing import Iterable, List

from .aggregate import clamp_score, round_half_up

_PUNCTUATION = ".,;:!?()[]{}<>\"'`*•·|"

OVERLAP_STOPWORDS = {
    "and", "the", "for", "are", "but", "not", "you", "all", "can", "had", "her",
    "was", "one", "our", "out", "day", "get", "has", "him", "his", "how", "its",
    "may", "new", "now", "old", "see", "two", "way", "who", "did", "let", "put",
    "say", "she", "too", "use", "with", "that", "this", "will", "your", "from",
    "have", "they", "what", "when", "were", "been", "into", "than", "then",
}

KEYWORD_STOPWORDS = {
    "a", "an", "and", "are", "as", "at", "be", "by", "for", "from", "has", "he",
    "in", "is", "it", "its", "of", "on", "that", "the", "to", "was", "will",
    "with", "would", "you", "our", "we", "or",
}


def _tokens(text: str) -> Iterable[str]:
    for raw in (text or "").split():
        token = raw.strip(_PUNCTUATION)
        if token:
            yield token


def keyword_overlap_score(resume_text: str, job_text: str) -> int:
    """Percentage (0–100) of the job's significant words found in the résumé."""
    resume_words = {t.lower() for t in _tokens(resume_text)}
    job_words = list(dict.fromkeys(
        t.lower() for t in _tokens(job_text)
        if len(t) > 3 and t.lower() not in OVERLAP_STOPWORDS
    ))
    if not job_words:
        return 0
    matches = sum(1 for word in job_words if word in resume_words)
    return clamp_score(round_half_up(matches / len(job_words) * 100))


def extract_keywords(text: str, limit: int = 20) -> List[str]:
    """Return the first ``limit`` distinct terms of ``text``, keeping their casing."""
    seen = {}
    for token in _tokens(text):
        key = token.lower()
        if len(token) > 2 and key not in KEYWORD_STOPWORDS and key not in seen:
            seen[key] = token
            if len(seen) >= limit:
                break
    return list(seen.values())
