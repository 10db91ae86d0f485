"""
LLM rerank stage.

The heuristic scores are refined for the ten best jobs with a single
batched call to the configured :class:`LLMProvider`.  The model sees a
résumé preview and, per job, its URL, title, company and a truncated
description; it answers with a ``refineScore`` plus short fit reasons
and fix suggestions.  Each judged job's score becomes
``0.7 × heuristic + 0.3 × refine``.

This stage can only ever improve the ranking.  If the call fails or
the reply cannot be parsed, every job keeps its heuristic score.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, List, Optional

from ..normalize.schema import ScoredJob
from .aggregate import blend_refined
from .cache import ResultCache, rerank_key
from .llm_providers import LLMProvider

logger = logging.getLogger(__name__)

RERANK_TOP_N = 10
RESUME_PREVIEW_CHARS = 2500
JOB_DESCRIPTION_CHARS = 1200


def _collapse(text: str) -> str:
    return " ".join((text or "").split())


def rerank_top_jobs(
    scored: List[ScoredJob],
    resume_text: str,
    provider: LLMProvider,
    cache: Optional[ResultCache] = None,
    top_n: int = RERANK_TOP_N,
) -> List[ScoredJob]:
    """Blend LLM judgements into the scores of the top heuristic jobs.

    Args:
        scored: Heuristically scored jobs, in input order.
        resume_text: Full résumé text.
        provider: LLM provider used for the batched judgement.
        cache: Where each reranked job is stored; optional.
        top_n: How many of the best jobs to send to the model.

    Returns:
        A new list in the same order as ``scored``.  Jobs the model did
        not judge, or every job when the stage fails, are returned
        unchanged.
    """
    if len(scored) <= 1:
        return list(scored)

    # Stable: equal heuristic scores keep their input order.
    top = sorted(scored, key=lambda j: j.score, reverse=True)[: min(top_n, len(scored))]
    payload = [
        {
            "url": job.url,
            "title": job.title or "",
            "companyName": job.company_name or "",
            "description": _collapse(job.description)[:JOB_DESCRIPTION_CHARS],
        }
        for job in top
    ]
    resume_preview = _collapse(resume_text)[:RESUME_PREVIEW_CHARS]

    try:
        judgements = provider.judge(resume_preview, payload)
        by_url = {j.url: j for j in judgements}
        top_urls = {job.url for job in top}
        reranked: List[ScoredJob] = []
        refined: Dict[str, ScoredJob] = {}
        for job in scored:
            verdict = by_url.get(job.url)
            if verdict is None or job.url not in top_urls:
                reranked.append(job)
                continue
            updated = refined.get(job.url)
            if updated is None:
                reasons = (
                    list(job.reasons)
                    + [f"LLM: {r}" for r in verdict.fit_reasons]
                    + [f"Fix: {s}" for s in verdict.fix_suggestions]
                )
                updated = replace(job, score=blend_refined(job.score, verdict.refine_score), reasons=reasons)
                refined[job.url] = updated
            reranked.append(updated)
    except Exception as exc:  # noqa: BLE001
        logger.warning("LLM rerank failed; keeping heuristic scores: %s", exc)
        return list(scored)

    if cache is not None:
        for url, job in refined.items():
            cache.set(rerank_key(url, resume_text), {"score": job.score, "reasons": job.reasons})
    logger.info("LLM reranked %d of %d top jobs", len(refined), len(top))
    return reranked
