"""
Hybrid heuristic scoring.

Each candidate job is scored against the résumé on a 0–100 scale by
blending keyword overlap (80%) with embedding similarity (20%).  Jobs
with a missing or very short description are first backfilled through
the configured :class:`~jobrank.ingest.JobDetailFetcher`.

Scores are memoised in the shared :class:`~jobrank.rank.cache.ResultCache`
under a key derived only from the résumé and job text, so identical
content scores identically for every caller.

Without an embedding provider the embedding half contributes 0, which
caps heuristic scores at 80.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence

from ..ingest.detail_fetcher import JobDetailFetcher, NullDetailFetcher
from ..normalize.schema import CandidateJob, ScoredJob
from ..resume.embed import EmbeddingProvider, NullEmbeddingProvider, cosine_similarity
from .aggregate import blend_heuristic, clamp_score, round_half_up
from .cache import ResultCache, job_score_key
from .text_match import extract_keywords, keyword_overlap_score

logger = logging.getLogger(__name__)

MIN_DESCRIPTION_CHARS = 40
MAX_REASON_KEYWORDS = 10


class HybridScorer:
    """Score candidate jobs against résumé text."""

    def __init__(
        self,
        detail_fetcher: Optional[JobDetailFetcher] = None,
        embedder: Optional[EmbeddingProvider] = None,
        cache: Optional[ResultCache] = None,
        overlap_score: Callable[[str, str], int] = keyword_overlap_score,
        keyword_extractor: Callable[[str], List[str]] = extract_keywords,
    ) -> None:
        self.detail_fetcher = detail_fetcher if detail_fetcher is not None else NullDetailFetcher()
        self.embedder = embedder if embedder is not None else NullEmbeddingProvider()
        self.cache = cache if cache is not None else ResultCache()
        self.overlap_score = overlap_score
        self.keyword_extractor = keyword_extractor

    def embed(self, text: str) -> Optional[List[float]]:
        """Embed ``text``; any provider failure degrades to ``None``."""
        try:
            return self.embedder.embed(text)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Embedding failed (%s); skipping semantic score", exc)
            return None

    def backfill(self, job: CandidateJob) -> CandidateJob:
        """Fill in title, company and description for jobs with a thin description."""
        if job.description and len(job.description) >= MIN_DESCRIPTION_CHARS:
            return job
        try:
            details = self.detail_fetcher.fetch(job.url) or {}
        except Exception as exc:  # noqa: BLE001
            logger.warning("Detail fetch failed for %s: %s", job.url, exc)
            return job
        return CandidateJob(
            url=job.url,
            title=job.title or details.get("title"),
            company_name=job.company_name or details.get("companyName"),
            description=details.get("description") or job.description,
        )

    def embedding_score(self, resume_embedding: Optional[Sequence[float]], job_text: str) -> int:
        if not resume_embedding:
            return 0
        job_embedding = self.embed(job_text)
        if not job_embedding:
            return 0
        similarity = max(0.0, min(1.0, cosine_similarity(resume_embedding, job_embedding)))
        return round_half_up(similarity * 100)

    def reasons(
        self,
        resume_text: str,
        job_text: str,
        keyword_weights: Optional[Dict[str, float]] = None,
    ) -> List[str]:
        """Build the "Matches:" and "Consider adding:" reasons for a job.

        When ``keyword_weights`` (lower-cased résumé keyword -> weight) is
        given, matched terms are listed heaviest first; terms the résumé
        keywords do not cover keep their order after them.
        """
        resume_lower = resume_text.lower()
        keywords = self.keyword_extractor(job_text)
        matched = [k for k in keywords if k.lower() in resume_lower]
        missing = [k for k in keywords if k.lower() not in resume_lower][:MAX_REASON_KEYWORDS]
        if keyword_weights:
            matched = sorted(matched, key=lambda k: keyword_weights.get(k.lower(), 0.0), reverse=True)
        matched = matched[:MAX_REASON_KEYWORDS]
        reasons: List[str] = []
        if matched:
            reasons.append("Matches: " + ", ".join(matched))
        if missing:
            reasons.append("Consider adding: " + ", ".join(missing))
        return reasons

    def _from_cache(self, job: CandidateJob, job_text: str, cached: object) -> Optional[ScoredJob]:
        if not isinstance(cached, dict) or "score" not in cached:
            return None
        reasons = cached.get("reasons") or []
        try:
            score = clamp_score(int(cached["score"]))
            if not isinstance(reasons, list):
                raise TypeError(f"reasons is {type(reasons).__name__}")
        except (TypeError, ValueError) as exc:
            logger.warning("Ignoring malformed cached score for %s: %s", job.url, exc)
            return None
        return ScoredJob(
            url=job.url,
            title=job.title,
            company_name=job.company_name,
            score=score,
            reasons=[str(r) for r in reasons],
            description=job_text,
        )

    def score_job(
        self,
        resume_text: str,
        job: CandidateJob,
        resume_embedding: Optional[Sequence[float]] = None,
        keyword_weights: Optional[Dict[str, float]] = None,
    ) -> ScoredJob:
        """Score one job against the résumé.

        Args:
            resume_text: Full résumé text.
            job: The candidate job; backfilled first if its description
                is shorter than 40 characters.
            resume_embedding: Pre-computed résumé embedding, or ``None``
                when no embedding provider is configured.
            keyword_weights: Weighted résumé keywords used to order the
                matched terms in the reasons.  Does not change the score.

        Returns:
            A :class:`ScoredJob` whose ``description`` carries the text
            the job was scored against.
        """
        job = self.backfill(job)
        job_text = job.description or job.title or ""
        key = job_score_key(resume_text, job_text)
        hit = self._from_cache(job, job_text, self.cache.get(key))
        if hit is not None:
            logger.debug("Score cache hit for %s", job.url)
            return hit

        kw_score = self.overlap_score(resume_text, job_text)
        emb_score = self.embedding_score(resume_embedding, job_text)
        score = blend_heuristic(kw_score, emb_score)
        reasons = self.reasons(resume_text, job_text, keyword_weights)
        logger.debug("Scored %s: keyword=%d embedding=%d -> %d", job.url, kw_score, emb_score, score)
        self.cache.set(key, {"score": score, "reasons": reasons})
        return ScoredJob(
            url=job.url,
            title=job.title,
            company_name=job.company_name,
            score=score,
            reasons=reasons,
            description=job_text,
        )
