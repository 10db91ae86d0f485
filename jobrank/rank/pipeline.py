"""
Résumé-driven job ranking pipeline.

Wires the stages together for one request:

1. parse the résumé and weigh its keywords;
2. look the (résumé, job set) pair up in the whole-response cache;
3. score at most 30 jobs with the :class:`HybridScorer`, ordering each
   job's matched terms by résumé keyword weight;
4. refine the top ten through the LLM rerank stage;
5. sort by score (stable, so ties keep input order) and cache the list.

All collaborators are injected through :class:`RankingPipeline`'s
constructor; :func:`jobrank.config.build_pipeline` builds one from
settings.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from ..errors import InvalidRequestError
from ..normalize.schema import CandidateJob, ScoredJob
from ..resume.keywords import KeywordExtractionResult, extract_weighted_keywords
from .cache import ResultCache, response_key
from .llm_judge import rerank_top_jobs
from .llm_providers import LLMProvider, PlaceholderProvider
from .scorer import HybridScorer

logger = logging.getLogger(__name__)

MAX_JOBS = 30
MIN_RESUME_CHARS = 50


@dataclass
class RankingResult:
    rankings: List[ScoredJob]
    keywords: KeywordExtractionResult

    def metadata(self) -> Dict[str, object]:
        """Résumé summary returned next to the rankings."""
        return {
            **self.keywords.metadata,
            "top_keywords": [
                {"keyword": kw.keyword, "weight": round(kw.weight, 3)}
                for kw in self.keywords.keywords[: len(self.keywords.top_keywords)]
            ],
        }


class RankingPipeline:
    """Rank candidate jobs for a résumé."""

    def __init__(
        self,
        scorer: Optional[HybridScorer] = None,
        llm_provider: Optional[LLMProvider] = None,
        cache: Optional[ResultCache] = None,
        max_jobs: int = MAX_JOBS,
        rerank_top_n: int = 10,
    ) -> None:
        self.cache = cache if cache is not None else ResultCache()
        self.scorer = scorer if scorer is not None else HybridScorer(cache=self.cache)
        self.llm_provider = llm_provider if llm_provider is not None else PlaceholderProvider()
        self.max_jobs = max_jobs
        self.rerank_top_n = rerank_top_n

    @staticmethod
    def validate(resume_text: Optional[str], jobs: Sequence[CandidateJob]) -> None:
        if not jobs:
            raise InvalidRequestError("jobs array required")
        if not resume_text or len(resume_text) < MIN_RESUME_CHARS:
            raise InvalidRequestError("Resume text not available")

    def _cached_rankings(self, key: str) -> Optional[List[ScoredJob]]:
        cached = self.cache.get(key)
        if not isinstance(cached, dict) or not isinstance(cached.get("rankings"), list):
            return None
        try:
            return [ScoredJob.from_dict(item) for item in cached["rankings"]]
        except (AttributeError, TypeError, ValueError) as exc:
            logger.warning("Ignoring malformed cached response: %s", exc)
            return None

    def run(self, resume_text: str, jobs: Sequence[CandidateJob]) -> RankingResult:
        """Rank the jobs and return them with the résumé's weighted keywords.

        Raises:
            InvalidRequestError: If ``jobs`` is empty or the résumé text
                is shorter than 50 characters.
        """
        self.validate(resume_text, jobs)
        keywords = extract_weighted_keywords(resume_text)

        resp_key = response_key(resume_text, (job.url for job in jobs))
        cached = self._cached_rankings(resp_key)
        if cached is not None:
            logger.info("Serving %d rankings from response cache", len(cached))
            return RankingResult(rankings=cached, keywords=keywords)

        if len(jobs) > self.max_jobs:
            logger.debug("Ignoring %d jobs beyond the first %d", len(jobs) - self.max_jobs, self.max_jobs)
        weights = {kw.keyword.lower(): kw.weight for kw in keywords.keywords}
        resume_embedding = self.scorer.embed(resume_text)
        scored = [
            self.scorer.score_job(resume_text, job, resume_embedding, keyword_weights=weights)
            for job in list(jobs)[: self.max_jobs]
        ]

        scored = rerank_top_jobs(
            scored, resume_text, self.llm_provider, cache=self.cache, top_n=self.rerank_top_n
        )

        # sorted() is stable: equal scores keep their relative input order.
        ranked = sorted(scored, key=lambda job: job.score, reverse=True)
        self.cache.set(resp_key, {"rankings": [job.to_dict() for job in ranked]})
        logger.info(
            "Ranked %d jobs (top score %d)", len(ranked), ranked[0].score if ranked else 0
        )
        return RankingResult(rankings=ranked, keywords=keywords)

    def rank(self, resume_text: str, jobs: Sequence[CandidateJob]) -> List[ScoredJob]:
        """Return the jobs ranked best first."""
        return self.run(resume_text, jobs).rankings
