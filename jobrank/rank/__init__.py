"""
Ranking subsystem for jobrank.

The `rank` package scores candidate jobs against a résumé in stages:

* `scorer` – Hybrid heuristic score: keyword overlap blended with
  embedding similarity, with detail backfill for thin postings.
* `llm_judge` – Optionally asks an LLM to refine the scores of the top
  jobs and explain them.
* `aggregate` – The weights and rounding used to blend scores.
* `cache` – Content-addressed caching of per-job and whole results.
* `pipeline` – Runs the stages in order for one request.
"""

from .pipeline import RankingPipeline  # noqa: F401
from .scorer import HybridScorer  # noqa: F401
from .llm_judge import rerank_top_jobs  # noqa: F401
from .cache import ResultCache, build_cache_store  # noqa: F401
