"""
Unittest suite for the ranking pipeline.

The pipeline runs end to end with null collaborators (no backfill, no
embeddings, placeholder LLM) and an in-process cache, so ranking is
fully deterministic and offline.
"""

from __future__ import annotations

import json
import unittest

from jobrank.errors import InvalidRequestError
from jobrank.normalize.schema import CandidateJob
from jobrank.rank.cache import MemoryCacheStore, ResultCache, response_key
from jobrank.rank.llm_providers import LLMProvider
from jobrank.rank.pipeline import RankingPipeline
from jobrank.rank.scorer import HybridScorer

RESUME = (
    "John Smith\n"
    "Experience\n"
    "Senior Software Engineer, Acme, Jan 2015 - Present\n"
    "Designed backend services in Python and deployed them on AWS. "
    "Maintained PostgreSQL databases and mentored engineers on testing.\n"
)

JOBS = [
    CandidateJob(url="https://x/1", title="Backend Engineer", description="Python and AWS backend services engineer wanted."),
    CandidateJob(url="https://x/2", title="Chef", description="Prepare seasonal menus for a busy downtown restaurant kitchen."),
    CandidateJob(url="https://x/3", title="Data Engineer", description="PostgreSQL pipelines, Spark clusters and Airflow scheduling."),
]


class FixedProvider(LLMProvider):
    def __init__(self, reply: str) -> None:
        self.reply = reply
        self.calls = 0

    def complete(self, system: str, prompt: str) -> str:
        self.calls += 1
        return self.reply


class TestRankingPipeline(unittest.TestCase):
    def setUp(self) -> None:
        self.cache = ResultCache(MemoryCacheStore())
        self.pipeline = RankingPipeline(cache=self.cache)

    def test_ranks_best_match_first(self) -> None:
        ranked = self.pipeline.rank(RESUME, JOBS)
        self.assertEqual([job.url for job in ranked][0], "https://x/1")
        self.assertEqual(ranked[-1].url, "https://x/2")
        self.assertEqual(ranked[-1].score, 0)
        for job in ranked:
            self.assertTrue(0 <= job.score <= 100)

    def test_senior_engineer_scenario(self) -> None:
        ranked = RankingPipeline().rank(
            RESUME, [CandidateJob(url="https://x/1", title="Backend Engineer", description="Python and AWS experience needed for this role.")]
        )
        self.assertEqual(len(ranked), 1)
        self.assertGreater(ranked[0].score, 0)
        matches = ranked[0].reasons[0]
        self.assertTrue(matches.startswith("Matches: "))
        self.assertIn("Python", matches)
        self.assertIn("AWS", matches)

    def test_senior_title_weight_reaches_the_response(self) -> None:
        jobs = [CandidateJob(url="https://x/1", title="Backend Engineer", description="Python and AWS experience needed for this role.")]
        senior = RankingPipeline().run(RESUME, jobs)
        plain = RankingPipeline().run(RESUME.replace("Senior Software Engineer", "Software Engineer"), jobs)
        senior_weights = {kw["keyword"]: kw["weight"] for kw in senior.metadata()["top_keywords"]}
        plain_weights = {kw["keyword"]: kw["weight"] for kw in plain.metadata()["top_keywords"]}
        # current (2.0) x five years or more (1.5) x primary industry (1.25) x senior (1.2)
        self.assertEqual(senior_weights["Python"], 4.5)
        self.assertEqual(senior_weights["AWS"], 4.5)
        self.assertEqual(plain_weights["Python"], 3.75)
        self.assertEqual(senior.metadata()["roles_analyzed"], 1)
        self.assertTrue(senior.rankings[0].reasons[0].startswith("Matches: Python, AWS"))

    def test_malformed_cached_response_is_recomputed(self) -> None:
        self.cache.set(response_key(RESUME, (job.url for job in JOBS)), {"rankings": ["not a job"]})
        ranked = self.pipeline.rank(RESUME, JOBS)
        self.assertEqual(len(ranked), 3)
        self.assertEqual(ranked[0].url, "https://x/1")

    def test_ties_keep_input_order(self) -> None:
        jobs = [
            CandidateJob(url=f"https://x/{i}", title="Chef", description="Prepare seasonal menus for a busy restaurant kitchen.")
            for i in range(4)
        ]
        ranked = self.pipeline.rank(RESUME, jobs)
        self.assertEqual([job.url for job in ranked], [job.url for job in jobs])

    def test_repeat_request_is_served_from_cache(self) -> None:
        first = self.pipeline.rank(RESUME, JOBS)
        writes = self.cache.stats()["writes"]
        second = self.pipeline.rank(RESUME, list(reversed(JOBS)))
        self.assertEqual([j.to_dict() for j in first], [j.to_dict() for j in second])
        self.assertEqual(self.cache.stats()["writes"], writes)

    def test_identical_requests_are_idempotent_without_cache(self) -> None:
        pipeline = RankingPipeline()
        first = pipeline.rank(RESUME, JOBS)
        second = pipeline.rank(RESUME, JOBS)
        self.assertEqual([j.to_dict() for j in first], [j.to_dict() for j in second])

    def test_only_first_thirty_jobs_are_scored(self) -> None:
        jobs = [CandidateJob(url=f"https://x/{i}", title="Python Engineer") for i in range(35)]
        ranked = self.pipeline.rank(RESUME, jobs)
        self.assertEqual(len(ranked), 30)
        self.assertNotIn("https://x/30", {job.url for job in ranked})

    def test_llm_rerank_reorders_results(self) -> None:
        reply = json.dumps([
            {"url": "https://x/3", "refineScore": 100, "fitReasons": ["Data background"], "fixSuggestions": []},
            {"url": "https://x/1", "refineScore": 0, "fitReasons": [], "fixSuggestions": ["Show scale"]},
        ])
        provider = FixedProvider(reply)
        baseline = {job.url: job.score for job in RankingPipeline().rank(RESUME, JOBS)}
        ranked = RankingPipeline(llm_provider=provider).rank(RESUME, JOBS)
        by_url = {job.url: job for job in ranked}
        self.assertEqual(provider.calls, 1)
        self.assertEqual(by_url["https://x/3"].score, int(baseline["https://x/3"] * 0.7 + 30 + 0.5))
        self.assertEqual(by_url["https://x/1"].score, int(baseline["https://x/1"] * 0.7 + 0.5))
        self.assertIn("Fix: Show scale", by_url["https://x/1"].reasons)
        self.assertEqual([job.score for job in ranked], sorted((job.score for job in ranked), reverse=True))

    def test_malformed_llm_reply_matches_heuristic_ranking(self) -> None:
        baseline = RankingPipeline().rank(RESUME, JOBS)
        ranked = RankingPipeline(llm_provider=FixedProvider("certainly! here are the scores")).rank(RESUME, JOBS)
        self.assertEqual([j.to_dict() for j in ranked], [j.to_dict() for j in baseline])

    def test_empty_jobs_is_rejected(self) -> None:
        scorer = HybridScorer()
        with self.assertRaises(InvalidRequestError) as ctx:
            RankingPipeline(scorer=scorer).rank(RESUME, [])
        self.assertEqual(ctx.exception.message, "jobs array required")
        self.assertEqual(ctx.exception.status, 400)

    def test_short_resume_is_rejected(self) -> None:
        with self.assertRaises(InvalidRequestError) as ctx:
            self.pipeline.rank("x" * 30, JOBS)
        self.assertEqual(ctx.exception.message, "Resume text not available")


if __name__ == "__main__":
    unittest.main()
