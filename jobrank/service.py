"""
Request boundary for job ranking.

:func:`handle_rank_request` takes an already-decoded request body and the
authenticated user id, runs the pipeline and returns a
:class:`RankResponse` holding an HTTP status and a JSON-serialisable
payload.  It is the only place where exceptions become status codes:

======  ============================================================
status  payload
======  ============================================================
200     ``{"success": true, "rankings": [...], "metadata": {...}}``
400     ``{"error": "jobs array required"}`` or
        ``{"error": "Resume text not available"}``
401     ``{"error": "Unauthorized"}``
500     ``{"error": "Failed to rank jobs"}``
======  ============================================================

Each request carries an id (taken from the caller or generated) that is
logged on start and end and echoed back in the ``x-request-id`` header.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .config import build_pipeline
from .errors import InvalidRequestError, RankingError, UnauthorizedError
from .normalize.schema import CandidateJob
from .rank.pipeline import RankingPipeline

logger = logging.getLogger(__name__)

ROUTE_KEY = "jobs:rank"
SERVER_ERROR_MESSAGE = "Failed to rank jobs"

# (user_id, resume_id or None) -> extracted résumé text, or None if not found
ResumeLookup = Callable[[str, Optional[str]], Optional[str]]


@dataclass
class RankResponse:
    status: int
    payload: Dict[str, object]
    headers: Dict[str, str] = field(default_factory=dict)


def get_or_create_request_id(headers: Optional[Dict[str, str]] = None) -> str:
    for name, value in (headers or {}).items():
        if name.lower() == "x-request-id" and value:
            return value
    return uuid.uuid4().hex


def _parse_jobs(body: Dict[str, object]) -> List[CandidateJob]:
    raw = body.get("jobs")
    if not isinstance(raw, list) or not raw:
        raise InvalidRequestError("jobs array required")
    jobs = [CandidateJob.from_dict(item) for item in raw if isinstance(item, dict)]
    if len(jobs) < len(raw):
        logger.warning("Dropped %d job entries that are not objects", len(raw) - len(jobs))
    if not jobs:
        raise InvalidRequestError("jobs array required")
    return jobs


def _resume_text(body: Dict[str, object], user_id: str, resume_lookup: Optional[ResumeLookup]) -> str:
    text = body.get("resumeText")
    if not text and resume_lookup is not None:
        resume_id = body.get("resumeId")
        text = resume_lookup(user_id, str(resume_id) if resume_id else None)
    return str(text or "")


def handle_rank_request(
    body: Optional[Dict[str, object]],
    user_id: Optional[str],
    resume_lookup: Optional[ResumeLookup] = None,
    pipeline: Optional[RankingPipeline] = None,
    headers: Optional[Dict[str, str]] = None,
) -> RankResponse:
    """Rank the jobs in ``body`` for ``user_id``.

    Args:
        body: Decoded JSON body with ``jobs`` and either ``resumeText`` or
            an optional ``resumeId`` resolved through ``resume_lookup``.
        user_id: Authenticated user, or ``None`` for anonymous callers.
        resume_lookup: Resolves a user's stored résumé text; when
            ``resumeId`` is missing or unknown it should return the
            user's most recent résumé.
        pipeline: The ranking pipeline; a default one is built if omitted.
        headers: Request headers, used only for ``x-request-id``.
    """
    request_id = get_or_create_request_id(headers)
    started = time.perf_counter()
    logger.info("[%s] %s start", request_id, ROUTE_KEY)

    try:
        if not user_id:
            raise UnauthorizedError()
        body = body if isinstance(body, dict) else {}
        jobs = _parse_jobs(body)
        resume_text = _resume_text(body, user_id, resume_lookup)
        if pipeline is None:
            pipeline = build_pipeline()
        result = pipeline.run(resume_text, jobs)
        response = RankResponse(
            200,
            {
                "success": True,
                "rankings": [job.to_dict() for job in result.rankings],
                "metadata": result.metadata(),
            },
        )
    except RankingError as exc:
        response = RankResponse(exc.status, {"error": exc.message})
    except Exception:  # noqa: BLE001
        logger.exception("[%s] %s failed", request_id, ROUTE_KEY)
        response = RankResponse(500, {"error": SERVER_ERROR_MESSAGE})

    response.headers["x-request-id"] = request_id
    duration_ms = round((time.perf_counter() - started) * 1000)
    logger.info("[%s] %s end status=%d duration=%dms", request_id, ROUTE_KEY, response.status, duration_ms)
    return response
