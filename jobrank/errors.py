"""
Error types raised by the ranking pipeline.

Only request validation problems are raised as exceptions.  Failures of
the optional collaborators (detail fetch, embeddings, cache, LLM judge)
are recovered where they happen and never reach the caller; anything
else that escapes the pipeline is turned into a generic server error at
the request boundary in :mod:`jobrank.service`.
"""

from __future__ import annotations


class RankingError(Exception):
    """Base class for errors surfaced to the caller of the ranking service."""

    status: int = 500

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status


class InvalidRequestError(RankingError):
    """The request cannot be ranked as given (empty job list, unusable résumé)."""

    status = 400


class UnauthorizedError(RankingError):
    """The caller is not authenticated."""

    status = 401

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)
