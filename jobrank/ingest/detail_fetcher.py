"""
Job detail backfill.

Candidate jobs often arrive from search results with only a title and a
URL.  A :class:`JobDetailFetcher` looks the posting up by URL so the
scorer has a description to work with.  Fetching is best effort: the
scorer swallows any error and scores whatever text it already has.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

import requests

from ..normalize.html_to_fields import extract_fields

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; jobrank/0.1)"


class JobDetailFetcher(ABC):
    """Resolve a job URL into ``title`` / ``companyName`` / ``description``."""

    @abstractmethod
    def fetch(self, url: str) -> Dict[str, Optional[str]]:
        raise NotImplementedError


class NullDetailFetcher(JobDetailFetcher):
    """Backfill disabled; nothing is ever found."""

    def fetch(self, url: str) -> Dict[str, Optional[str]]:
        return {}


class HttpDetailFetcher(JobDetailFetcher):
    """Fetch the posting page over HTTP and parse it with :func:`extract_fields`."""

    def __init__(self, timeout: float = 10.0, session: Optional[requests.Session] = None) -> None:
        self.timeout = timeout
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = DEFAULT_USER_AGENT
        self.session = session

    def fetch(self, url: str) -> Dict[str, Optional[str]]:
        if not url.startswith(("http://", "https://")):
            raise ValueError(f"Not an http(s) URL: {url!r}")
        resp = self.session.get(url, timeout=self.timeout)
        resp.raise_for_status()
        fields = extract_fields(resp.text, url=url)
        logger.debug("Fetched details for %s (%d chars)", url, len(fields.get("description") or ""))
        return fields
