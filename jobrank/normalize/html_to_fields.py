"""
HTML to fields extractor.

This module parses the raw HTML of a job posting page into the three
fields the scorer needs when a candidate job arrives without a usable
description: title, company name and plain-text description.

Structured data is preferred: most job boards embed a schema.org
``JobPosting`` object as JSON-LD.  When none is present a rule‑based
fallback reads Open Graph tags, the first heading and the page's
paragraph and list text.  Fields that cannot be found are ``None``.
"""

from __future__ import annotations

import json
import logging
from typing import Dict, Iterable, List, Optional

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)


def html_to_text(html: str) -> str:
    """Strip tags and collapse whitespace."""
    text = BeautifulSoup(html or "", "html.parser").get_text(" ")
    return " ".join(text.split())


def _json_ld_objects(soup: BeautifulSoup) -> Iterable[Dict[str, object]]:
    for tag in soup.find_all("script", attrs={"type": "application/ld+json"}):
        try:
            data = json.loads(tag.string or "")
        except (TypeError, ValueError):
            continue
        if isinstance(data, dict):
            data = data.get("@graph", [data])
        if not isinstance(data, list):
            continue
        for item in data:
            if isinstance(item, dict):
                yield item


def _job_posting(soup: BeautifulSoup) -> Optional[Dict[str, object]]:
    for item in _json_ld_objects(soup):
        kind = item.get("@type")
        kinds = kind if isinstance(kind, list) else [kind]
        if "JobPosting" in kinds:
            return item
    return None


def _meta(soup: BeautifulSoup, prop: str) -> Optional[str]:
    tag = soup.find("meta", attrs={"property": prop}) or soup.find("meta", attrs={"name": prop})
    content = tag.get("content") if tag else None
    return content.strip() if isinstance(content, str) and content.strip() else None


def extract_fields(html: str, *, url: str | None = None) -> Dict[str, Optional[str]]:
    """Extract title, company name and description from a job posting's HTML.

    Args:
        html: Raw HTML of the job posting.
        url: Optional URL of the posting, used only for logging.

    Returns:
        A dictionary with ``title``, ``companyName`` and ``description``
        keys.  Unknown values are ``None``.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    posting = _job_posting(soup)
    if posting is not None:
        org = posting.get("hiringOrganization")
        company = org.get("name") if isinstance(org, dict) else org
        description = html_to_text(str(posting.get("description") or ""))
        logger.debug("Found JSON-LD JobPosting for %s", url)
        return {
            "title": str(posting.get("title") or "").strip() or None,
            "companyName": str(company).strip() if company else None,
            "description": description or None,
        }

    # Title: Open Graph, then the first heading, then <title>.
    heading = soup.find(["h1", "h2"])
    title = (
        _meta(soup, "og:title")
        or (heading.get_text(strip=True) if heading else None)
        or (soup.title.get_text(strip=True) if soup.title else None)
    )
    company = _meta(soup, "og:site_name")
    # Plain text description: paragraphs and list items in document order.
    blocks: List[str] = [
        tag.get_text(" ", strip=True) for tag in soup.find_all(["p", "li"])
    ]
    description = "\n".join(b for b in blocks if b) or _meta(soup, "og:description")
    return {
        "title": title or None,
        "companyName": company,
        "description": description or None,
    }
