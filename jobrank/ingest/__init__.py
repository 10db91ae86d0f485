"""
Collaborators that reach out to job boards.

Only detail backfill lives here: given a posting URL, return its title,
company and description.  Scraping strategy is the fetcher's concern;
the ranking pipeline depends on the :class:`JobDetailFetcher` interface
alone.
"""

from .detail_fetcher import HttpDetailFetcher, JobDetailFetcher, NullDetailFetcher  # noqa: F401
