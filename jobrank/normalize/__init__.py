"""
Job data shapes and HTML normalisation.

``schema`` holds the request/response dataclasses of the ranking
pipeline; ``html_to_fields`` turns a posting page into plain fields.
"""

from .schema import CandidateJob, ScoredJob  # noqa: F401
