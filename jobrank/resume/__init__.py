"""
Résumé parsing, keyword weighting and embedding utilities.

This package turns unstructured résumé text into the context the
ranking stages work with: a list of dated roles with inferred
industries, a ranked set of weighted keywords, and (optionally) an
embedding vector for semantic similarity.
"""

from .parse_resume import load_resume_text, parse_resume_structure  # noqa: F401
from .keywords import extract_weighted_keywords  # noqa: F401
from .embed import get_embedding_provider  # noqa: F401
