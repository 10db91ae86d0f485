"""
Résumé structure parser.

This module turns free-text résumé content into a list of work-history
roles with tenure and an inferred industry.  It is deliberately
heuristic: the work-history section is located by its heading, each
line carrying a date range (``Jan 2019 – Present``, ``2015 - 2018``,
``03/2017 – 11/2020``) opens a new role, and the lines that follow are
accumulated into that role's description.

The parser never raises on odd input.  Date ranges whose dates cannot
be understood simply do not open a role, and a résumé without any
recognisable role yields an empty structure in the ``General``
industry with zero years of experience.

Role durations are summed as-is into ``total_experience_years``;
overlapping roles are *not* merged, so two concurrent jobs count twice.
"""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

# Optional imports for document handling.  These libraries enable
# extraction of text from PDF and DOCX files.
try:
    import pdfplumber  # type: ignore
except ImportError:
    pdfplumber = None  # type: ignore
try:
    import docx  # type: ignore
except ImportError:
    docx = None  # type: ignore

GENERAL_INDUSTRY = "General"

_MONTHS: Dict[str, int] = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}
_MONTH_NAME = (
    r"(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|"
    r"aug(?:ust)?|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)"
)
_DATE = rf"(?:{_MONTH_NAME}\.?\s+\d{{4}}|\d{{1,2}}/\d{{4}}|\d{{4}})"
DATE_RANGE_RE = re.compile(
    rf"\b(?P<start>{_DATE})\s*(?:-|–|—|\bto\b)\s*(?P<end>{_DATE}|present|current|now)\b",
    re.IGNORECASE,
)

EXPERIENCE_HEADING_RE = re.compile(
    r"^\s*(?:professional\s+|work\s+|relevant\s+)?"
    r"(?:experience|work\s+history|employment(?:\s+history)?|career\s+history)\s*:?\s*$",
    re.IGNORECASE,
)
SECTION_END_RE = re.compile(
    r"^\s*(?:education|skills|technical\s+skills|core\s+competencies|certifications?|"
    r"projects|awards|publications|references|languages|interests)\s*:?\s*$",
    re.IGNORECASE,
)
_PART_SEPARATOR_RE = re.compile(r"\s*(?:\||,|•|·|\s@\s|\s+at\s+|\s[-–—]\s)\s*")
_PART_STRIP = " \t-–—|,•·()[]"

INDUSTRY_LEXICON: Dict[str, List[str]] = {
    "Finance/Commercial Lending": [
        "loan", "lending", "credit", "finance", "financial", "bank", "banking",
        "mortgage", "commercial lending", "underwriting",
    ],
    "Technology/Software": [
        "software", "code", "coding", "developer", "engineering", "tech",
        "technology", "api", "cloud", "saas",
    ],
    "Sales/Business Development": [
        "sales", "business development", "account", "client", "revenue", "bd",
    ],
    "Automotive": ["car", "vehicle", "auto", "dealership", "automotive"],
    "Construction": ["construction", "contractor", "building", "renovation", "electrical"],
    "Nonprofit": ["nonprofit", "non-profit", "charity", "foundation", "fundraising", "volunteer"],
}

# Terms are matched as whole words (with an optional plural) so that
# e.g. "car" does not fire on "career".
_INDUSTRY_PATTERNS: List[Tuple[str, re.Pattern]] = [
    (
        industry,
        re.compile(r"\b(?:" + "|".join(re.escape(t) for t in terms) + r")(?:s|es)?\b"),
    )
    for industry, terms in INDUSTRY_LEXICON.items()
]


@dataclass
class ResumeRole:
    """One employment stint parsed from free text."""

    title: str
    company: str
    start_date: date
    end_date: Optional[date]  # None means the role is current
    duration_years: float
    description: str = ""
    industry: str = GENERAL_INDUSTRY

    @property
    def is_current(self) -> bool:
        return self.end_date is None


@dataclass
class ResumeStructure:
    roles: List[ResumeRole] = field(default_factory=list)
    total_experience_years: float = 0.0
    primary_industry: str = GENERAL_INDUSTRY

    def to_dict(self) -> Dict[str, object]:
        roles = []
        for role in self.roles:
            data = asdict(role)
            data["start_date"] = role.start_date.isoformat()
            data["end_date"] = role.end_date.isoformat() if role.end_date else None
            data["is_current"] = role.is_current
            roles.append(data)
        return {
            "roles": roles,
            "total_experience_years": self.total_experience_years,
            "primary_industry": self.primary_industry,
        }


def parse_date(value: str, now: Optional[date] = None) -> Optional[date]:
    """Parse one side of a date range.

    Accepts ``Month YYYY`` (full or abbreviated month name), ``MM/YYYY``
    and a bare ``YYYY`` (taken as January).  Returns ``None`` when the
    month is out of range or the year is implausible.
    """
    today = now or date.today()
    text = value.strip().lower().rstrip(".")
    month = 1
    if "/" in text:
        month_str, _, year_str = text.partition("/")
        month = int(month_str)
    elif text[:1].isalpha():
        name, _, year_str = text.partition(" ")
        month = _MONTHS.get(name[:3], 0)
        year_str = year_str.strip()
    else:
        year_str = text
    try:
        year = int(year_str)
    except ValueError:
        return None
    if not 1 <= month <= 12 or not 1900 <= year <= today.year + 1:
        return None
    return date(year, month, 1)


def years_between(start: date, end: date) -> float:
    """Elapsed years between two dates, rounded to one decimal and never negative."""
    return max(0.0, round((end - start).days / 365.25, 1))


def infer_industry(company: str, description: str) -> str:
    """Return the first lexicon industry whose terms appear in the role text."""
    text = f"{company} {description}".lower()
    for industry, pattern in _INDUSTRY_PATTERNS:
        if pattern.search(text):
            return industry
    return GENERAL_INDUSTRY


def _experience_lines(text: str) -> List[str]:
    """Return the lines of the work-history section, or of the whole text."""
    lines = [line.strip() for line in text.splitlines()]
    start = next((i for i, line in enumerate(lines) if EXPERIENCE_HEADING_RE.match(line)), None)
    if start is None:
        return [line for line in lines if line]
    section: List[str] = []
    for line in lines[start + 1:]:
        if SECTION_END_RE.match(line):
            break
        if line:
            section.append(line)
    return section


def _split_header(text: str) -> List[str]:
    parts = [p.strip(_PART_STRIP) for p in _PART_SEPARATOR_RE.split(text)]
    return [p for p in parts if p]


def parse_resume_structure(text: str, now: Optional[date] = None) -> ResumeStructure:
    """Parse résumé text into roles, total experience and primary industry.

    Args:
        text: Raw résumé text.
        now: Reference date used for open-ended roles and date sanity
            checks.  Defaults to today.

    Returns:
        A :class:`ResumeStructure`.  Empty (``General``, ``0.0`` years)
        when no role could be found.
    """
    today = now or date.today()
    pending: List[Dict[str, object]] = []
    preamble: List[str] = []

    for line in _experience_lines(text or ""):
        match = DATE_RANGE_RE.search(line)
        start = end = None
        if match:
            start = parse_date(match.group("start"), today)
            end_raw = match.group("end")
            if start is not None and end_raw.lower() not in ("present", "current", "now"):
                end = parse_date(end_raw, today)
                if end is None:
                    start = None
        if start is None:
            (pending[-1]["lines"] if pending else preamble).append(line)  # type: ignore[union-attr]
            continue

        parts = _split_header(line[: match.start()] + " " + line[match.end():])
        if not parts:
            # Dates on their own line: the header is the line just above.
            previous = pending[-1]["lines"] if pending else preamble
            if previous:
                parts = _split_header(previous.pop())  # type: ignore[union-attr]
        pending.append({
            "title": parts[0] if parts else "Unknown",
            "company": parts[1] if len(parts) > 1 else "Unknown",
            "start": start,
            "end": end,
            "lines": list(parts[2:]),
        })

    roles: List[ResumeRole] = []
    for item in pending:
        description = " ".join(item["lines"])  # type: ignore[arg-type]
        start_date: date = item["start"]  # type: ignore[assignment]
        end_date: Optional[date] = item["end"]  # type: ignore[assignment]
        roles.append(
            ResumeRole(
                title=str(item["title"]),
                company=str(item["company"]),
                start_date=start_date,
                end_date=end_date,
                duration_years=years_between(start_date, end_date or today),
                description=description,
                industry=infer_industry(str(item["company"]), description),
            )
        )

    industry_years: Dict[str, float] = {}
    for role in roles:
        industry_years[role.industry] = industry_years.get(role.industry, 0.0) + role.duration_years
    # max() keeps the first industry seen among equal totals.
    primary = max(industry_years, key=industry_years.__getitem__) if industry_years else GENERAL_INDUSTRY
    total = round(sum(role.duration_years for role in roles), 1)

    structure = ResumeStructure(roles=roles, total_experience_years=total, primary_industry=primary)
    logger.debug(
        "Parsed %d roles (%.1f years, primary industry %s)", len(roles), total, primary
    )
    return structure


def load_resume_text(file_path: str) -> str:
    """Extract text from a résumé file.

    Plain text files are read as UTF‑8.  PDF and DOCX formats use
    ``pdfplumber`` and ``python‑docx``.

    Args:
        file_path: Path to the résumé file.

    Returns:
        A single string containing the extracted text.

    Raises:
        FileNotFoundError: If the file does not exist.
        RuntimeError: If the library needed for the file type is missing.
    """
    ext = os.path.splitext(file_path)[1].lower()
    if ext == ".pdf":
        if pdfplumber is None:
            raise RuntimeError("pdfplumber is required to read PDF résumés; install it via pip")
        pages: List[str] = []
        with pdfplumber.open(file_path) as pdf:
            for page in pdf.pages:
                pages.append(page.extract_text() or "")
        return "\n".join(pages)
    if ext in {".doc", ".docx"}:
        if docx is None:
            raise RuntimeError(
                "python-docx is required to parse Word résumés; install it via pip"
            )
        document = docx.Document(file_path)
        return "\n".join(p.text for p in document.paragraphs)
    with open(file_path, "r", encoding="utf-8") as f:
        return f.read()


def save_structure_json(structure: ResumeStructure, out_path: str) -> None:
    """Serialize a parsed :class:`ResumeStructure` to JSON."""
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(structure.to_dict(), f, indent=2)
    logger.info("Wrote résumé structure to %s", out_path)
