"""Tests for the résumé structure parser.

The parser is heuristic, so these tests pin down its contract on small
hand-written résumés: how roles are opened by date-range lines, how the
work-history section is isolated, and that malformed input degrades to
an empty structure instead of raising.
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest  # type: ignore

from jobrank.resume.parse_resume import (
    GENERAL_INDUSTRY,
    infer_industry,
    load_resume_text,
    parse_date,
    parse_resume_structure,
    save_structure_json,
    years_between,
)

TODAY = date(2025, 6, 1)

SAMPLE_RESUME = (
    "Jane Doe\n"
    "jane@example.com\n"
    "\n"
    "EXPERIENCE\n"
    "Senior Software Engineer | Acme Cloud Inc | Jan 2020 - Present\n"
    "Built Python APIs on AWS.\n"
    "Sales Associate at Best Auto Dealership 2012 - 2015\n"
    "Sold vehicles.\n"
    "\n"
    "EDUCATION\n"
    "BS Computer Science 2008 - 2012\n"
)


def test_parse_roles_from_experience_section() -> None:
    structure = parse_resume_structure(SAMPLE_RESUME, now=TODAY)
    assert len(structure.roles) == 2

    current, previous = structure.roles
    assert current.title == "Senior Software Engineer"
    assert current.company == "Acme Cloud Inc"
    assert current.start_date == date(2020, 1, 1)
    assert current.end_date is None
    assert current.is_current
    assert current.duration_years == 5.4
    assert current.description == "Built Python APIs on AWS."
    assert current.industry == "Technology/Software"

    assert previous.title == "Sales Associate"
    assert previous.company == "Best Auto Dealership"
    assert previous.end_date == date(2015, 1, 1)
    assert not previous.is_current
    assert previous.duration_years == 3.0
    assert previous.industry == "Automotive"


def test_education_section_is_not_parsed_as_a_role() -> None:
    structure = parse_resume_structure(SAMPLE_RESUME, now=TODAY)
    assert all("Computer Science" not in role.title for role in structure.roles)


@pytest.mark.parametrize(
    "text",
    [
        "EXPERIENCE\n"
        "Senior Engineer | Acme Software | Jan 2020 - Present\n"
        "Built APIs.\n"
        "Skills: Python, AWS\n"
        "Engineer | Beta Tech | Jan 2015 - Dec 2019\n",
        "Experience\n"
        "Developer, Acme, 2018 - 2020\n"
        "Projects: payment gateway migration\n"
        "Lead Developer, Beta, 2020 - Present\n",
    ],
)
def test_inline_labels_stay_inside_role_descriptions(text: str) -> None:
    structure = parse_resume_structure(text, now=TODAY)
    assert len(structure.roles) == 2
    assert structure.roles[0].description.endswith(("Skills: Python, AWS", "Projects: payment gateway migration"))


def test_bare_heading_with_colon_ends_section() -> None:
    text = "Experience\nEngineer | Acme | 2018 - 2020\nEducation:\nBS Physics 2014 - 2018\n"
    structure = parse_resume_structure(text, now=TODAY)
    assert [r.title for r in structure.roles] == ["Engineer"]


def test_total_and_primary_industry() -> None:
    structure = parse_resume_structure(SAMPLE_RESUME, now=TODAY)
    assert structure.total_experience_years == 8.4
    assert structure.primary_industry == "Technology/Software"


def test_overlapping_roles_are_summed_without_merging() -> None:
    text = (
        "Experience\n"
        "Engineer | Alpha Software | 2018 - 2020\n"
        "Consultant | Beta Software | 2018 - 2020\n"
    )
    structure = parse_resume_structure(text, now=TODAY)
    assert [r.duration_years for r in structure.roles] == [2.0, 2.0]
    assert structure.total_experience_years == 4.0


def test_dates_on_their_own_line_use_previous_line_as_header() -> None:
    text = (
        "Work History\n"
        "Operations Manager, Northside Charity Foundation\n"
        "03/2016 - 12/2019\n"
        "Ran fundraising events.\n"
    )
    structure = parse_resume_structure(text, now=TODAY)
    assert len(structure.roles) == 1
    role = structure.roles[0]
    assert role.title == "Operations Manager"
    assert role.company == "Northside Charity Foundation"
    assert role.start_date == date(2016, 3, 1)
    assert role.end_date == date(2019, 12, 1)
    assert role.duration_years == 3.8
    assert role.description == "Ran fundraising events."
    assert role.industry == "Nonprofit"


def test_no_heading_falls_back_to_whole_text() -> None:
    text = "Analyst | First Bank | 2019 - 2021\nReviewed loan files."
    structure = parse_resume_structure(text, now=TODAY)
    assert len(structure.roles) == 1
    assert structure.roles[0].industry == "Finance/Commercial Lending"


@pytest.mark.parametrize(
    "line",
    [
        "Consultant | Foo Ltd | 13/2018 - 2020",
        "Analyst | Bar Ltd | 1850 - 1860",
        "Engineer | Baz Ltd | 2019 - 2099",
    ],
)
def test_malformed_dates_do_not_open_a_role(line: str) -> None:
    structure = parse_resume_structure("Experience\n" + line + "\n", now=TODAY)
    assert structure.roles == []


def test_empty_resume_yields_general_structure() -> None:
    for text in ("", "Just a name and an email address, nothing else."):
        structure = parse_resume_structure(text, now=TODAY)
        assert structure.roles == []
        assert structure.primary_industry == GENERAL_INDUSTRY
        assert structure.total_experience_years == 0.0


def test_reversed_range_has_zero_duration() -> None:
    structure = parse_resume_structure("Engineer | Acme | 2020 - 2018", now=TODAY)
    assert len(structure.roles) == 1
    assert structure.roles[0].duration_years == 0.0


def test_parse_date_formats() -> None:
    assert parse_date("Sept 2019", TODAY) == date(2019, 9, 1)
    assert parse_date("March 2021", TODAY) == date(2021, 3, 1)
    assert parse_date("03/2017", TODAY) == date(2017, 3, 1)
    assert parse_date("2015", TODAY) == date(2015, 1, 1)
    assert parse_date("2030", TODAY) is None
    assert parse_date("00/2017", TODAY) is None


def test_years_between_never_negative() -> None:
    assert years_between(date(2020, 1, 1), date(2021, 1, 1)) == 1.0
    assert years_between(date(2021, 1, 1), date(2020, 1, 1)) == 0.0


def test_industry_terms_match_whole_words() -> None:
    assert infer_industry("Career Services Ltd", "career coaching") == GENERAL_INDUSTRY
    assert infer_industry("City Motors", "sold cars") == "Automotive"


def test_load_and_save(tmp_path: Path) -> None:
    resume_path = tmp_path / "resume.txt"
    resume_path.write_text(SAMPLE_RESUME, encoding="utf-8")
    text = load_resume_text(str(resume_path))
    assert text == SAMPLE_RESUME

    out = tmp_path / "structure.json"
    save_structure_json(parse_resume_structure(text, now=TODAY), str(out))
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["primary_industry"] == "Technology/Software"
    assert data["roles"][0]["start_date"] == "2020-01-01"
    assert data["roles"][0]["end_date"] is None
    assert data["roles"][0]["is_current"] is True
