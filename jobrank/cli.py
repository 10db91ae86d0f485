"""
Command line interface for jobrank.

This module exposes subcommands for each part of the ranking flow:
parsing a résumé into dated roles, listing its weighted keywords, and
ranking a file of candidate jobs against it.  The CLI is intentionally
lightweight and delegates the work to the `resume`, `rank` and
`service` modules.

Examples::

    jobrank resume parse --file resume.pdf --out resume.json
    jobrank resume keywords --file resume.txt --top 10
    jobrank rank --resume resume.txt --jobs jobs.yaml --out rankings.json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List

import yaml  # type: ignore

from .config import build_pipeline, load_settings
from .resume.keywords import build_search_query, extract_weighted_keywords
from .resume.parse_resume import load_resume_text, parse_resume_structure, save_structure_json
from .service import handle_rank_request

logger = logging.getLogger("jobrank.cli")

CLI_USER = "cli"


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _load_jobs(path: str) -> List[Dict[str, object]]:
    """Load candidate jobs from a JSON or YAML file.

    The file holds either a list of job objects or a mapping with a
    ``jobs`` list.
    """
    with open(path, "r", encoding="utf-8") as f:
        if Path(path).suffix.lower() in {".yaml", ".yml"}:
            data = yaml.safe_load(f)
        else:
            data = json.load(f)
    if isinstance(data, dict):
        data = data.get("jobs")
    if not isinstance(data, list):
        raise ValueError(f"{path} does not contain a list of jobs")
    return data


def cmd_resume_parse(args: argparse.Namespace) -> int:
    """Parse a résumé into roles and print or save the structure."""
    structure = parse_resume_structure(load_resume_text(args.file))
    if args.out:
        save_structure_json(structure, args.out)
    else:
        _print_json(structure.to_dict())
    return 0


def cmd_resume_keywords(args: argparse.Namespace) -> int:
    """Print the résumé's highest weighted keywords."""
    result = extract_weighted_keywords(load_resume_text(args.file))
    data = result.to_dict()
    data["keywords"] = data["keywords"][: args.top]
    data["search_query"] = build_search_query(result)
    _print_json(data)
    return 0


def cmd_rank(args: argparse.Namespace) -> int:
    """Rank a jobs file against a résumé and print or save the response."""
    settings = load_settings(args.config)
    body = {"jobs": _load_jobs(args.jobs), "resumeText": load_resume_text(args.resume)}
    response = handle_rank_request(body, CLI_USER, pipeline=build_pipeline(settings))
    if args.out:
        with open(args.out, "w", encoding="utf-8") as f:
            json.dump(response.payload, f, indent=2, ensure_ascii=False)
        logger.info("Wrote response (status %d) to %s", response.status, args.out)
    else:
        _print_json(response.payload)
    if response.status != 200:
        logger.error("Ranking failed with status %d: %s", response.status, response.payload.get("error"))
        return 1
    return 0


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="jobrank", description="Résumé-driven job ranking")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # Resume
    resume_parser = subparsers.add_parser("resume", help="Résumé related commands")
    resume_sub = resume_parser.add_subparsers(dest="subcommand", required=True)
    parse_cmd = resume_sub.add_parser("parse", help="Parse a résumé into dated roles")
    parse_cmd.add_argument("--file", required=True, help="Path to résumé file (txt, pdf, docx)")
    parse_cmd.add_argument("--out", help="Write the structure JSON here instead of stdout")
    parse_cmd.set_defaults(func=cmd_resume_parse)

    keywords_cmd = resume_sub.add_parser("keywords", help="List weighted résumé keywords")
    keywords_cmd.add_argument("--file", required=True, help="Path to résumé file (txt, pdf, docx)")
    keywords_cmd.add_argument("--top", type=int, default=18, help="Number of weighted keywords to show")
    keywords_cmd.set_defaults(func=cmd_resume_keywords)

    # Rank
    rank_cmd = subparsers.add_parser("rank", help="Rank candidate jobs against a résumé")
    rank_cmd.add_argument("--resume", required=True, help="Path to résumé file (txt, pdf, docx)")
    rank_cmd.add_argument("--jobs", required=True, help="JSON or YAML file of candidate jobs")
    rank_cmd.add_argument("--config", help="Optional YAML settings file")
    rank_cmd.add_argument("--out", help="Write the response JSON here instead of stdout")
    rank_cmd.set_defaults(func=cmd_rank)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
