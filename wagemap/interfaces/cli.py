"""
interfaces/cli.py
──────────────────────────────────────────────────────────────────────────────
Command-line interface for the county wage-level classifier.

Usage:
  # Nationwide level counts for an occupation and salary
  python -m wagemap.interfaces.cli --occupation 15-1252 --salary 150,000

  # One state, plus the popup for a county (by GEOID)
  python -m wagemap.interfaces.cli -o 15-1252 -s 95000 --state CA --county 06037

  # With H-1B lottery odds, as JSON
  python -m wagemap.interfaces.cli -o 15-1252 -s 95000 --county 06037 --lottery --json

  # Via installed entry-point (pyproject.toml [project.scripts])
  wagemap --occupation "Software Developers" --salary 120000

Exit codes:
  0 — success
  1 — fatal error (data source, fetch failure)
  2 — argument error
"""
from __future__ import annotations

import argparse
import json
import logging
import sys

from wagemap.domain.models import FetchOutcome, PopupContent
from wagemap.services.container import build_session, get_occupation_directory
from wagemap.services.formatting import format_currency
from wagemap.services.popup import summarize_levels

logger = logging.getLogger(__name__)


# ── Argument parser ────────────────────────────────────────────────────────

def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="wagemap",
        description="Classify US counties into prevailing wage levels for an occupation and salary.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument(
        "--occupation", "-o",
        metavar="CODE",
        help="SOC code, parent key or exact occupation title. (default: DEFAULT_OCCUPATION)",
    )
    p.add_argument(
        "--salary", "-s",
        metavar="AMOUNT",
        help="Annual base salary, e.g. 150,000. (default: DEFAULT_SALARY)",
    )
    p.add_argument(
        "--state",
        metavar="AB",
        default="",
        help="Two-letter state abbreviation to summarise.",
    )
    p.add_argument(
        "--county",
        metavar="GEOID",
        default="",
        help="County GEOID whose popup should be shown.",
    )
    p.add_argument(
        "--lottery",
        action="store_true",
        help="Include H-1B lottery selection odds in the popup.",
    )
    p.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output results as JSON.",
    )
    p.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging.",
    )
    return p


# ── Formatting helpers ─────────────────────────────────────────────────────

def _print_popup_text(content: PopupContent) -> None:
    print(f"\n{content.title}  [{content.label}]")
    if content.selection_line:
        print(f"  {content.selection_line}")
    for row in content.level_rows:
        marker = "▶" if row.is_active else " "
        chance = f"  {row.probability}%" if row.probability is not None else ""
        print(f"  {marker} {row.label:<6} {row.salary_floor:>10}{chance}")
    if content.lottery_note:
        print(f"  {content.lottery_note}")


def _print_summary_text(occupation: str, salary: float | None, scope: str, counts: dict[str, int]) -> None:
    salary_text = f"${format_currency(salary)}/yr" if salary is not None else "—"
    print(f"\n{'─' * 60}")
    print(f"Occupation : {occupation}")
    print(f"Salary     : {salary_text}")
    print(f"Scope      : {scope}")
    print(f"{'─' * 60}")
    for label, count in counts.items():
        print(f"  {label:<15} {count:>6}")


# ── Main logic ─────────────────────────────────────────────────────────────

def _resolve_occupation(query: str) -> str:
    """Map user input to a parent key; fall back to the raw text."""
    try:
        directory = get_occupation_directory()
    except Exception as exc:
        logger.warning("Occupation directory unavailable (%s); using %r as-is", exc, query)
        return query
    return directory.resolve(query) or query


def run(args: argparse.Namespace) -> int:
    """Execute classification for the given arguments.

    Returns:
        Exit code (0 = success, 1 = error, 2 = bad input).
    """
    try:
        session = build_session()
    except Exception as exc:
        logger.exception("Failed to initialise session")
        print(f"ERROR: Session initialisation failed: {exc}", file=sys.stderr)
        return 1

    with session:
        if args.salary is not None and not session.set_salary(args.salary):
            print(f"ERROR: Not a salary: {args.salary!r}", file=sys.stderr)
            return 2

        occupation = args.occupation or session.state.occupation_code
        key = _resolve_occupation(occupation)
        outcome = session.set_occupation(key).result()
        if outcome is not FetchOutcome.APPLIED:
            print(f"ERROR: No wage table for occupation {key!r} ({outcome.value})", file=sys.stderr)
            return 1

        if args.state:
            if args.state.upper() not in session.index.state_abbrevs:
                print(f"ERROR: Unknown state {args.state!r}", file=sys.stderr)
                return 2
            session.set_state(args.state)
        if args.lottery:
            session.toggle_lottery()
        popup = session.set_county(args.county) if args.county else None
        if args.county and popup is None:
            print(f"ERROR: Unknown county {args.county!r}", file=sys.stderr)
            return 2

        state = session.state
        scope = state.selected_state or "All states"
        counts = summarize_levels(session.view, state.selected_state or None)

        if args.json_output:
            payload = {
                "occupation": key,
                "salary": state.salary,
                "scope": scope,
                "counts": counts,
                "popup": popup.content.to_dict() if popup else None,
            }
            print(json.dumps(payload, indent=2, ensure_ascii=False))
        else:
            _print_summary_text(key, state.salary, scope, counts)
            if popup:
                _print_popup_text(popup.content)
            print()

    return 0


def main() -> None:
    """Entry point for the wagemap console script."""
    parser = _build_parser()
    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )

    sys.exit(run(args))


if __name__ == "__main__":
    main()
