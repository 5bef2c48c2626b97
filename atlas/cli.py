"""
ATLAS Command Line Interface (CLI)
==================================

This file provides the terminal program you run like:

    python -m atlas.cli --hdi "HDR23-24_Statistical_Annex_HDI_Table - HDI.csv"
    python -m atlas.cli --catalog-file countries.json --query "q=fra"

It demonstrates:
- Argument parsing (argparse) on top of environment settings
- A REPL loop (Read-Eval-Print Loop) for commands
- Mapping user commands to Directory operations (queries, favorites, export)

The catalog is loaded once at startup; queries never change it. Only the
favorites file is written (by `fav add` / `fav remove`).
"""

from __future__ import annotations
import argparse
import logging
import shlex
import sys
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence
from .config import Settings, load_settings
from .directory import Directory
from .errors import AtlasError
from .loader import load_directory
from .models import Country, Listing, QueryCriteria
from .outcomes import QueryOutcome

logger = logging.getLogger(__name__)

HELP = """
ATLAS commands
--------------

1) View / Inspect
   help
   stats
   show "<Country>"                 (example: show "France")
   regions
   timezones

2) Querying (parameters: q, region, timezone, timerange, page)
   query <name=value ...>           (example: query q=fra region=Europe)
   query <url query string>         (example: query "?q=an&timerange=morning&page=2")
   page <n>                         (re-run the last query on page n)

3) Favorites
   fav add "<Country>"
   fav remove "<Country>"
   favorites

4) Export (last query's full result set, or the whole catalog)
   export csv "<out.csv>"
   export json "<out.json>"

5) Report (DOCX)
   report "<out.docx>" [current|full]

6) Exit
   quit
"""


@dataclass
class Session:
    """REPL state: the directory plus the last query that ran."""
    directory: Directory
    last_criteria: Optional[QueryCriteria] = None
    last_query_text: str = ""
    last_matches: Optional[List[Country]] = None


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    ap = argparse.ArgumentParser(prog="atlas", description="Country directory with HDI data")
    src = ap.add_mutually_exclusive_group()
    src.add_argument("--catalog-url", help="REST endpoint of the country catalog")
    src.add_argument("--catalog-file", help="Load the catalog from a saved JSON file instead")
    ap.add_argument("--hdi", help="Path to the HDI table (.csv or .xlsx)")
    ap.add_argument("--favorites", help="Path to the favorites JSON file")
    ap.add_argument("--timeout", type=float, help="Catalog request timeout in seconds")
    ap.add_argument("--log-level", help="Logging level (DEBUG, INFO, WARNING, ...)")
    ap.add_argument("--query", help='Answer one query and exit, e.g. "q=fra&page=2"')
    return ap.parse_args(argv)


def _apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    overrides = {}
    if args.catalog_url:
        overrides["catalog_url"] = args.catalog_url
        overrides["catalog_file"] = None
    if args.catalog_file:
        overrides["catalog_file"] = args.catalog_file
    if args.hdi is not None:
        overrides["hdi_path"] = args.hdi
    if args.favorites is not None:
        overrides["favorites_path"] = args.favorites
    if args.timeout:
        overrides["http_timeout"] = args.timeout
    if args.log_level:
        overrides["log_level"] = args.log_level.upper()
    return replace(settings, **overrides)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the ATLAS CLI.

    1) Load settings (environment, .env, flags)
    2) Load the directory (fatal errors exit with code 1)
    3) Answer --query, or start an interactive REPL
    """
    args = _parse_args(argv)
    settings = _apply_overrides(load_settings(), args)
    configure_logging(settings.log_level)

    print("Loading directory...")
    try:
        directory = load_directory(settings)
    except AtlasError as e:
        logger.error("Startup failed: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    session = Session(directory=directory)
    if args.query is not None:
        try:
            outcome = run_query(session, args.query)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 2
        return 0 if outcome.ok else 2

    stats = directory.stats()
    print(f"Loaded {stats['countries']} countries ({stats['with_hdi']} with HDI data). Type 'help' for commands.")
    while True:
        try:
            line = input("atlas> ")
        except EOFError:
            break
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.lower() in ("quit", "exit"):
            break
        try:
            handle(session, stripped)
        except (AtlasError, ValueError, OSError) as e:
            print(f"Error: {e}")
    return 0


def run_query(session: Session, text: str) -> QueryOutcome:
    """Answer one query, remember it and print the outcome."""
    outcome = session.directory.answer(text)
    if outcome.ok:
        session.last_criteria = outcome.result.criteria
        session.last_query_text = text
        session.last_matches = outcome.result.matches
    _print_outcome(outcome)
    return outcome


def handle(session: Session, line: str) -> None:
    """Handle one CLI command line."""
    directory = session.directory

    # the rest of the line is the parameter string, quoted or not
    head, _, rest = line.partition(" ")
    if head.lower() == "query":
        rest = rest.strip()
        if len(rest) >= 2 and rest[0] in ('"', "'") and rest[-1] == rest[0]:
            rest = rest[1:-1]
        run_query(session, rest)
        return

    parts = shlex.split(line)
    cmd = parts[0].lower()

    if cmd == "help":
        print(HELP)
        return

    if cmd == "stats":
        for k, v in directory.stats().items():
            print(f"{k}: {v}")
        return

    if cmd == "regions":
        for r in directory.regions():
            print(r)
        return

    if cmd == "timezones":
        print(", ".join(directory.timezones()))
        return

    if cmd == "page":
        if session.last_criteria is None:
            print("No query yet. Use: query <params>")
            return
        if len(parts) < 2:
            raise ValueError("Usage: page <n>")
        outcome = directory.run(replace(session.last_criteria, page=max(int(parts[1]), 1)))
        if outcome.ok:
            session.last_criteria = outcome.result.criteria
        _print_outcome(outcome)
        return

    if cmd == "show":
        if len(parts) < 2:
            raise ValueError('Usage: show "<Country>"')
        c = directory.find(parts[1])
        if c is None:
            print(f"No country named {parts[1]!r}.")
            return
        _print_country(c, c.name in directory.favorites)
        return

    if cmd == "fav":
        if len(parts) < 3:
            raise ValueError('Usage: fav add|remove "<Country>"')
        action, name = parts[1].lower(), parts[2]
        if directory.find(name) is None:
            print(f"Note: {name!r} is not in the catalog.")
        changed = directory.set_favorite(name, action)
        if not changed:
            print("Nothing changed.")
        else:
            print(f"{'Added' if action == 'add' else 'Removed'} {name}.")
        return

    if cmd == "favorites":
        rows = directory.favorite_countries()
        if not rows:
            print("No favorites yet.")
        _print_rows(rows)
        return

    if cmd == "export":
        # export <csv|json> "<path>"
        if len(parts) < 3:
            print('Usage: export csv "out.csv"  OR  export json "out.json"')
            return
        fmt, out_path = parts[1].lower(), parts[2]
        rows = session.last_matches if session.last_matches is not None else list(directory.countries)
        if not rows:
            print("Nothing to export: current selection is empty.")
            return
        if fmt == "csv":
            directory.export_csv(rows, out_path)
        elif fmt == "json":
            directory.export_json(rows, out_path)
        else:
            print("Unknown export format. Use: csv or json")
            return
        print(f"Exported {len(rows)} countries to {out_path}")
        return

    if cmd == "report":
        # report "<path.docx>" [current|full]
        from .report import generate_docx_report, ReportConfig
        if len(parts) < 2:
            raise ValueError('Usage: report "<out.docx>" [current|full]')
        path = parts[1]
        scope = parts[2].lower() if len(parts) >= 3 else "current"
        if scope not in ("current", "full"):
            raise ValueError("report scope must be: current | full")
        if scope == "full" or session.last_matches is None:
            rows, label, query_text = list(directory.countries), "Full Catalog", None
        else:
            rows, label, query_text = session.last_matches, "Current Result Set", session.last_query_text
        generate_docx_report(rows, path, config=ReportConfig(query_text=query_text), scope_label=label)
        print(f"Report written to {path}")
        return

    print("Unknown command. Type 'help'.")


# ---------------- Output ----------------
def _print_outcome(outcome: QueryOutcome) -> None:
    if not outcome.ok:
        msg = outcome.message
        print(f"{msg.title}: {msg.message}")
        for s in msg.suggestions:
            print(f"  - {s}")
        return
    res = outcome.result
    if not res.listings:
        print("No countries to show.")
        return
    print(f"Page {res.current_page}/{res.total_pages} ({len(res.matches)} countries):")
    _print_rows(res.listings)


def _print_rows(rows: Sequence[Listing]) -> None:
    for row in rows:
        c = row.country
        star = "*" if row.is_favorite else " "
        hdi = f"HDI {c.hdi.value:.3f} (#{c.hdi.rank})" if not c.hdi.is_empty else "HDI n/a"
        print(f"{star} {c.flag} {c.name} | {c.capital} | {c.region} | {c.current_time} {c.timezone} | {hdi}")


def _print_country(c: Country, is_favorite: bool) -> None:
    print(f"{c.flag} {c.name}{'  (favorite)' if is_favorite else ''}")
    print(f"  Capital: {c.capital}   Region: {c.region}")
    print(f"  Population: {c.population}   Area: {c.area:,.0f} km2")
    print(f"  Languages: {', '.join(c.languages)}   Currency: {c.currency}")
    print(f"  Calling code: {c.calling_code}   Drives on the: {c.driving_side}")
    print(f"  Time zones: {', '.join(c.timezones)}   Local time: {c.current_time}")
    print(f"  Borders: {', '.join(c.borders) or '-'}")
    if c.hdi.is_empty:
        print("  HDI: no data")
    else:
        h = c.hdi
        print(f"  HDI: {h.value:.3f} (rank {h.rank}, {h.category})")
        print(f"  Life expectancy: {h.life_expectancy:.1f}   School years: {h.school_years:.1f}   GNI per capita: {h.gni_per_capita}")


if __name__ == "__main__":
    raise SystemExit(main())
