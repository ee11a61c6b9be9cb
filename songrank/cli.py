"""Command-line entry point: run sync and analysis over a directory of CSV tables.

Usage:
    songrank sync data/
    songrank membership data/
    songrank analyze data/ --settings settings.json
    songrank diagnose data/
    songrank artists data/
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from songrank.analyze import run_analysis, sync_and_analyze
from songrank.config import Settings
from songrank.errors import AnalysisError, ConfigurationError
from songrank.log import SyncLog, configure_logging
from songrank.membership import build_artist_reference, diagnose_groups
from songrank.models import Ledger
from songrank.store import CsvDirectoryStore
from songrank.sync import load_catalog, load_groups, run_sync

logger = logging.getLogger("songrank")


def load_settings(path: str | None) -> Settings:
    if not path:
        return Settings()
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return Settings.from_dict(data)


def cmd_sync(store: CsvDirectoryStore, settings: Settings) -> int:
    log = SyncLog()
    summary, outcome = sync_and_analyze(store, log, settings)
    print(f"Updates: {summary.updates}, Cleared: {summary.cleared}, "
          f"Groups: {len(summary.groups)}")
    if outcome is not None:
        print(f"Reports: {len(outcome.results)} written, "
              f"{len(outcome.skipped)} skipped, {len(outcome.errors)} failed")
    return 0 if summary.groups else 1


def cmd_membership(store: CsvDirectoryStore, settings: Settings) -> int:
    log = SyncLog()
    try:
        summary = run_sync(store, log, settings, membership_only=True)
    finally:
        log.flush(store, settings.log_table)
    print(f"Membership synced for {len(summary.groups)} groups")
    return 0


def cmd_analyze(store: CsvDirectoryStore, settings: Settings) -> int:
    log = SyncLog()
    try:
        outcome = run_analysis(store, log, settings)
    finally:
        log.flush(store, settings.log_table)
    for result in outcome.results:
        print(f"  {result.report_name}: {len(result.tables)} tables")
    for name, reason in outcome.skipped.items():
        print(f"  {name}: skipped ({reason})")
    for name, error in outcome.errors.items():
        print(f"  {name}: ERROR {error}")
    return 0


def cmd_diagnose(store: CsvDirectoryStore, settings: Settings) -> int:
    catalog = load_catalog(store, settings)
    ledgers = {}
    for group in load_groups(store, settings):
        rows = store.read_table(group.name)
        ledgers[group.name] = Ledger.from_table(group.name, rows) if rows is not None else None

    for entry in diagnose_groups(store.read_table(settings.config_table), catalog, ledgers):
        print(f"{entry['group']}: {entry['matched']} songs matched "
              f"from {len(entry['terms'])} terms")
        for term in entry["missed_terms"]:
            print(f"    no match for: {term!r}")

        check = entry["ledger"]
        if not check["table_found"]:
            print("    ledger table not found; run membership sync")
            continue
        users = ", ".join(check["user_columns"]) or "none"
        print(f"    {check['rows']} rows, user columns: {users}")
        if check["matrix_ready"]:
            print(f"    matrix ready: {check['complete_rows']} songs ranked by every user")
        elif len(check["user_columns"]) < 2:
            print("    matrix not ready: needs at least 2 user columns")
        else:
            print("    matrix not ready: no song ranked by every user")
        for user, count in check["coverage"].items():
            print(f"    {user} has scores for {count}/{check['rows']} songs")
    return 0


def cmd_artists(store: CsvDirectoryStore, settings: Settings) -> int:
    table = build_artist_reference(load_catalog(store, settings))
    store.write_table("Artist Reference", table.to_table())
    print(f"Wrote {len(table.rows)} artists to 'Artist Reference'")
    return 0


COMMANDS = {
    "sync": (cmd_sync, "Sync every ledger from the pasted rankings, then analyze"),
    "membership": (cmd_membership, "Rebuild group song lists only"),
    "analyze": (cmd_analyze, "Analyze the ledgers as they are"),
    "diagnose": (cmd_diagnose, "Show which group terms match nothing"),
    "artists": (cmd_artists, "Write the artist reference table"),
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="songrank",
        description="Reconcile song rankings and compute comparative statistics")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Show debug-level log output")
    subparsers = parser.add_subparsers(dest="command", required=True)
    for name, (_, help_text) in COMMANDS.items():
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("directory", help="Directory holding one CSV file per table")
        sub.add_argument("--settings", help="JSON file of setting overrides")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        settings = load_settings(args.settings)
    except (OSError, ValueError) as e:
        logger.error("Could not load settings: %s", e)
        return 2

    store = CsvDirectoryStore(args.directory)
    command, _ = COMMANDS[args.command]
    try:
        return command(store, settings)
    except (ConfigurationError, AnalysisError) as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
