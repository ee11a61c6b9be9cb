"""Orchestrator: distribute pasted rankings into every group ledger."""

from dataclasses import dataclass, field
from typing import Any

from songrank.config import Settings
from songrank.errors import ConfigurationError, NoValidRankingsError
from songrank.ledger import clear_absent_users, sort_by_points, sync_membership, sync_scores
from songrank.log import LogStatus, SyncLog
from songrank.membership import Group, resolve_groups
from songrank.models import Catalog, Ledger, Submission
from songrank.normalize import normalize_ranking
from songrank.rank_parser import parse_submissions
from songrank.store import TableStore

SYSTEM = "System"


@dataclass
class SyncSummary:
    """Counts from one sync pass."""
    updates: int = 0
    cleared: int = 0
    groups: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"updates": self.updates, "cleared": self.cleared, "groups": self.groups}


def load_catalog(store: TableStore, settings: Settings) -> Catalog:
    """Read the song catalog.

    Raises:
        ConfigurationError: If the catalog table doesn't exist
    """
    rows = store.read_table(settings.catalog_table)
    if rows is None:
        raise ConfigurationError(f"{settings.catalog_table} sheet not found!")
    return Catalog.from_table(rows)


def load_groups(store: TableStore, settings: Settings) -> list[Group]:
    return resolve_groups(store.read_table(settings.config_table))


def load_ledgers(
    store: TableStore, groups: list[Group], log: SyncLog | None = None
) -> list[Ledger]:
    """Read every group's ledger, skipping groups whose table is missing."""
    ledgers = []
    for group in groups:
        rows = store.read_table(group.name)
        if rows is None:
            if log is not None:
                log.add(group.name, LogStatus.SKIP, f"{group.name} sheet not found")
            continue
        ledgers.append(Ledger.from_table(group.name, rows))
    return ledgers


def run_membership_sync(
    store: TableStore,
    log: SyncLog,
    settings: Settings | None = None,
    catalog: Catalog | None = None,
) -> list[Ledger]:
    """Rebuild every group's song rows from the catalog and write them back.

    Raises:
        ConfigurationError: If the catalog table doesn't exist
    """
    settings = settings or Settings()
    catalog = catalog or load_catalog(store, settings)
    groups = load_groups(store, settings)
    if not groups:
        log.add(SYSTEM, LogStatus.WARNING, "No groups defined in the group config table")
        return []

    ledgers = []
    for group in groups:
        try:
            rows = store.read_table(group.name)
            existing = Ledger.from_table(group.name, rows) if rows else None
            ledger = sync_membership(existing, group, catalog)
            store.write_table(group.name, ledger.to_table())
            ledgers.append(ledger)
            log.add(group.name, LogStatus.INFO, f"Membership synced: {ledger.num_items} songs")
        except Exception as e:
            log.add(group.name, LogStatus.ERROR, f"Membership sync failed: {e}")
    return ledgers


def _sync_group(
    ledger: Ledger,
    submissions: dict[str, Submission],
    log: SyncLog,
    summary: SyncSummary,
) -> None:
    for name in clear_absent_users(ledger, list(submissions)):
        summary.cleared += 1
        log.add(
            SYSTEM, LogStatus.CLEANUP,
            f'Cleared user "{name}" from tab "{ledger.group}" '
            f"(not found in master paste list).",
        )

    for user, submission in submissions.items():
        ranking = normalize_ranking(submission.entries, ledger.item_names)
        if not ranking.ranks:
            log.add(user, LogStatus.SKIP, f'Tab "{ledger.group}": 0 songs matched.')
            continue

        sync_scores(ledger, user, ranking)
        summary.updates += 1
        detail = (
            f'Tab "{ledger.group}": matched {ranking.matched}/{submission.count} songs.'
        )
        if ranking.unmatched:
            detail += " Missed: " + ", ".join(ranking.unmatched)
        log.add(user, LogStatus.SUCCESS, detail)

    sort_by_points(ledger)


def run_sync(
    store: TableStore,
    log: SyncLog,
    settings: Settings | None = None,
    membership_only: bool = False,
) -> SyncSummary:
    """Run a full sync pass: membership first, then every user's scores.

    Failures in one group are logged and don't stop the others. A missing
    catalog aborts the pass.

    Args:
        store: The backing table store
        log: Sink for per-user and per-group status entries
        settings: Table names and thresholds
        membership_only: Only rebuild song rows; leave scores untouched

    Returns:
        SyncSummary with update and cleanup counts

    Raises:
        ConfigurationError: If the catalog table doesn't exist
    """
    settings = settings or Settings()
    summary = SyncSummary()

    ledgers = run_membership_sync(store, log, settings)
    summary.groups = [ledger.group for ledger in ledgers]
    if membership_only or not ledgers:
        return summary

    table = store.read_table(settings.submissions_table)
    if table is None or len(table) < 1 or max(len(r) for r in table) < 2:
        log.add(SYSTEM, LogStatus.ERROR, "No user columns found starting from Column B")
        return summary
    try:
        submissions = parse_submissions(table, log)
    except NoValidRankingsError as e:
        log.add(SYSTEM, LogStatus.ERROR, str(e))
        return summary

    for ledger in ledgers:
        if not ledger.rows:
            log.add(ledger.group, LogStatus.SKIP, f"{ledger.group} has no songs")
            continue
        try:
            _sync_group(ledger, submissions, log, summary)
            store.write_table(ledger.group, ledger.to_table())
        except Exception as e:
            log.add(ledger.group, LogStatus.ERROR, f"Score sync failed: {e}")

    return summary
