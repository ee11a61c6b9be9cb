"""Orchestrator: run every registered report over the group ledgers."""

from dataclasses import dataclass, field
from typing import Any

from songrank.config import Settings
from songrank.errors import AnalysisError, ConfigurationError, InsufficientDataError
from songrank.log import LogStatus, SyncLog
from songrank.models import Catalog, Ledger, ReportResult, ReportTable
from songrank.stats import AnalysisContext, get_all_reports
from songrank.store import TableStore
from songrank.sync import SYSTEM, SyncSummary, load_groups, load_ledgers, run_sync

# Import report modules to register them, in display order
from songrank.stats import divergence  # noqa: F401
from songrank.stats import consensus  # noqa: F401
from songrank.stats import hot_takes  # noqa: F401
from songrank.stats import disputes  # noqa: F401
from songrank.stats import extremes  # noqa: F401
from songrank.stats import sleepers  # noqa: F401
from songrank.stats import attribution  # noqa: F401
from songrank.stats import outliers  # noqa: F401
from songrank.stats import spice  # noqa: F401

ANALYSIS = "Analysis"


@dataclass
class AnalysisResult:
    """All report outcomes from one analysis pass.

    Reports that could not be computed are absent from ``results`` and listed
    in ``skipped`` (name -> reason) or ``errors`` (name -> error message).
    """
    results: list[ReportResult] = field(default_factory=list)
    skipped: dict[str, str] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    def get(self, report_name: str) -> ReportResult | None:
        for result in self.results:
            if result.report_name == report_name:
                return result
        return None

    def tables_for(self, section: str) -> list[ReportTable]:
        return [t for r in self.results if r.section == section for t in r.tables]

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "results": [r.to_dict() for r in self.results],
            "skipped": self.skipped,
            "errors": self.errors,
        }


def analyze_ledgers(
    ledgers: list[Ledger],
    settings: Settings | None = None,
    catalog: Catalog | None = None,
    log: SyncLog | None = None,
) -> AnalysisResult:
    """Run all registered reports on in-memory ledgers.

    Each report is independent: one lacking data is skipped and one failing
    unexpectedly is recorded as an error, and the others still run.
    """
    log = log if log is not None else SyncLog()
    context = AnalysisContext(
        ledgers=ledgers,
        settings=settings or Settings(),
        catalog=catalog,
        log=log,
    )

    outcome = AnalysisResult()
    for report in get_all_reports():
        try:
            outcome.results.append(report.compute(context))
        except InsufficientDataError as e:
            outcome.skipped[report.name] = str(e)
            log.add(ANALYSIS, LogStatus.SKIP, f"{report.name}: {e}")
        except Exception as e:
            # Include the error in the outcome rather than failing entirely
            outcome.errors[report.name] = str(e)
            log.add(ANALYSIS, LogStatus.ERROR, f"{report.name}: {type(e).__name__}: {e}")
    return outcome


def stack_tables(tables: list[ReportTable], gap: int = 2) -> list[list[Any]]:
    """Lay tables out vertically with ``gap`` blank rows between them."""
    rows: list[list[Any]] = []
    for table in tables:
        if rows:
            rows.extend([[] for _ in range(gap)])
        rows.extend(table.to_table())
    return rows


def write_reports(store: TableStore, outcome: AnalysisResult, settings: Settings) -> None:
    """Write each report section to its output table."""
    destinations = {
        "divergence": settings.divergence_table,
        "takes": settings.takes_table,
        "more": settings.more_analysis_table,
        "spice": settings.spice_table,
    }
    for section, table_name in destinations.items():
        tables = outcome.tables_for(section)
        if tables:
            store.write_table(table_name, stack_tables(tables))
        elif section == "divergence":
            store.write_table(table_name, [[
                "No divergence data found across any tabs. Check shared song scores."
            ]])


def run_analysis(
    store: TableStore, log: SyncLog, settings: Settings | None = None
) -> AnalysisResult:
    """Load every group ledger from the store, analyze, and write the reports.

    Raises:
        AnalysisError: If anything escapes the per-report isolation; the
            full detail is in the log
    """
    settings = settings or Settings()
    log.add(ANALYSIS, LogStatus.INFO, "Initiating full analysis sequence")
    try:
        groups = load_groups(store, settings)
        log.add(ANALYSIS, LogStatus.INFO, f"Targeting {len(groups)} potential group tabs")
        ledgers = load_ledgers(store, groups, log)

        catalog_rows = store.read_table(settings.catalog_table)
        catalog = Catalog.from_table(catalog_rows) if catalog_rows else None

        outcome = analyze_ledgers(ledgers, settings, catalog, log)
        write_reports(store, outcome, settings)
    except Exception as e:
        log.add(ANALYSIS, LogStatus.ERROR, f"CRITICAL ERROR: {type(e).__name__}: {e}")
        raise AnalysisError("Analysis encountered an error. Check the sync log.") from e

    log.add(ANALYSIS, LogStatus.INFO, f"Analysis complete: {len(outcome.results)} reports")
    return outcome


def sync_and_analyze(
    store: TableStore, log: SyncLog, settings: Settings | None = None
) -> tuple[SyncSummary, AnalysisResult | None]:
    """Sync every ledger, run the full analysis, then flush the log once.

    A missing catalog aborts the whole pass with an empty summary. A failed
    analysis doesn't undo the sync: the summary is still returned, with None
    in place of the analysis result.
    """
    settings = settings or Settings()
    outcome = None
    try:
        summary = run_sync(store, log, settings)
    except ConfigurationError as e:
        log.add(SYSTEM, LogStatus.ERROR, str(e))
        log.flush(store, settings.log_table)
        return SyncSummary(), None

    log.add(
        SYSTEM, LogStatus.INFO,
        f"Sync complete! Updates: {summary.updates}, Cleared: {summary.cleared}.",
    )
    try:
        outcome = run_analysis(store, log, settings)
    except AnalysisError:
        log.add(SYSTEM, LogStatus.WARNING, "Sync finished, but analysis encountered an error.")
    log.flush(store, settings.log_table)
    return summary, outcome
