"""Tests for the analyze orchestrator."""

from unittest.mock import patch

import pytest

from songrank.analyze import (
    analyze_ledgers,
    run_analysis,
    stack_tables,
    sync_and_analyze,
)
from songrank.config import Settings
from songrank.errors import AnalysisError
from songrank.log import LogStatus, SyncLog
from songrank.models import ReportTable
from songrank.store import MemoryTableStore
from songrank.sync import SYSTEM, run_sync
from tests.conftest import CATALOG_HEADER, catalog_row, make_ledger, submissions_table


def make_store(**tables) -> MemoryTableStore:
    base = {
        "Base": [
            CATALOG_HEADER,
            catalog_row("ID:1", "Song A", "ID:160"),
            catalog_row("ID:2", "Song B", "ID:160"),
            catalog_row("ID:3", "Song C", "ID:160"),
        ],
        "Sheet Manager": [["Tab"], ["ID:160"]],
        "Paste Rankings Here": submissions_table({
            "Alice": ["1. Song A", "2. Song B", "3. Song C"],
            "Bob": ["1. Song C", "2. Song B", "3. Song A"],
        }),
    }
    base.update(tables)
    return MemoryTableStore(base)


class TestAnalyzeLedgers:
    def setup_method(self):
        self.ledger = make_ledger("Tab", {
            "Alice": {"A": 1, "B": 2},
            "Bob": {"A": 2, "B": 1},
        })

    def test_runs_every_report(self):
        """Every registered report runs; divergence comes first."""
        outcome = analyze_ledgers([self.ledger])
        names = [r.report_name for r in outcome.results]
        assert names[0] == "Divergence"
        assert "Spice Meter" in names
        # No labels configured
        assert "Attribution Popularity" in outcome.skipped

    def test_failing_report_isolated(self):
        """A report raising doesn't stop the others."""
        with patch("songrank.stats.spice.spice_scores", side_effect=RuntimeError("boom")):
            outcome = analyze_ledgers([self.ledger])
        assert outcome.errors == {"Spice Meter": "boom"}
        assert outcome.get("Divergence") is not None

    def test_skips_logged(self):
        """Reports lacking data are skipped and logged, not failed."""
        log = SyncLog()
        outcome = analyze_ledgers([], log=log)
        assert outcome.results == []
        assert "Sleeper Songs" in outcome.skipped
        assert log.with_status(LogStatus.SKIP)

    def test_tables_for_section(self):
        """Tables are grouped by the section their report writes to."""
        outcome = analyze_ledgers([self.ledger])
        assert [t.title for t in outcome.tables_for("spice")] == [
            "THE SPICE METER (Group Breakdown)"]

    def test_to_dict(self):
        """The outcome serializes results, skips and errors."""
        outcome = analyze_ledgers([self.ledger])
        data = outcome.to_dict()
        assert set(data) == {"results", "skipped", "errors"}
        assert data["results"][0]["report_name"] == "Divergence"


def test_stack_tables():
    """Tables are stacked with two blank rows between them."""
    first = ReportTable(title="One", headers=["A"], rows=[[1]])
    second = ReportTable(title="Two", headers=["B"], rows=[])
    assert stack_tables([first, second]) == [
        ["One"], ["A"], [1], [], [], ["Two"], ["B"],
    ]


class TestRunAnalysis:
    def test_writes_report_tables(self):
        """Each section is written to its own output table."""
        store = make_store()
        run_sync(store, SyncLog())
        run_analysis(store, SyncLog())
        assert store.read_table("Opps")[0] == ["GROUP CONSENSUS SUMMARY"]
        assert store.read_table("Takes")[0] == ["GROUP: Tab - BIGGEST GLAZES"]
        assert store.read_table("Spice Index")[0] == ["THE SPICE METER (Group Breakdown)"]
        assert store.read_table("More Analysis")

    def test_divergence_placeholder(self):
        """Without shared scores the divergence table holds a notice."""
        store = make_store(Tab=[["Rank", "Song", "Points", "Average"], [1, "Song A", 0, 0]])
        run_analysis(store, SyncLog())
        assert store.read_table("Opps") == [[
            "No divergence data found across any tabs. Check shared song scores."
        ]]

    def test_unexpected_failure(self):
        """An unexpected error is logged as critical and raised as AnalysisError."""
        store = make_store()
        log = SyncLog()
        with patch("songrank.analyze.load_groups", side_effect=KeyError("bad")):
            with pytest.raises(AnalysisError, match="Check the sync log"):
                run_analysis(store, log)
        [error] = log.with_status(LogStatus.ERROR)
        assert error.detail.startswith("CRITICAL ERROR: KeyError")


class TestSyncAndAnalyze:
    def test_end_to_end(self):
        """Rankings are synced into the ledger and then analyzed."""
        store = make_store()
        log = SyncLog()
        summary, outcome = sync_and_analyze(store, log)

        assert summary.updates == 2
        assert summary.groups == ["Tab"]
        assert outcome.get("Divergence") is not None
        ledger = store.read_table("Tab")
        assert ledger[0] == ["Rank", "Song", "Points", "Average", "Alice", "Bob"]
        # Every song scores 4 points; the order is the catalog order
        assert [row[2] for row in ledger[1:]] == [4, 4, 4]

    def test_log_flushed_once(self):
        """Sync and analysis entries land in one log table."""
        store = make_store()
        log = SyncLog()
        sync_and_analyze(store, log)
        table = store.read_table("Sync Log")
        assert table[0] == ["Time", "User", "Status", "Details"]
        assert len(table) == len(log.entries) + 1

    def test_missing_catalog(self):
        """A missing catalog aborts before analysis but the log is still written."""
        store = make_store()
        del store.tables["Base"]
        log = SyncLog()
        summary, outcome = sync_and_analyze(store, log)
        assert outcome is None
        assert summary.updates == 0
        assert store.read_table("Sync Log")[1][1:3] == [SYSTEM, "Error"]

    def test_failed_analysis_keeps_sync(self):
        """Sync results survive a failed analysis."""
        store = make_store()
        log = SyncLog()
        with patch("songrank.analyze.run_analysis", side_effect=AnalysisError("x")):
            summary, outcome = sync_and_analyze(store, log)
        assert outcome is None
        assert summary.updates == 2
        assert log.with_status(LogStatus.WARNING)

    def test_custom_settings(self):
        """Table names come from the settings."""
        store = make_store()
        store.write_table("Rankings", store.read_table("Paste Rankings Here"))
        settings = Settings(submissions_table="Rankings", log_table="Log")
        sync_and_analyze(store, SyncLog(), settings)
        assert store.read_table("Log") is not None
        assert store.read_table("Sync Log") is None
