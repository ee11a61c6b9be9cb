"""Tests for the sync orchestrator."""

import pytest

from songrank.config import Settings
from songrank.errors import ConfigurationError
from songrank.log import LogStatus, SyncLog
from songrank.store import MemoryTableStore
from songrank.sync import SYSTEM, load_ledgers, run_membership_sync, run_sync
from songrank.membership import resolve_groups
from tests.conftest import CATALOG_HEADER, catalog_row, submissions_table


def make_store(submissions: dict[str, list[str]] | None = None, **tables) -> MemoryTableStore:
    base = {
        "Base": [
            CATALOG_HEADER,
            catalog_row("ID:1", "Song X", "ID:160"),
            catalog_row("ID:2", "Song Y", "ID:160"),
            catalog_row("ID:3", "Song Z", "ID:170"),
        ],
        "Sheet Manager": [["Tab A", "Tab B"], ["ID:160", "Song Z"]],
    }
    if submissions is not None:
        base["Paste Rankings Here"] = submissions_table(submissions)
    base.update(tables)
    return MemoryTableStore(base)


class TestRunMembershipSync:
    def test_builds_ledgers(self):
        """Each group gets a ledger of its matched songs and no users yet."""
        store = make_store()
        ledgers = run_membership_sync(store, SyncLog())
        assert [ledger.group for ledger in ledgers] == ["Tab A", "Tab B"]
        assert [row[1] for row in store.read_table("Tab A")[1:]] == ["Song X", "Song Y"]
        assert store.read_table("Tab B")[0] == ["Rank", "Song", "Points", "Average"]

    def test_missing_catalog(self):
        """Without a catalog there is nothing to sync."""
        store = MemoryTableStore({"Sheet Manager": [["Tab A"], ["x"]]})
        with pytest.raises(ConfigurationError):
            run_membership_sync(store, SyncLog())

    def test_no_groups_warns(self):
        """An empty config is a warning, not an error."""
        store = make_store(**{"Sheet Manager": []})
        log = SyncLog()
        assert run_membership_sync(store, log) == []
        assert [e.subject for e in log.with_status(LogStatus.WARNING)] == [SYSTEM]

    def test_idempotent(self):
        """Running twice leaves the ledgers unchanged."""
        store = make_store()
        run_membership_sync(store, SyncLog())
        first = store.read_table("Tab A")
        run_membership_sync(store, SyncLog())
        assert store.read_table("Tab A") == first


class TestRunSync:
    def test_two_users_one_song(self):
        """Alice and Bob both rank Song X first; it scores 2 points."""
        store = make_store({"Alice": ["1. Song X"], "Bob": ["1. Song X"]})
        log = SyncLog()
        summary = run_sync(store, log)

        table = store.read_table("Tab A")
        assert table[0] == ["Rank", "Song", "Points", "Average", "Alice", "Bob"]
        assert table[1] == [1, "Song Y", 0, 0.0, "", ""]
        assert table[2] == [2, "Song X", 2, 1.0, 1, 1]
        assert summary.updates == 2
        assert summary.cleared == 0

    def test_single_song_group(self):
        """Each user's list normalizes on its own, so Bob's 2nd place becomes 1."""
        store = make_store(
            {"Alice": ["1. Song X"], "Bob": ["2. Song X"]},
            **{"Sheet Manager": [["Solo"], ["Song X"]]},
        )
        run_sync(store, SyncLog())
        assert store.read_table("Solo") == [
            ["Rank", "Song", "Points", "Average", "Alice", "Bob"],
            [1, "Song X", 2, 1.0, 1, 1],
        ]

    def test_dense_ranks_per_group(self):
        """Each group renumbers a user's ranks from 1."""
        store = make_store({"Alice": ["1. Song Z", "2. Song Y", "3. Song X"]})
        run_sync(store, SyncLog())
        tab_a = {row[1]: row[4] for row in store.read_table("Tab A")[1:]}
        tab_b = {row[1]: row[4] for row in store.read_table("Tab B")[1:]}
        assert tab_a == {"Song Y": 1, "Song X": 2}
        assert tab_b == {"Song Z": 1}

    def test_unmatched_songs_logged(self):
        """Songs outside a group are listed; groups with no match are skipped."""
        store = make_store({"Alice": ["1. Song X", "2. Unknown Song"]})
        log = SyncLog()
        run_sync(store, log)
        successes = [e.detail for e in log.with_status(LogStatus.SUCCESS)]
        assert 'Tab "Tab A": matched 1/2 songs. Missed: Unknown Song' in successes
        skips = [e.detail for e in log.with_status(LogStatus.SKIP)]
        assert 'Tab "Tab B": 0 songs matched.' in skips

    def test_absent_user_cleared(self):
        """A user missing from the batch is cleared and the cleanup logged."""
        store = make_store({"Alice": ["1. Song X"], "Bob": ["1. Song Y"]})
        run_sync(store, SyncLog())

        store.write_table("Paste Rankings Here", submissions_table({"Alice": ["1. Song X"]}))
        log = SyncLog()
        summary = run_sync(store, log)

        table = store.read_table("Tab A")
        assert table[0][4:] == ["Alice", "Bob"]
        assert all(row[5] == "" for row in table[1:])
        assert summary.cleared == 1
        cleanups = log.with_status(LogStatus.CLEANUP)
        assert cleanups[0].detail.startswith('Cleared user "Bob" from tab "Tab A"')

    def test_resubmission_under_other_casing(self):
        """The old column is cleared so the user isn't counted twice."""
        store = make_store({"Alice": ["1. Song X", "2. Song Y"]})
        run_sync(store, SyncLog())

        store.write_table(
            "Paste Rankings Here", submissions_table({"alice": ["1. Song Y", "2. Song X"]}))
        summary = run_sync(store, SyncLog())

        assert store.read_table("Tab A") == [
            ["Rank", "Song", "Points", "Average", "Alice", "alice"],
            [1, "Song Y", 1, 1.0, "", 1],
            [2, "Song X", 2, 2.0, "", 2],
        ]
        assert summary.cleared == 1

    def test_idempotent(self):
        """Running twice leaves the ledgers unchanged."""
        store = make_store({"Alice": ["1. Song X", "2. Song Y"], "Bob": ["1. Song Y"]})
        run_sync(store, SyncLog())
        first = {name: store.read_table(name) for name in ("Tab A", "Tab B")}
        run_sync(store, SyncLog())
        assert {name: store.read_table(name) for name in ("Tab A", "Tab B")} == first

    def test_membership_only_leaves_scores(self):
        """Membership-only runs don't add user columns."""
        store = make_store({"Alice": ["1. Song X"]})
        run_sync(store, SyncLog(), membership_only=True)
        assert store.read_table("Tab A")[0] == ["Rank", "Song", "Points", "Average"]

    def test_missing_submissions_logged(self):
        """No submissions table is logged as an error."""
        store = make_store()
        log = SyncLog()
        summary = run_sync(store, log)
        assert summary.updates == 0
        assert log.with_status(LogStatus.ERROR)

    def test_no_valid_rankings_logged(self):
        """Submissions with nothing parseable are logged as an error."""
        store = make_store({"Alice": ["nothing"]})
        log = SyncLog()
        summary = run_sync(store, log)
        assert summary.updates == 0
        errors = [e.detail for e in log.with_status(LogStatus.ERROR)]
        assert any("No valid rankings" in e for e in errors)

    def test_custom_table_names(self):
        """The catalog table name comes from the settings."""
        settings = Settings(catalog_table="Catalog")
        store = make_store({"Alice": ["1. Song X"]})
        store.write_table("Catalog", store.read_table("Base"))
        del store.tables["Base"]
        summary = run_sync(store, SyncLog(), settings)
        assert summary.updates == 1


def test_load_ledgers_skips_missing_tables():
    """Groups without a table are skipped and logged."""
    store = make_store()
    run_membership_sync(store, SyncLog())
    del store.tables["Tab B"]
    log = SyncLog()
    groups = resolve_groups(store.read_table("Sheet Manager"))
    ledgers = load_ledgers(store, groups, log)
    assert [ledger.group for ledger in ledgers] == ["Tab A"]
    assert [e.subject for e in log.with_status(LogStatus.SKIP)] == ["Tab B"]
