"""Tests for per-song reports: sleepers, disputes and attribution popularity."""

import pytest

from songrank.errors import InsufficientDataError
from songrank.stats.attribution import AttributionPopularity
from songrank.stats.disputes import DisputedSongs, song_disputes
from songrank.stats.sleepers import SleeperSongs, find_sleepers
from tests.conftest import make_context, make_ledger


class TestSleepers:
    def test_found(self, sleeper):
        """A song ranked top by one user and low by the rest."""
        [found] = find_sleepers(make_context(sleeper))
        assert found.song == "S"
        assert found.lover == "Alice"
        assert found.best_rank == 1
        assert found.mean == pytest.approx(67)
        assert found.gap == pytest.approx(66)

    def test_thresholds_from_settings(self, sleeper):
        """Best-rank and mean thresholds come from the settings."""
        assert find_sleepers(make_context(sleeper, sleeper_mean_above=70)) == []
        assert find_sleepers(make_context(sleeper, sleeper_best_below=1)) == []

    def test_report(self, sleeper):
        """Gap between the mean and the lover's rank is shown."""
        table = SleeperSongs().compute(make_context(sleeper)).tables[0]
        assert table.rows == [[1, "S", "67.0", "Alice", 1, "66"]]
        assert table.highlights == ["high"]

    def test_report_without_sleepers(self, sleeper):
        """Nothing to show is reported as missing data, not an empty table."""
        with pytest.raises(InsufficientDataError):
            SleeperSongs().compute(make_context(sleeper, sleeper_mean_above=70))


class TestDisputes:
    def setup_method(self):
        self.ledger = make_ledger("Tab", {
            "Alice": {"S": 1, "T": 2},
            "Bob": {"S": 10, "T": 2},
            "Carol": {"S": 4},
        })

    def test_song_disputes(self):
        """Largest and mean pairwise gap per song."""
        disputes = {d.song: d for d in song_disputes(self.ledger)}
        assert disputes["S"].max_pair == "Alice vs Bob"
        assert disputes["S"].max_difference == 9
        assert disputes["S"].mean_difference == 6
        assert disputes["T"].max_difference == 0

    def test_report_order(self):
        """Most disputed songs first."""
        table = DisputedSongs().compute(make_context(self.ledger)).tables[0]
        assert [row[1] for row in table.rows] == ["S", "T"]
        assert table.rows[0][3] == 9

    def test_first_group_wins(self):
        """A song in several groups is disputed from the first one only."""
        other = make_ledger("Other", {"Alice": {"S": 1}, "Bob": {"S": 50}})
        result = DisputedSongs().compute(make_context(self.ledger, other))
        assert result.tables[0].rows[0][3] == 9

    def test_single_user_groups(self):
        """No pair of users means no disputes."""
        ledger = make_ledger("Tab", {"Alice": {"S": 1}})
        with pytest.raises(InsufficientDataError):
            DisputedSongs().compute(make_context(ledger))


class TestAttributionPopularity:
    def setup_method(self):
        self.ledger = make_ledger("Tab", {
            "Alice": {"S": 1, "T": 2, "U": 3},
            "Bob": {"S": 1, "T": 3, "U": 2},
        })
        self.labels = {"ID:160": "Artist One", "ID:170": "Artist Two"}

    def test_pools_ranks_per_label(self, catalog):
        """Songs pool their ranks under every label their attribution contains."""
        result = AttributionPopularity().compute(
            make_context(self.ledger, catalog=catalog, attribution_labels=self.labels))
        table = result.tables[0]
        # One: S(1, 1) + T(2, 3); Two: T(2, 3) + U(3, 2)
        assert table.rows == [
            [1, "Artist One", "1.8", "0.83"],
            [2, "Artist Two", "2.5", "0.50"],
        ]
        assert table.highlights == ["best", "worst"]
        assert result.details["song_counts"] == {"Artist One": 2, "Artist Two": 2}

    def test_requires_labels(self, catalog):
        """Without configured labels the report is skipped."""
        with pytest.raises(InsufficientDataError):
            AttributionPopularity().compute(make_context(self.ledger, catalog=catalog))

    def test_requires_catalog(self):
        """Without a catalog attributions can't be looked up."""
        with pytest.raises(InsufficientDataError):
            AttributionPopularity().compute(
                make_context(self.ledger, attribution_labels=self.labels))
