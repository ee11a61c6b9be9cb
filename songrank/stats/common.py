"""Shared helpers: per-song rank collection and highlight classification."""

import statistics
from dataclasses import dataclass, field

from songrank.errors import InsufficientDataError
from songrank.models import Catalog, Ledger


@dataclass
class UserRank:
    user: str
    rank: float


@dataclass
class SongStats:
    """All ranks given to one song name, pooled across every group ledger.

    Songs appearing in several groups contribute one rank per group per user.
    """
    name: str
    ranks: list[UserRank] = field(default_factory=list)
    attribution: str = ""

    @property
    def values(self) -> list[float]:
        return [r.rank for r in self.ranks]

    @property
    def count(self) -> int:
        return len(self.ranks)

    @property
    def mean(self) -> float:
        return statistics.fmean(self.values)

    @property
    def std_dev(self) -> float:
        """Population standard deviation of the ranks."""
        return statistics.pstdev(self.values)

    @property
    def min(self) -> float:
        return min(self.values)

    @property
    def max(self) -> float:
        return max(self.values)

    @property
    def mean_reciprocal_rank(self) -> float:
        """Mean of 1/(1+rank): rank 1 scores 0.5, rank 2 scores 0.33, ..."""
        return statistics.fmean(1 / (1 + r) for r in self.values)


def collect_song_stats(
    ledgers: list[Ledger], catalog: Catalog | None = None
) -> dict[str, SongStats]:
    """Pool every numeric rank by song name across all ledgers.

    Songs are identified by trimmed, lowercased name and keep the spelling
    they were first seen with. Only user columns holding at least one rank
    are read. Songs nobody ranked are left out.
    """
    songs: dict[str, SongStats] = {}
    for ledger in ledgers:
        columns = ledger.ranked_user_columns()
        for row in ledger.rows:
            for user, idx in columns:
                rank = row.scores[idx]
                if rank is None:
                    continue
                key = row.item.strip().lower()
                if key not in songs:
                    attribution = catalog.attribution_of(row.item) if catalog else ""
                    songs[key] = SongStats(name=row.item, attribution=attribution)
                songs[key].ranks.append(UserRank(user=user, rank=rank))
    return songs


def collect_users(ledgers: list[Ledger]) -> list[str]:
    """Users with at least one rank in any ledger, in first-seen order."""
    users: list[str] = []
    for ledger in ledgers:
        for user, _ in ledger.ranked_user_columns():
            if user not in users:
                users.append(user)
    return users


def classify(value: float, thresholds: list[tuple[float, str]], default: str = "normal") -> str:
    """Return the label of the first threshold ``value`` exceeds.

    Thresholds are checked in order, so list them from highest to lowest.
    """
    for limit, label in thresholds:
        if value > limit:
            return label
    return default


def percent(value: float) -> str:
    return f"{value:.0f}%"


def ranked_songs(ledgers: list[Ledger], catalog: Catalog | None = None) -> list[SongStats]:
    """Like ``collect_song_stats`` but as a list, failing when nothing is ranked.

    Raises:
        InsufficientDataError: If no song has a single rank
    """
    songs = collect_song_stats(ledgers, catalog)
    if not songs:
        raise InsufficientDataError("No ranked songs in any group")
    return list(songs.values())
