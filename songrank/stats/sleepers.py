"""Sleeper songs: loved by one user, ranked low by everyone else."""

from dataclasses import dataclass

from songrank.errors import InsufficientDataError
from songrank.models import ReportResult, ReportTable, format_number
from songrank.stats import register_report
from songrank.stats.base import AnalysisContext, Report
from songrank.stats.common import classify, collect_song_stats


@dataclass
class Sleeper:
    song: str
    mean: float
    lover: str
    best_rank: float

    @property
    def gap(self) -> float:
        return self.mean - self.best_rank


def find_sleepers(context: AnalysisContext) -> list[Sleeper]:
    """Songs whose best single rank beats the threshold while the mean lags.

    The lover is the first user found holding the best rank. Results are
    sorted by gap (mean - best), largest first.
    """
    settings = context.settings
    sleepers = []
    for song in collect_song_stats(context.ledgers, context.catalog).values():
        best = min(song.ranks, key=lambda r: r.rank)
        mean = song.mean
        if best.rank < settings.sleeper_best_below and mean > settings.sleeper_mean_above:
            sleepers.append(Sleeper(song=song.name, mean=mean, lover=best.user, best_rank=best.rank))
    sleepers.sort(key=lambda s: s.gap, reverse=True)
    return sleepers[:settings.top_n]


@register_report
class SleeperSongs(Report):

    @property
    def name(self) -> str:
        return "Sleeper Songs"

    def compute(self, context: AnalysisContext) -> ReportResult:
        sleepers = find_sleepers(context)
        if not sleepers:
            raise InsufficientDataError("No song is loved by one user and ranked low by the rest")
        rows = [
            [idx, s.song, f"{s.mean:.1f}", s.lover, format_number(s.best_rank), f"{s.gap:.0f}"]
            for idx, s in enumerate(sleepers, start=1)
        ]
        table = ReportTable(
            title="SLEEPER SONGS (songs loved by at least one user but not by many)",
            description="Underrated gems loved by at least one user",
            headers=["Rank", "Song", "Avg Rank", "Lover", "Their Rank", "Gap"],
            rows=rows,
            highlights=[classify(s.gap, [(80, "severe"), (50, "high")]) for s in sleepers],
        )
        return ReportResult(report_name=self.name, section=self.section, tables=[table])
