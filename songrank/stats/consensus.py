"""Controversy and consistency: songs ranked by the spread of their ranks."""

from songrank.models import ReportResult, ReportTable, format_number
from songrank.stats import register_report
from songrank.stats.base import AnalysisContext, Report
from songrank.stats.common import classify, percent, ranked_songs


def consistency_percent(std_dev: float, scale: float = 5) -> float:
    """100% for unanimous ranks, falling by ``scale`` points per unit of std dev."""
    return 100 - min(std_dev * scale, 100)


@register_report
class ControversialSongs(Report):
    """Songs with the highest population standard deviation of ranks."""

    @property
    def name(self) -> str:
        return "Most Controversial Songs"

    def compute(self, context: AnalysisContext) -> ReportResult:
        songs = ranked_songs(context.ledgers, context.catalog)
        songs.sort(key=lambda s: s.std_dev, reverse=True)
        top = songs[:context.settings.top_n]

        rows = [
            [idx, s.name, f"{s.std_dev:.2f}", f"{s.mean:.1f}",
             f"{format_number(s.min)}-{format_number(s.max)}"]
            for idx, s in enumerate(top, start=1)
        ]
        highlights = [classify(s.std_dev, [(30, "severe"), (20, "high")]) for s in top]
        table = ReportTable(
            title="MOST CONTROVERSIAL SONGS (highest std deviation songs (disagreement))",
            headers=["Rank", "Song", "Disagreement", "Avg Rank", "Range (Min-Max)"],
            rows=rows,
            highlights=highlights,
        )
        return ReportResult(
            report_name=self.name,
            section=self.section,
            tables=[table],
            details={"std_devs": {s.name: s.std_dev for s in top}},
        )


@register_report
class ConsistentSongs(Report):
    """Songs with the lowest standard deviation of ranks."""

    @property
    def name(self) -> str:
        return "Most Consistently Ranked"

    def compute(self, context: AnalysisContext) -> ReportResult:
        songs = ranked_songs(context.ledgers, context.catalog)
        songs.sort(key=lambda s: s.std_dev)
        top = songs[:context.settings.top_n]

        rows = [
            [idx, s.name, percent(consistency_percent(s.std_dev)), f"{s.mean:.1f}"]
            for idx, s in enumerate(top, start=1)
        ]
        table = ReportTable(
            title="MOST CONSISTENTLY RANKED (lowest std deviation songs)",
            headers=["Rank", "Song", "Consistency", "Avg Rank"],
            rows=rows,
            highlights=["consistent"] * len(rows),
        )
        return ReportResult(
            report_name=self.name,
            section=self.section,
            tables=[table],
            details={"consistency": {s.name: consistency_percent(s.std_dev) for s in top}},
        )
