"""Universally loved and universally disliked songs."""

from songrank.models import ReportResult, ReportTable
from songrank.stats import register_report
from songrank.stats.base import AnalysisContext, Report
from songrank.stats.common import SongStats, ranked_songs
from songrank.stats.consensus import consistency_percent


@register_report
class TopBottomSongs(Report):
    """Best and worst songs by mean rank across every user and group.

    Also shows the mean reciprocal rank, mean(1/(1+rank)), as an alternate
    "best-loved" signal, and an agreement percentage from the std dev.
    """

    @property
    def name(self) -> str:
        return "Universally Top/Bottom"

    @staticmethod
    def _row(idx: int, s: SongStats) -> list:
        return [
            idx,
            s.name,
            f"{s.mean:.1f}",
            f"{s.mean_reciprocal_rank:.2f}",
            f"{consistency_percent(s.std_dev, scale=2):.0f}%",
        ]

    def compute(self, context: AnalysisContext) -> ReportResult:
        songs = ranked_songs(context.ledgers, context.catalog)
        n = context.settings.top_bottom_n
        top = sorted(songs, key=lambda s: s.mean)[:n]
        bottom = sorted(songs, key=lambda s: s.mean, reverse=True)[:n]

        rows = [self._row(i, s) for i, s in enumerate(top, start=1)]
        rows += [self._row(i, s) for i, s in enumerate(bottom, start=1)]
        table = ReportTable(
            title=f"UNIVERSALLY TOP/BOTTOM {n}",
            description="Best and worst songs with strong consensus",
            headers=["Rank", "Song", "Avg Rank", "MRR", "Agreement"],
            rows=rows,
            highlights=["top"] * len(top) + ["bottom"] * len(bottom),
        )
        return ReportResult(
            report_name=self.name,
            section=self.section,
            tables=[table],
            details={
                "top": [s.name for s in top],
                "bottom": [s.name for s in bottom],
                "mrr": {s.name: s.mean_reciprocal_rank for s in songs},
            },
        )
