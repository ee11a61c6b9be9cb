"""Attribution popularity: pooled ranks of songs sharing an artist ID."""

import statistics

from songrank.errors import InsufficientDataError
from songrank.models import ReportResult, ReportTable
from songrank.stats import register_report
from songrank.stats.base import AnalysisContext, Report
from songrank.stats.common import collect_song_stats


@register_report
class AttributionPopularity(Report):
    """Mean and spread of every rank given to songs of each labelled artist.

    Labels come from ``Settings.attribution_labels``, mapping an attribution
    key (e.g. "ID:160") to a display name. A song counts toward every label
    whose key appears in its catalog attribution string.
    """

    @property
    def name(self) -> str:
        return "Attribution Popularity"

    def compute(self, context: AnalysisContext) -> ReportResult:
        labels = context.settings.attribution_labels
        if not labels:
            raise InsufficientDataError("No attribution labels configured")
        if context.catalog is None:
            raise InsufficientDataError("No catalog available for attribution lookup")

        pooled: dict[str, list[float]] = {label: [] for label in labels.values()}
        song_counts: dict[str, int] = {label: 0 for label in labels.values()}
        for song in collect_song_stats(context.ledgers, context.catalog).values():
            for key, label in labels.items():
                if key in song.attribution:
                    pooled[label].extend(song.values)
                    song_counts[label] += 1

        results = [
            (label, statistics.fmean(ranks), statistics.pstdev(ranks))
            for label, ranks in pooled.items() if ranks
        ]
        if not results:
            raise InsufficientDataError("No ranked song matches any attribution label")
        results.sort(key=lambda r: r[1])

        rows = [
            [idx, label, f"{mean:.1f}", f"{std:.2f}"]
            for idx, (label, mean, std) in enumerate(results, start=1)
        ]
        highlights = ["middle"] * len(rows)
        highlights[-1] = "worst"
        highlights[0] = "best"
        table = ReportTable(
            title="ATTRIBUTION POPULARITY",
            description="Ranking performance of each labelled artist",
            headers=["Rank", "Artist", "Avg Rank", "Deviation"],
            rows=rows,
            highlights=highlights,
        )
        return ReportResult(
            report_name=self.name,
            section=self.section,
            tables=[table],
            details={"song_counts": song_counts},
        )
