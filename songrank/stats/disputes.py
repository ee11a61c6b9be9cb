"""Most disputed songs: the biggest one-on-one rank gaps."""

from dataclasses import dataclass

from songrank.errors import InsufficientDataError
from songrank.models import Ledger, ReportResult, ReportTable, format_number
from songrank.stats import register_report
from songrank.stats.base import AnalysisContext, Report
from songrank.stats.common import classify


@dataclass
class Dispute:
    song: str
    max_pair: str
    max_difference: float
    mean_difference: float


def song_disputes(ledger: Ledger) -> list[Dispute]:
    """Per song, the largest and mean rank difference over all user pairs."""
    columns = ledger.ranked_user_columns()
    disputes = []
    for row in ledger.rows:
        max_diff = 0.0
        max_pair = ""
        diffs = []
        for i, (u1, i1) in enumerate(columns):
            for u2, i2 in columns[i + 1:]:
                r1, r2 = row.scores[i1], row.scores[i2]
                if r1 is None or r2 is None:
                    continue
                diff = abs(r1 - r2)
                diffs.append(diff)
                if diff > max_diff:
                    max_diff = diff
                    max_pair = f"{u1} vs {u2}"
        if diffs:
            disputes.append(Dispute(
                song=row.item,
                max_pair=max_pair,
                max_difference=max_diff,
                mean_difference=sum(diffs) / len(diffs),
            ))
    return disputes


@register_report
class DisputedSongs(Report):
    """Songs with the largest single pairwise disagreement.

    A song appearing in several groups is reported from the first group
    that ranks it.
    """

    @property
    def name(self) -> str:
        return "Most Disputed Songs"

    def compute(self, context: AnalysisContext) -> ReportResult:
        by_song: dict[str, Dispute] = {}
        for ledger in context.ledgers:
            if len(ledger.ranked_user_columns()) < 2:
                continue
            for dispute in song_disputes(ledger):
                by_song.setdefault(dispute.song, dispute)

        if not by_song:
            raise InsufficientDataError("No song was ranked by two users in the same group")

        top = sorted(by_song.values(), key=lambda d: d.max_difference, reverse=True)
        top = top[:context.settings.top_n]
        rows = [
            [idx, d.song, d.max_pair, format_number(d.max_difference), f"{d.mean_difference:.1f}"]
            for idx, d in enumerate(top, start=1)
        ]
        table = ReportTable(
            title="MOST DISPUTED SONGS (1v1 fight to the death)",
            headers=["Rank", "Song", "Biggest Fight", "Max Diff", "Avg Diff"],
            rows=rows,
            highlights=[
                classify(d.max_difference, [(100, "severe"), (50, "high"), (20, "elevated")])
                for d in top
            ],
        )
        return ReportResult(report_name=self.name, section=self.section, tables=[table])
