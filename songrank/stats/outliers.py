"""Outlier users: whose tastes sit furthest from everyone else's."""

from songrank.errors import InsufficientDataError
from songrank.models import Ledger, ReportResult, ReportTable
from songrank.stats import register_report
from songrank.stats.base import AnalysisContext, Report
from songrank.stats.common import classify


def mean_absolute_difference(ledger: Ledger, i1: int, i2: int) -> float | None:
    """Mean |rank difference| over the songs both columns ranked, or None."""
    diffs = [
        abs(row.scores[i1] - row.scores[i2]) for row in ledger.rows
        if row.scores[i1] is not None and row.scores[i2] is not None
    ]
    if not diffs:
        return None
    return sum(diffs) / len(diffs)


def user_distances(ledgers: list[Ledger]) -> dict[str, float]:
    """Each user's average distance to every other user, over all groups.

    One distance is taken per (group, other user) pair sharing at least one
    ranked song; a user with no such pair scores 0.
    """
    distances: dict[str, list[float]] = {}
    for ledger in ledgers:
        columns = ledger.ranked_user_columns()
        for u1, i1 in columns:
            found = distances.setdefault(u1, [])
            for u2, i2 in columns:
                if u1 == u2:
                    continue
                distance = mean_absolute_difference(ledger, i1, i2)
                if distance is not None:
                    found.append(distance)
    return {
        user: sum(values) / len(values) if values else 0.0
        for user, values in distances.items()
    }


@register_report
class OutlierUsers(Report):

    @property
    def name(self) -> str:
        return "Outlier Users"

    def compute(self, context: AnalysisContext) -> ReportResult:
        distances = user_distances(context.ledgers)
        if not distances:
            raise InsufficientDataError("No user has any ranks")
        ranking = sorted(distances.items(), key=lambda kv: kv[1], reverse=True)
        rows = [[idx, user, f"{d:.1f}"] for idx, (user, d) in enumerate(ranking, start=1)]
        table = ReportTable(
            title="OUTLIER RANKING (whos the spiciest)",
            description="Users with most unique/different taste from others",
            headers=["Rank", "User", "Avg Distance"],
            rows=rows,
            highlights=[classify(d, [(25, "severe"), (15, "high")], "low") for _, d in ranking],
        )
        return ReportResult(
            report_name=self.name, section=self.section, tables=[table], details=distances,
        )
