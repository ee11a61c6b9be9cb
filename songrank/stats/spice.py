"""The spice meter: RMS deviation of each user from everyone else."""

import math
from dataclasses import dataclass, field

from songrank.errors import InsufficientDataError
from songrank.models import Ledger, ReportResult, ReportTable
from songrank.stats import register_report
from songrank.stats.base import AnalysisContext, Report
from songrank.stats.common import classify, collect_users


def rms(values: list[float]) -> float | None:
    if not values:
        return None
    return math.sqrt(sum(values) / len(values))


@dataclass
class SpiceScore:
    """A user's spice: overall and per group (None where they have no data)."""
    user: str
    overall: float | None
    by_group: dict[str, float | None] = field(default_factory=dict)


def squared_deviations(ledger: Ledger) -> dict[str, list[float]]:
    """Per user, (rank - mean of the other users' ranks)^2 for each song
    ranked by at least two users."""
    columns = ledger.ranked_user_columns()
    result: dict[str, list[float]] = {}
    for row in ledger.rows:
        ranked = [(user, row.scores[idx]) for user, idx in columns
                  if row.scores[idx] is not None]
        if len(ranked) < 2:
            continue
        for i, (user, rank) in enumerate(ranked):
            others = [r for j, (_, r) in enumerate(ranked) if j != i]
            avg_other = sum(others) / len(others)
            result.setdefault(user, []).append((rank - avg_other) ** 2)
    return result


def spice_scores(ledgers: list[Ledger]) -> list[SpiceScore]:
    """Spice for every user, sorted spiciest first."""
    users = collect_users(ledgers)
    overall: dict[str, list[float]] = {u: [] for u in users}
    per_group: dict[str, dict[str, float | None]] = {u: {} for u in users}

    for ledger in ledgers:
        deviations = squared_deviations(ledger)
        for user in users:
            values = deviations.get(user, [])
            per_group[user][ledger.group] = rms(values)
            overall[user].extend(values)

    scores = [SpiceScore(u, rms(overall[u]), per_group[u]) for u in users]
    scores.sort(key=lambda s: s.overall or 0.0, reverse=True)
    return scores


def _fmt(value: float | None) -> str:
    return "-" if value is None else f"{value:.1f}"


def spice_highlight(value: float | None) -> str:
    if value is None:
        return "normal"
    return classify(value, [(35, "spicy")], "basic" if value < 15 else "normal")


@register_report
class SpiceMeter(Report):
    """Root mean squared deviation of a user's ranks from the average of the
    other users' ranks. Higher means more unique taste."""

    section = "spice"

    @property
    def name(self) -> str:
        return "Spice Meter"

    def compute(self, context: AnalysisContext) -> ReportResult:
        scores = spice_scores(context.ledgers)
        if not scores:
            raise InsufficientDataError("No user has any ranks")
        groups = context.group_names
        rows = [
            [s.user, _fmt(s.overall), *(_fmt(s.by_group.get(g)) for g in groups)]
            for s in scores
        ]
        table = ReportTable(
            title="THE SPICE METER (Group Breakdown)",
            description="Root Mean Squared deviation from others. Higher = More Unique.",
            headers=["User", "Global Spice", *groups],
            rows=rows,
            highlights=[
                spice_highlight(s.overall) for s in scores
            ],
        )
        return ReportResult(
            report_name=self.name,
            section=self.section,
            tables=[table],
            details={s.user: {"overall": s.overall, **s.by_group} for s in scores},
        )
