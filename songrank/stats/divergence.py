"""Pairwise divergence between users: matrices, friends/rivals, consensus."""

from dataclasses import dataclass, field
from typing import Any

from songrank.errors import InsufficientDataError
from songrank.log import LogStatus, SyncLog
from songrank.models import Ledger, ReportResult, ReportTable
from songrank.stats import register_report
from songrank.stats.base import AnalysisContext, Report

Matrix = dict[str, dict[str, float]]


@dataclass
class Partner:
    """A user's closest (friend) and furthest (rival) other user in a group."""
    user: str
    rival: str
    rival_score: float
    friend: str
    friend_score: float


@dataclass
class GroupDivergence:
    """Divergence results for one group ledger.

    Attributes:
        group: Group name
        users: Users compared, sorted by name
        matrix: user -> other user -> divergence
        valid_rows: Number of songs every compared user ranked
        consensus: Mean off-diagonal divergence; lower is more unified
        partners: Friend/rival for each user
    """
    group: str
    users: list[str]
    matrix: Matrix
    valid_rows: int
    consensus: float
    partners: list[Partner]


@dataclass
class DivergenceReport:
    """Divergence across all groups.

    ``global_matrix`` holds the mean of each pair's per-group divergence over
    the groups where both were compared, or None if they never were.
    """
    users: list[str]
    global_matrix: dict[str, dict[str, float | None]]
    groups: list[GroupDivergence]
    partner_counts: dict[str, dict[str, int]] = field(default_factory=dict)

    def consensus_ranking(self) -> list[GroupDivergence]:
        return sorted(self.groups, key=lambda g: g.consensus)

    def to_dict(self) -> dict[str, Any]:
        return {
            "users": self.users,
            "global_matrix": self.global_matrix,
            "groups": [
                {
                    "group": g.group,
                    "users": g.users,
                    "matrix": g.matrix,
                    "valid_rows": g.valid_rows,
                    "consensus": g.consensus,
                    "partners": [p.__dict__ for p in g.partners],
                }
                for g in self.groups
            ],
            "partner_counts": self.partner_counts,
        }

    def to_tables(self) -> list[ReportTable]:
        tables = []
        consensus = self.consensus_ranking()
        tables.append(ReportTable(
            title="GROUP CONSENSUS SUMMARY",
            headers=["Group Name", "Avg. Internal Divergence (Lower = More Unified)",
                     "Songs Analyzed"],
            rows=[[g.group, f"{g.consensus:.2f}", f"{g.valid_rows} songs"] for g in consensus],
            highlights=["normal"] * len(consensus),
        ))

        global_rows = [
            [u1, *(_fmt(self.global_matrix[u1].get(u2)) for u2 in self.users)]
            for u1 in self.users
        ]
        tables.append(ReportTable(
            title="GLOBAL: User-to-User Divergence Matrix",
            headers=["User Name", *self.users],
            rows=global_rows,
            highlights=["normal"] * len(global_rows),
        ))

        for g in self.groups:
            rows = [[u1, *(f"{g.matrix[u1][u2]:.2f}" for u2 in g.users)] for u1 in g.users]
            tables.append(ReportTable(
                title=f"TAB: {g.group} (Per-Group Matrix)",
                headers=["User Name", *g.users],
                rows=rows,
                highlights=["normal"] * len(rows),
            ))
            partner_rows = [
                [p.user, p.rival, f"{p.rival_score:.2f}", p.friend, f"{p.friend_score:.2f}"]
                for p in g.partners
            ]
            tables.append(ReportTable(
                title=f"TAB: {g.group} (Friends & Rivals)",
                headers=["User", "Rival (Most Diff)", "Score", "Friend (Least Diff)", "Score"],
                rows=partner_rows,
                highlights=["normal"] * len(partner_rows),
            ))
        return tables


def _fmt(value: float | None) -> str:
    return "-" if value is None else f"{value:.2f}"


def pair_divergence(rows: list[tuple[float, float]]) -> float:
    """Sum of absolute rank differences over n rows, divided by n^2, times 100."""
    n = len(rows)
    if n == 0:
        raise InsufficientDataError("No shared rows to compare")
    total = sum(abs(a - b) for a, b in rows)
    return total / (n * n) * 100


def find_partners(user: str, scores: dict[str, float]) -> Partner | None:
    """Pick a user's friend (least divergent) and rival (most divergent).

    Other users are scanned in ascending name order and the first one
    reaching the extreme wins ties.
    """
    others = sorted(name for name in scores if name != user)
    if not others:
        return None
    friend = rival = others[0]
    for name in others[1:]:
        if scores[name] < scores[friend]:
            friend = name
        if scores[name] > scores[rival]:
            rival = name
    return Partner(
        user=user,
        rival=rival,
        rival_score=scores[rival],
        friend=friend,
        friend_score=scores[friend],
    )


def group_divergence(ledger: Ledger) -> GroupDivergence:
    """Compute one group's divergence matrix over its fully-ranked songs.

    Raises:
        InsufficientDataError: If fewer than two users have ranks, or no song
            was ranked by all of them
    """
    columns = ledger.ranked_user_columns()
    if len(columns) < 2:
        raise InsufficientDataError(f"Not enough users ({len(columns)})")

    valid_rows = [
        row for row in ledger.rows
        if all(row.scores[idx] is not None for _, idx in columns)
    ]
    if not valid_rows:
        raise InsufficientDataError("0 songs shared by all users")

    matrix: Matrix = {}
    for u1, i1 in columns:
        matrix[u1] = {}
        for u2, i2 in columns:
            matrix[u1][u2] = pair_divergence(
                [(row.scores[i1], row.scores[i2]) for row in valid_rows]
            )

    users = sorted(matrix)
    off_diagonal = [matrix[u1][u2] for u1 in users for u2 in users if u1 != u2]
    partners = [p for p in (find_partners(u, matrix[u]) for u in users) if p]

    return GroupDivergence(
        group=ledger.group,
        users=users,
        matrix=matrix,
        valid_rows=len(valid_rows),
        consensus=sum(off_diagonal) / len(off_diagonal),
        partners=partners,
    )


def compute_divergence(ledgers: list[Ledger], log: SyncLog | None = None) -> DivergenceReport:
    """Compute per-group and global divergence across all ledgers.

    Groups without enough data are skipped (and logged).

    Raises:
        InsufficientDataError: If no group could be analyzed
    """
    log = log if log is not None else SyncLog()
    all_users: set[str] = set()
    totals: dict[str, dict[str, list[float]]] = {}
    groups: list[GroupDivergence] = []
    partner_counts: dict[str, dict[str, int]] = {}

    for ledger in ledgers:
        all_users.update(user for user, _ in ledger.ranked_user_columns())
        try:
            result = group_divergence(ledger)
        except InsufficientDataError as e:
            log.add(ledger.group, LogStatus.SKIP, f"Divergence: {e}")
            continue
        except Exception as e:
            log.add(ledger.group, LogStatus.ERROR, f"Divergence failed: {type(e).__name__}: {e}")
            continue

        for u1 in result.users:
            for u2 in result.users:
                totals.setdefault(u1, {}).setdefault(u2, []).append(result.matrix[u1][u2])
        for p in result.partners:
            partner_counts.setdefault(p.rival, {"rival": 0, "friend": 0})["rival"] += 1
            partner_counts.setdefault(p.friend, {"rival": 0, "friend": 0})["friend"] += 1
        groups.append(result)
        log.add(ledger.group, LogStatus.INFO,
                f"Divergence: {len(result.users)} users, {result.valid_rows} valid rows")

    if not groups:
        raise InsufficientDataError("No divergence data found across any group")

    users = sorted(all_users)
    global_matrix: dict[str, dict[str, float | None]] = {}
    for u1 in users:
        global_matrix[u1] = {}
        for u2 in users:
            values = totals.get(u1, {}).get(u2)
            global_matrix[u1][u2] = sum(values) / len(values) if values else None

    return DivergenceReport(
        users=users,
        global_matrix=global_matrix,
        groups=groups,
        partner_counts=partner_counts,
    )


@register_report
class DivergenceAnalysis(Report):
    """Friends & rivals: how differently each pair of users ranks.

    For two users, divergence is the sum of their absolute rank differences
    over the songs everyone in the group ranked, divided by the square of
    that song count and scaled by 100. 0 means identical rankings.
    """

    section = "divergence"

    @property
    def name(self) -> str:
        return "Divergence"

    @property
    def description(self) -> str:
        return "Pairwise rank divergence, friends/rivals and group consensus"

    def compute(self, context: AnalysisContext) -> ReportResult:
        report = compute_divergence(context.ledgers, context.log)
        return ReportResult(
            report_name=self.name,
            section=self.section,
            tables=report.to_tables(),
            details=report.to_dict(),
        )
