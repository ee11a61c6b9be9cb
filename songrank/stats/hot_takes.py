"""Hot takes and glazes: where a user's rank departs from the consensus.

Lower ranks are better, so a positive deviation means the user ranked the
song worse than the group did ("overrated" by the group, in the user's eyes)
and a negative one means they ranked it better ("underrated").
"""

import statistics
from dataclasses import dataclass

from songrank.errors import InsufficientDataError
from songrank.log import LogStatus
from songrank.models import Ledger, ReportResult, ReportTable, format_number
from songrank.stats import register_report
from songrank.stats.base import AnalysisContext, Report
from songrank.stats.common import classify, collect_song_stats

OVERRATED = "Overrated"
UNDERRATED = "Underrated"


@dataclass
class HotTake:
    user: str
    song: str
    rank: float
    mean: float
    deviation: float
    score: float

    @property
    def label(self) -> str:
        return OVERRATED if self.deviation > 0 else UNDERRATED


def group_hot_takes(ledger: Ledger) -> list[HotTake]:
    """Every (song, user) deviation in one group.

    Only songs with at least two ranks count. The score normalizes the
    deviation by the number of songs in the group, as a percentage.
    """
    columns = ledger.ranked_user_columns()
    total = ledger.num_items
    takes = []
    for row in ledger.rows:
        ranked = [(user, row.scores[idx]) for user, idx in columns
                  if row.scores[idx] is not None]
        if len(ranked) < 2:
            continue
        mean = statistics.fmean(rank for _, rank in ranked)
        for user, rank in ranked:
            deviation = rank - mean
            takes.append(HotTake(
                user=user,
                song=row.item,
                rank=rank,
                mean=mean,
                deviation=deviation,
                score=deviation / total * 100,
            ))
    return takes


def _takes_table(title: str, takes: list[HotTake], highlight: str) -> ReportTable:
    return ReportTable(
        title=title,
        headers=["%", "User", "Song", "Rank", "Avg"],
        rows=[
            [f"{t.score:.1f}", t.user, t.song, f"{t.rank:.0f}", f"{t.mean:.1f}"]
            for t in takes
        ],
        highlights=[highlight] * len(takes),
    )


@register_report
class GroupHotTakes(Report):
    """Per-group glazes (ranked far better than consensus) and hot takes
    (ranked far worse), side by side for every group."""

    section = "takes"

    @property
    def name(self) -> str:
        return "Hot Takes & Glazes"

    def compute(self, context: AnalysisContext) -> ReportResult:
        tables = []
        details = {}
        for ledger in context.ledgers:
            try:
                takes = group_hot_takes(ledger)
            except Exception as e:
                context.log.add(ledger.group, LogStatus.ERROR, f"Hot takes failed: {e}")
                continue
            if not takes:
                continue
            glazes = sorted((t for t in takes if t.score < 0), key=lambda t: t.score)
            hot = sorted((t for t in takes if t.score > 0), key=lambda t: t.score, reverse=True)
            tables.append(_takes_table(f"GROUP: {ledger.group} - BIGGEST GLAZES", glazes, "glaze"))
            tables.append(_takes_table(f"GROUP: {ledger.group} - HOTTEST TAKES", hot, "hot"))
            details[ledger.group] = {"glazes": len(glazes), "hot_takes": len(hot)}

        if not tables:
            raise InsufficientDataError("No song has ranks from two or more users")
        return ReportResult(
            report_name=self.name, section=self.section, tables=tables, details=details,
        )


def global_hot_takes(context: AnalysisContext) -> list[HotTake]:
    """Largest deviations from a song's mean rank, pooled across all groups.

    Entries at or below the configured threshold are dropped; the rest are
    sorted by absolute deviation and cut to the top-N.
    """
    songs = collect_song_stats(context.ledgers, context.catalog)
    takes = []
    for song in songs.values():
        mean = song.mean
        for r in song.ranks:
            deviation = r.rank - mean
            if abs(deviation) > context.settings.hot_take_threshold:
                takes.append(HotTake(
                    user=r.user,
                    song=song.name,
                    rank=r.rank,
                    mean=mean,
                    deviation=deviation,
                    score=deviation,
                ))
    takes.sort(key=lambda t: abs(t.deviation), reverse=True)
    return takes[:context.settings.top_n]


@register_report
class HottestTakes(Report):
    """Top hot takes across every group, labelled overrated/underrated."""

    @property
    def name(self) -> str:
        return "Hottest Takes"

    def compute(self, context: AnalysisContext) -> ReportResult:
        takes = global_hot_takes(context)
        if not takes:
            raise InsufficientDataError("No rank deviates past the hot take threshold")
        rows = [
            [idx, t.song, f"{t.user} ({t.label}!)", format_number(t.rank),
             f"{t.mean:.1f}", f"{t.deviation:.1f}"]
            for idx, t in enumerate(takes, start=1)
        ]
        table = ReportTable(
            title="HOTTEST TAKES (regurgitation of takes tab)",
            headers=["Rank", "Song", "Hot Take Artist", "Their Rank", "Group Avg", "Deviation"],
            rows=rows,
            highlights=[classify(abs(t.deviation), [(50, "severe"), (30, "high")]) for t in takes],
        )
        return ReportResult(report_name=self.name, section=self.section, tables=[table])
