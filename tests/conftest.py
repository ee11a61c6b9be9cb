"""Shared test helpers."""

from songrank.config import SUBMISSIONS_USER_LABEL, Settings
from songrank.models import Catalog, Item, Ledger, LedgerRow
from songrank.stats import AnalysisContext


def make_ledger(group: str, ranks_table: dict[str, dict[str, float]],
                songs: list[str] | None = None) -> Ledger:
    """Build a Ledger from a compact ranks table.

    Args:
        group: Group name
        ranks_table: {user: {song: rank}}; songs a user didn't rank are blank
        songs: Song order; defaults to first-seen order across users

    Returns:
        Ledger with one user column per user, rows ranked 1..k in song order.
    """
    users = list(ranks_table.keys())
    if songs is None:
        songs = []
        for ranks in ranks_table.values():
            for song in ranks:
                if song not in songs:
                    songs.append(song)
    rows = [
        LedgerRow(
            item=song,
            scores=[ranks_table[user].get(song) for user in users],
            rank=position,
        )
        for position, song in enumerate(songs, start=1)
    ]
    return Ledger(group=group, users=users, rows=rows)


def catalog_row(key: str, name: str, attribution: str = "") -> list[str]:
    """A catalog table row with the key, name and attribution in their columns."""
    return [key, name, "", "", "", "", "", attribution]


CATALOG_HEADER = ["ID", "Song", "", "", "", "", "", "Artist Info"]


def make_catalog(*songs: tuple[str, str, str]) -> Catalog:
    """Build a Catalog from (key, name, attribution) tuples."""
    return Catalog(items=[Item(name=name, key=key, attribution=attribution)
                          for key, name, attribution in songs])


def submissions_table(rankings: dict[str, list[str]]) -> list[list[str]]:
    """A submissions table: user names in row 0, one pasted list per column."""
    return [
        [SUBMISSIONS_USER_LABEL, *rankings.keys()],
        ["Ranked List", *("\n".join(lines) for lines in rankings.values())],
    ]


def make_context(*ledgers: Ledger, catalog: Catalog | None = None, **settings) -> AnalysisContext:
    """An AnalysisContext over the given ledgers with setting overrides."""
    return AnalysisContext(
        ledgers=list(ledgers),
        settings=Settings.from_dict(settings),
        catalog=catalog,
    )
