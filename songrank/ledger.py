"""Group ledger operations: membership rebuild, score columns, re-ranking.

Every operation here returns a ledger whose rows are in ascending points
order with ranks numbered 1..k.
"""

from songrank.membership import Group
from songrank.models import Catalog, Ledger, LedgerRow, RelativeRanking


def sort_by_points(ledger: Ledger) -> Ledger:
    """Stable-sort rows by ascending points and renumber ranks 1..k."""
    ledger.rows.sort(key=lambda row: row.points)
    for position, row in enumerate(ledger.rows, start=1):
        row.rank = position
    return ledger


def sync_membership(existing: Ledger | None, group: Group, catalog: Catalog) -> Ledger:
    """Rebuild a group's song rows from the catalog.

    Songs are taken in catalog order from those the group matches. Existing
    user columns are kept and each song's scores carried over by exact name;
    new songs get blank scores and songs no longer matched are dropped.

    Args:
        existing: The group's current ledger, or None if it has none yet
        group: The resolved group
        catalog: The canonical song catalog

    Returns:
        A new Ledger for the group
    """
    users = list(existing.users) if existing else []
    previous: dict[str, list] = {}
    if existing:
        for row in existing.rows:
            previous.setdefault(row.item, row.scores)

    rows = []
    for item in group.members(catalog):
        if not item.name:
            continue
        scores = list(previous.get(item.name, []))
        scores += [None] * (len(users) - len(scores))
        rows.append(LedgerRow(item=item.name, scores=scores))

    return sort_by_points(Ledger(group=group.name, users=users, rows=rows))


def allocate_user_column(ledger: Ledger, user: str) -> int:
    """Find or create the column for a user and return its slot index.

    An existing column whose header equals the name exactly is reused.
    Otherwise slots are scanned left to right from the first user column and
    the first blank one is claimed; if none is blank a new column is appended.
    """
    existing = ledger.user_index(user)
    if existing is not None:
        return existing
    for idx, name in enumerate(ledger.users):
        if not name:
            ledger.users[idx] = user
            return idx
    idx = ledger.add_user_slot()
    ledger.users[idx] = user
    return idx


def sync_scores(ledger: Ledger, user: str, ranking: RelativeRanking) -> Ledger:
    """Write a user's dense ranks into their column.

    Songs the user's ranking doesn't cover are blanked.
    """
    idx = allocate_user_column(ledger, user)
    for row in ledger.rows:
        row.scores[idx] = ranking.ranks.get(row.item)
    return sort_by_points(ledger)


def clear_absent_users(ledger: Ledger, active_users: list[str]) -> list[str]:
    """Blank the scores of users missing from the current submission batch.

    The column header is kept so the slot keeps its position. Names match
    exactly, as in ``allocate_user_column``, so a user who resubmits under
    another casing has the old column cleared.

    Returns:
        Names of the cleared user columns
    """
    active = set(active_users)
    cleared = []
    for name, idx in ledger.user_columns():
        if name in active:
            continue
        for row in ledger.rows:
            row.scores[idx] = None
        cleared.append(name)
    return cleared
