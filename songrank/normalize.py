"""Relative rank normalization of a user's list onto one group's songs."""

from songrank.models import RankEntry, RelativeRanking


def normalize_ranking(
    entries: list[RankEntry], item_names: list[str]
) -> RelativeRanking:
    """Convert a user's absolute ranks into dense ranks within a group.

    Entries are matched to the group's songs by case-insensitive exact name
    (fuzzy matching already happened when the group's membership was
    resolved); matches are keyed by the ledger's spelling of the name.
    Matched entries are stably sorted by original rank, then numbered
    densely: the counter only advances when the original rank strictly
    increases, so ties share a rank and gaps collapse.

        original ranks  1, 2, 2, 4
        dense ranks     1, 2, 2, 3

    Args:
        entries: The user's parsed ranking lines
        item_names: Song names in the group's ledger

    Returns:
        RelativeRanking with the dense ranks and unmatched submitted names
    """
    lookup: dict[str, str] = {}
    for name in item_names:
        lookup.setdefault(name.strip().lower(), name)

    matched: list[tuple[RankEntry, str]] = []
    unmatched: list[str] = []
    for entry in entries:
        ledger_name = lookup.get(entry.item_name.strip().lower())
        if ledger_name is None:
            unmatched.append(entry.item_name)
        else:
            matched.append((entry, ledger_name))

    matched.sort(key=lambda pair: pair[0].original_rank)

    ranks: dict[str, int] = {}
    current_rank = 0
    last_original = -1
    for entry, ledger_name in matched:
        if entry.original_rank > last_original:
            current_rank += 1
        ranks[ledger_name] = current_rank
        last_original = entry.original_rank

    return RelativeRanking(ranks=ranks, unmatched=unmatched, submitted=len(entries))
