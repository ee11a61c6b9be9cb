"""Group membership: resolve the group config table into song predicates."""

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from songrank.config import GROUP_NAME_PLACEHOLDERS
from songrank.models import Catalog, GroupDefinition, Item, Ledger, ReportTable, clean_cell

PLACEHOLDER_TERM = re.compile(r"^(id|song):$", re.IGNORECASE)
RANK_PREFIX = re.compile(r"^\d+\.\s+")
ARTIST_SEPARATOR = re.compile(r"\s+-\s+")

# Substring checks only apply when the shorter string is longer than this,
# so short tokens like "a" or "id" don't match everything.
MIN_CONTAINS_LENGTH = 3


@dataclass
class SearchKey:
    """A normalized sub-term: the full text and its "Song" part of "Song - Artist"."""
    search: str
    base: str


MatchPredicate = Callable[[str, SearchKey], bool]


def _exact(cell: str, key: SearchKey) -> bool:
    return cell == key.search


def _exact_base(cell: str, key: SearchKey) -> bool:
    return cell == key.base


def _contains(cell: str, key: SearchKey) -> bool:
    return len(key.search) > MIN_CONTAINS_LENGTH and key.search in cell


def _contains_base(cell: str, key: SearchKey) -> bool:
    return len(key.base) > MIN_CONTAINS_LENGTH and key.base in cell


# Evaluated in order; the first hit wins.
MATCH_PREDICATES: list[tuple[str, MatchPredicate]] = [
    ("exact", _exact),
    ("exact-base", _exact_base),
    ("contains", _contains),
    ("contains-base", _contains_base),
]


def split_term(term: str) -> list[SearchKey]:
    """Split a raw term into search keys.

    Only newlines separate sub-terms; semicolons and other punctuation are
    part of IDs such as "ID:96;ID:97" and are kept.
    """
    keys = []
    for part in term.split("\n"):
        search = RANK_PREFIX.sub("", part.strip().lower()).strip()
        if not search:
            continue
        base = ARTIST_SEPARATOR.split(search, maxsplit=1)[0].strip()
        keys.append(SearchKey(search=search, base=base))
    return keys


def match_field(cell: str, key: SearchKey) -> str | None:
    """Name of the first predicate matching a catalog field, or None."""
    cell = cell.strip().lower()
    if not cell:
        return None
    for name, predicate in MATCH_PREDICATES:
        if predicate(cell, key):
            return name
    return None


@dataclass
class Group:
    """A resolved group: its name, raw terms, and parsed search keys."""
    name: str
    terms: list[str]
    keys: list[SearchKey]

    @classmethod
    def from_definition(cls, definition: GroupDefinition) -> "Group":
        keys = [k for term in definition.match_terms for k in split_term(term)]
        return cls(name=definition.name, terms=list(definition.match_terms), keys=keys)

    def matches(self, item: Item) -> bool:
        return any(
            match_field(cell, key) is not None
            for key in self.keys
            for cell in item.search_fields()
        )

    def members(self, catalog: Catalog) -> list[Item]:
        """Catalog songs in this group, in catalog order."""
        return [item for item in catalog.items if self.matches(item)]


def read_group_definitions(table: list[list[Any]] | None) -> list[GroupDefinition]:
    """Read one group definition per column of the config table.

    Row 0 is the group name; blank names and placeholder labels are skipped.
    Rows below are terms; blank cells and "ID:"/"Song:" labels are skipped.
    Columns without any terms define no group.
    """
    if not table:
        return []
    width = max(len(row) for row in table)
    definitions = []
    for col in range(width):
        name = clean_cell(table[0][col]) if col < len(table[0]) else ""
        if not name or name in GROUP_NAME_PLACEHOLDERS:
            continue
        terms = []
        for row in table[1:]:
            value = clean_cell(row[col]) if col < len(row) else ""
            if value and not PLACEHOLDER_TERM.match(value):
                terms.append(value)
        if terms:
            definitions.append(GroupDefinition(name=name, match_terms=terms))
    return definitions


def resolve_groups(table: list[list[Any]] | None) -> list[Group]:
    """Resolve the config table into groups. No config means no groups."""
    return [Group.from_definition(d) for d in read_group_definitions(table)]


def check_ledger(ledger: Ledger | None) -> dict[str, Any]:
    """Check whether a group's ledger can feed the divergence matrix.

    The matrix needs at least two user columns and at least one song ranked
    by every one of them. When it isn't ready, ``coverage`` gives each user's
    count of ranked songs.
    """
    if ledger is None:
        return {"table_found": False}
    users = ledger.user_columns()
    complete = [
        row for row in ledger.rows
        if all(row.scores[idx] is not None for _, idx in users)
    ]
    ready = len(users) >= 2 and bool(complete)
    coverage = {}
    if not ready:
        coverage = {
            name: sum(1 for row in ledger.rows if row.scores[idx] is not None)
            for name, idx in users
        }
    return {
        "table_found": True,
        "rows": ledger.num_items,
        "user_columns": [name for name, _ in users],
        "complete_rows": len(complete) if users else 0,
        "matrix_ready": ready,
        "coverage": coverage,
    }


def diagnose_groups(
    table: list[list[Any]] | None,
    catalog: Catalog,
    ledgers: dict[str, Ledger | None] | None = None,
) -> list[dict[str, Any]]:
    """Explain why terms may not be matching, per group.

    For each group, counts the matched songs and lists terms that don't appear
    (by plain, ungated containment) in any matched song's fields. This is
    advisory only; membership is decided by ``Group.matches``.

    If ``ledgers`` is given (group name -> loaded ledger, or None when the
    table is missing), each entry also carries a ``ledger`` check from
    ``check_ledger``.
    """
    results = []
    for definition in read_group_definitions(table):
        group = Group.from_definition(definition)
        matched = group.members(catalog)
        missed = list(definition.match_terms)
        for item in matched:
            fields = [f.lower() for f in item.search_fields()]
            missed = [
                term for term in missed
                if not any(term.lower() in f for f in fields)
            ]
        entry: dict[str, Any] = {
            "group": group.name,
            "terms": list(definition.match_terms),
            "matched": len(matched),
            "missed_terms": missed,
        }
        if ledgers is not None:
            entry["ledger"] = check_ledger(ledgers.get(group.name))
        results.append(entry)
    return results


def build_artist_reference(catalog: Catalog) -> ReportTable:
    """List every distinct attribution string with the songs carrying it.

    Useful when writing group terms: the attribution strings are what IDs
    are matched against.
    """
    by_artist: dict[str, list[str]] = {}
    for item in catalog.items:
        artist = item.attribution or "Unknown"
        by_artist.setdefault(artist, []).append(item.name)

    rows = [[artist, ", ".join(by_artist[artist])] for artist in sorted(by_artist)]
    return ReportTable(
        title="ARTIST REFERENCE",
        headers=["Artist Info", "Matching Songs"],
        rows=rows,
        highlights=["normal"] * len(rows),
    )
