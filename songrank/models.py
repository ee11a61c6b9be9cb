"""Core data models for catalogs, submissions, ledgers and reports."""

import math
from dataclasses import dataclass, field
from typing import Any, Self

from songrank.config import (
    CATALOG_ATTRIBUTION_COLUMN,
    CATALOG_KEY_COLUMN,
    CATALOG_NAME_COLUMN,
    SYSTEM_COLUMNS,
)

Score = float | None


def clean_cell(value: Any) -> str:
    """Return a table cell as a trimmed string ("" for empty cells)."""
    if value is None:
        return ""
    return str(value).strip()


def parse_score(value: Any) -> Score:
    """Parse a ledger cell into a rank, or None when it is blank/non-numeric.

    Blank cells are absent, never zero.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def format_number(value: Score) -> int | float | str:
    """Render a score for a table cell: integral values as ints, blanks as ""."""
    if value is None:
        return ""
    if float(value).is_integer():
        return int(value)
    return value


@dataclass
class Item:
    """A canonical catalog song.

    Attributes:
        name: Song name (the ledger's item name)
        key: Catalog key/ID column
        attribution: Artist info string, may hold several IDs ("ID:96;ID:97")
    """
    name: str
    key: str = ""
    attribution: str = ""

    def search_fields(self) -> list[str]:
        """Fields a group term is matched against, in catalog column order."""
        return [self.key, self.name, self.attribution]

    @classmethod
    def from_row(cls, row: list[Any]) -> Self:
        def cell(idx: int) -> str:
            return clean_cell(row[idx]) if idx < len(row) else ""

        return cls(
            name=cell(CATALOG_NAME_COLUMN),
            key=cell(CATALOG_KEY_COLUMN),
            attribution=cell(CATALOG_ATTRIBUTION_COLUMN),
        )


@dataclass
class Catalog:
    """Ordered list of catalog songs, read from a table with a header row."""
    items: list[Item]

    @classmethod
    def from_table(cls, rows: list[list[Any]]) -> Self:
        return cls(items=[Item.from_row(row) for row in rows[1:]])

    def attribution_of(self, name: str) -> str:
        """Attribution for a song name; the last catalog row wins, like a dict build."""
        found = ""
        for item in self.items:
            if item.name == name:
                found = item.attribution
        return found


@dataclass
class GroupDefinition:
    """A named group and its raw match terms (terms may embed newlines)."""
    name: str
    match_terms: list[str]


@dataclass
class RankEntry:
    """One parsed line of a pasted ranking ("12. Song - Artist")."""
    original_rank: int
    item_name: str


@dataclass
class Submission:
    """A user's parsed ranking, in pasted order."""
    user: str
    entries: list[RankEntry]

    @property
    def count(self) -> int:
        return len(self.entries)


@dataclass
class RelativeRanking:
    """A user's dense ranks restricted to one group's songs.

    Attributes:
        ranks: ledger song name -> dense rank (1..k)
        unmatched: submitted names with no song of that name in the group
        submitted: total number of entries the user submitted
    """
    ranks: dict[str, int]
    unmatched: list[str] = field(default_factory=list)
    submitted: int = 0

    @property
    def matched(self) -> int:
        return len(self.ranks)


@dataclass
class LedgerRow:
    """One song in a group ledger.

    ``scores`` is aligned with the owning ledger's ``users`` slots. Points and
    average are derived from the scores and never stored.
    """
    item: str
    scores: list[Score]
    rank: int = 0

    @property
    def numeric_scores(self) -> list[float]:
        return [s for s in self.scores if s is not None]

    @property
    def points(self) -> float:
        return sum(self.numeric_scores)

    @property
    def average(self) -> float:
        values = self.numeric_scores
        if not values:
            return 0.0
        return sum(values) / len(values)


@dataclass
class Ledger:
    """A group's song x user rank matrix.

    Attributes:
        group: Group name (also the ledger's table name)
        users: User column headers after the system columns, in column
            order; "" marks a free slot
        rows: Songs, kept in ascending points order with rank 1..k

    Example:
        >>> ledger = Ledger.from_table("Group", [
        ...     ["Rank", "Song", "Points", "Average", "Alice", "Bob"],
        ...     [1, "Song X", 2, 1.0, 1, 1],
        ... ])
        >>> ledger.rows[0].points
        2.0
    """
    group: str
    users: list[str] = field(default_factory=list)
    rows: list[LedgerRow] = field(default_factory=list)

    @property
    def item_names(self) -> list[str]:
        return [row.item for row in self.rows]

    @property
    def num_items(self) -> int:
        return len(self.rows)

    def user_columns(self) -> list[tuple[str, int]]:
        """(name, slot index) of every named user column."""
        system = {c.lower() for c in SYSTEM_COLUMNS}
        return [
            (name, idx) for idx, name in enumerate(self.users)
            if name and name.lower() not in system
        ]

    def ranked_user_columns(self) -> list[tuple[str, int]]:
        """User columns holding at least one numeric rank."""
        return [
            (name, idx) for name, idx in self.user_columns()
            if any(row.scores[idx] is not None for row in self.rows)
        ]

    def user_index(self, user: str) -> int | None:
        """Slot index of a user column (exact, case-sensitive header match)."""
        for idx, name in enumerate(self.users):
            if name == user:
                return idx
        return None

    def get_score(self, item: str, user: str) -> Score:
        idx = self.user_index(user)
        if idx is None:
            return None
        for row in self.rows:
            if row.item == item:
                return row.scores[idx]
        return None

    def add_user_slot(self) -> int:
        """Append a free user slot and return its index."""
        self.users.append("")
        for row in self.rows:
            row.scores.append(None)
        return len(self.users) - 1

    @classmethod
    def from_table(cls, group: str, table: list[list[Any]]) -> Self:
        """Load a ledger from its table form (header row, then song rows).

        Rows with a blank song name are dropped. Points/average cells are
        ignored; they are recomputed from the scores.
        """
        if not table:
            return cls(group=group)
        offset = len(SYSTEM_COLUMNS)
        users = [clean_cell(h) for h in table[0][offset:]]
        rows = []
        for position, raw in enumerate(table[1:], start=1):
            item = clean_cell(raw[1]) if len(raw) > 1 else ""
            if not item:
                continue
            scores = [
                parse_score(raw[offset + i]) if offset + i < len(raw) else None
                for i in range(len(users))
            ]
            rank = parse_score(raw[0]) if raw else None
            rows.append(LedgerRow(
                item=item,
                scores=scores,
                rank=int(rank) if rank is not None else position,
            ))
        return cls(group=group, users=users, rows=rows)

    def to_table(self) -> list[list[Any]]:
        """Render the ledger as rows: header, then [rank, song, points, average, *scores]."""
        table: list[list[Any]] = [list(SYSTEM_COLUMNS) + list(self.users)]
        for row in self.rows:
            table.append([
                row.rank,
                row.item,
                format_number(row.points),
                round(row.average, 2),
                *(format_number(s) for s in row.scores),
            ])
        return table


@dataclass
class ReportTable:
    """A titled, ranked list produced by a report for the presentation layer.

    Attributes:
        title: Report title
        headers: Column headers
        rows: Ordered data rows
        highlights: Per-row classification (e.g. "severe", "high", "normal"),
            aligned with ``rows``
        description: Optional one-line explanation
    """
    title: str
    headers: list[str]
    rows: list[list[Any]]
    highlights: list[str] = field(default_factory=list)
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "headers": self.headers,
            "rows": self.rows,
            "highlights": self.highlights,
        }

    def to_table(self) -> list[list[Any]]:
        """Flatten into table rows: title, headers, data rows."""
        return [[self.title], list(self.headers), *[list(r) for r in self.rows]]


@dataclass
class ReportResult:
    """Output of one report.

    Attributes:
        report_name: Human-readable name of the report
        section: Output table the report belongs to ("divergence", "takes",
            "more", "spice")
        tables: Rendered tables, in display order
        details: Report-specific structured data for transparency
    """
    report_name: str
    section: str
    tables: list[ReportTable]
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "report_name": self.report_name,
            "section": self.section,
            "tables": [t.to_dict() for t in self.tables],
            "details": self.details,
        }
