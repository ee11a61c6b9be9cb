"""Tabular store abstraction: named tables of rows of cells."""

import csv
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

Table = list[list[Any]]


class TableStore(ABC):
    """Abstract base class for the backing tabular store.

    The core never addresses the store directly except through the
    orchestrators; components receive and return in-memory tables.
    Writes are last-writer-wins.
    """

    @abstractmethod
    def read_table(self, name: str) -> Table | None:
        """Return all rows of a table, or None if the table does not exist."""
        pass

    @abstractmethod
    def write_table(self, name: str, rows: Table) -> None:
        """Replace a table's contents, creating it if needed."""
        pass

    @abstractmethod
    def table_names(self) -> list[str]:
        pass

    def append_row(self, name: str, row: list[Any]) -> None:
        rows = self.read_table(name) or []
        rows.append(list(row))
        self.write_table(name, rows)

    def clear_column(self, name: str, index: int, start_row: int = 1) -> None:
        """Blank one column's cells from ``start_row`` down, keeping the header."""
        rows = self.read_table(name)
        if rows is None:
            return
        for row in rows[start_row:]:
            if index < len(row):
                row[index] = ""
        self.write_table(name, rows)


class MemoryTableStore(TableStore):
    """In-memory store, used by the HTTP handler and tests."""

    def __init__(self, tables: dict[str, Table] | None = None):
        self.tables: dict[str, Table] = {
            name: [list(r) for r in rows] for name, rows in (tables or {}).items()
        }

    def read_table(self, name: str) -> Table | None:
        rows = self.tables.get(name)
        if rows is None:
            return None
        return [list(r) for r in rows]

    def write_table(self, name: str, rows: Table) -> None:
        self.tables[name] = [list(r) for r in rows]

    def table_names(self) -> list[str]:
        return list(self.tables)


class CsvDirectoryStore(TableStore):
    """One CSV file per table in a directory.

    Table names are mapped to file names by replacing characters that are
    unsafe in paths; "Paste Rankings Here" is stored as
    "Paste Rankings Here.csv".
    """

    UNSAFE_CHARS = re.compile(r'[\\/:*?"<>|]')

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def _path(self, name: str) -> Path:
        return self.directory / f"{self.UNSAFE_CHARS.sub('_', name)}.csv"

    def read_table(self, name: str) -> Table | None:
        path = self._path(name)
        if not path.exists():
            return None
        with path.open(newline="", encoding="utf-8") as f:
            return [row for row in csv.reader(f)]

    def write_table(self, name: str, rows: Table) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        with self._path(name).open("w", newline="", encoding="utf-8") as f:
            csv.writer(f).writerows(rows)

    def table_names(self) -> list[str]:
        if not self.directory.exists():
            return []
        return sorted(p.stem for p in self.directory.glob("*.csv"))
