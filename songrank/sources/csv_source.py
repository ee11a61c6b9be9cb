"""CSV exports, e.g. a sheet published with ``output=csv``."""

import csv
import io
import re

from songrank.sources import register_source
from songrank.sources.base import TableSource
from songrank.store import Table


@register_source
class CsvSource(TableSource):
    """Comma-separated export of a single sheet.

    Cells may contain quoted newlines (a whole pasted ranking in one cell);
    the csv module keeps them inside the cell.
    """

    URL_PATTERN = re.compile(r"(\.csv$)|([?&](output|format)=csv\b)", re.IGNORECASE)

    EXAMPLE_URL = "https://docs.google.com/spreadsheets/d/e/<id>/pub?gid=0&single=true&output=csv"

    def can_parse(self, source: str) -> bool:
        return bool(self.URL_PATTERN.search(source))

    def can_parse_content(self, content: bytes, filename: str) -> bool:
        text = content[:2048].decode("utf-8", errors="replace").lstrip()
        if not text or text.startswith("<"):
            return False
        first_line = text.split("\n", 1)[0]
        return "," in first_line

    def parse(self, source: str, content: bytes) -> Table:
        text = content.decode("utf-8-sig", errors="replace")
        try:
            rows = [row for row in csv.reader(io.StringIO(text))]
        except csv.Error as e:
            raise ValueError(f"Invalid CSV in {source}: {e}") from e
        return rows
