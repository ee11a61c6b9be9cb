"""HTML tables, e.g. a sheet published to the web as a page."""

import re
from bs4 import BeautifulSoup

from songrank.sources import register_source
from songrank.sources.base import TableSource
from songrank.store import Table


@register_source
class HtmlTableSource(TableSource):
    """Parser for a published spreadsheet page.

    Published sheets render as a single ``<table>`` whose first column is the
    row-number gutter (``<th>`` cells) and whose first row is the column
    letter header. Both are dropped; only ``<td>`` cells are kept. Line breaks
    inside a cell (``<br>``) become newlines so pasted rankings survive.

    Expected URL format:
        https://docs.google.com/spreadsheets/d/e/<id>/pubhtml?gid=<gid>
    """

    URL_PATTERN = re.compile(r"(/pubhtml\b)|(\.html?$)", re.IGNORECASE)

    EXAMPLE_URL = "https://docs.google.com/spreadsheets/d/e/<id>/pubhtml?gid=0&single=true"

    def can_parse(self, source: str) -> bool:
        return bool(self.URL_PATTERN.search(source))

    def can_parse_content(self, content: bytes, filename: str) -> bool:
        html = content[:65536].decode("utf-8", errors="replace").lower()
        return "<table" in html

    def parse(self, source: str, content: bytes) -> Table:
        html = content.decode("utf-8", errors="replace")
        soup = BeautifulSoup(html, "lxml")

        table = soup.find("table")
        if table is None:
            raise ValueError(f"No table found in {source}")

        for br in table.find_all("br"):
            br.replace_with("\n")

        rows: Table = []
        for tr in table.find_all("tr"):
            cells = tr.find_all("td")
            if not cells:
                # Column letter header row
                continue
            rows.append([cell.get_text().strip() for cell in cells])

        # Published pages pad every row to the sheet width
        while rows and not any(rows[-1]):
            rows.pop()
        return rows
