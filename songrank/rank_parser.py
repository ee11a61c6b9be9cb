"""Parser for pasted ranked lists ("1. Song Name - Artist")."""

import re
from typing import Any

from songrank.errors import NoValidRankingsError
from songrank.log import LogStatus, SyncLog
from songrank.models import RankEntry, Submission, clean_cell

# Rank, period, whitespace, then the song name; an optional " - trailing text"
# (usually the artist) is discarded.
LINE_PATTERN = re.compile(r"^(\d+)\.\s+(.+?)(?:\s+-\s+.+)?$")


def parse_ranking(text: str) -> list[RankEntry]:
    """Parse a block of pasted ranking lines.

    Lines not matching the grammar are skipped, so malformed input yields
    fewer entries rather than an error.
    """
    entries = []
    for line in str(text or "").split("\n"):
        match = LINE_PATTERN.match(line.strip())
        if match:
            entries.append(RankEntry(
                original_rank=int(match.group(1)),
                item_name=match.group(2).strip(),
            ))
    return entries


def parse_submissions(
    table: list[list[Any]], log: SyncLog | None = None
) -> dict[str, Submission]:
    """Parse the submissions table into one Submission per user.

    Column 0 holds labels. Every later column is one user: row 0 is the user
    name, and all non-blank cells below it are parsed in row order (a cell may
    hold a whole multi-line paste).

    Raises:
        NoValidRankingsError: If no user column has a single valid line
    """
    submissions: dict[str, Submission] = {}
    if not table:
        raise NoValidRankingsError("The submissions table is empty")

    width = max(len(row) for row in table)
    header = table[0]
    for col in range(1, width):
        user = clean_cell(header[col]) if col < len(header) else ""
        if not user:
            continue

        entries: list[RankEntry] = []
        for row in table[1:]:
            cell = clean_cell(row[col]) if col < len(row) else ""
            if cell:
                entries.extend(parse_ranking(cell))

        if entries:
            submissions[user] = Submission(user=user, entries=entries)
        elif log is not None:
            log.add(user, LogStatus.SKIP, "No valid rankings found in column")

    if not submissions:
        raise NoValidRankingsError(
            "No valid rankings found. Ensure the format is '1. Song Name'"
        )
    return submissions


def format_ranking(names: list[str]) -> list[str]:
    """Render names as numbered ranking lines, the format the parser reads."""
    return [f"{rank}. {name}" for rank, name in enumerate(names, start=1)]
