"""Anonymize a submissions table exported as CSV.

Reads the "Paste Rankings Here" table (one user per column, user names in the
"User Name" row), generates fake replacements using faker with a fixed seed,
and writes an anonymized copy. Group ledgers exported alongside it can be
passed too; their header rows are rewritten with the same mapping so the
fixtures stay consistent.

Usage:
    python scripts/anonymize_submissions.py "exports/Paste Rankings Here.csv"
    python scripts/anonymize_submissions.py submissions.csv -o output.csv
    python scripts/anonymize_submissions.py submissions.csv --ledger "exports/Tab A.csv"
"""

import argparse
import csv
import io
from pathlib import Path

from faker import Faker

from songrank.config import SUBMISSIONS_USER_LABEL

FIXTURES_DIR = Path(__file__).parent.parent / "tests" / "fixtures"
DEFAULT_OUTPUT = FIXTURES_DIR / "Paste Rankings Here.csv"

SEED = 20260201
LEDGER_USER_OFFSET = 4


def read_rows(path: Path) -> list[list[str]]:
    with path.open(newline="", encoding="utf-8-sig") as f:
        return list(csv.reader(f))


def write_rows(path: Path, rows: list[list[str]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    buffer = io.StringIO()
    csv.writer(buffer).writerows(rows)
    path.write_text(buffer.getvalue(), encoding="utf-8")


def discover_names(rows: list[list[str]]) -> set[str]:
    """Find user names in the submissions table.

    They sit in the row whose first cell is "User Name", from column B on.
    """
    names: set[str] = set()
    for row in rows:
        if row and row[0].strip().lower() == SUBMISSIONS_USER_LABEL.lower():
            names.update(cell.strip() for cell in row[1:] if cell.strip())
    return names


def generate_fake_names(names: set[str], seed: int) -> dict[str, str]:
    """Map each real name to a fake first name.

    Case variants of one name ("alice", "Alice") get the same fake name, and
    no fake name collides with a real one.
    """
    fake = Faker(["en_US", "en_GB", "de_DE", "fr_FR"])
    Faker.seed(seed)

    lower_to_variants: dict[str, list[str]] = {}
    for name in sorted(names):
        lower_to_variants.setdefault(name.lower(), []).append(name)

    taken = {n.lower() for n in names}
    mapping: dict[str, str] = {}
    for lower_name in sorted(lower_to_variants):
        fake_name = fake.first_name()
        while fake_name.lower() in taken:
            fake_name = fake.first_name()
        taken.add(fake_name.lower())
        for name in lower_to_variants[lower_name]:
            mapping[name] = fake_name.upper() if name.isupper() else fake_name

    return mapping


def anonymize_submissions(rows: list[list[str]], mapping: dict[str, str]) -> list[list[str]]:
    """Replace names in the user-name row only; rankings are left untouched."""
    result = []
    for row in rows:
        if row and row[0].strip().lower() == SUBMISSIONS_USER_LABEL.lower():
            row = [row[0], *(mapping.get(cell.strip(), cell) for cell in row[1:])]
        result.append(list(row))
    return result


def anonymize_ledger(rows: list[list[str]], mapping: dict[str, str]) -> list[list[str]]:
    """Replace user column headers of a group ledger."""
    if not rows:
        return rows
    header = list(rows[0])
    for idx in range(LEDGER_USER_OFFSET, len(header)):
        header[idx] = mapping.get(header[idx].strip(), header[idx])
    return [header, *[list(r) for r in rows[1:]]]


def main():
    parser = argparse.ArgumentParser(
        description="Anonymize a song ranking submissions CSV")
    parser.add_argument("input", help="Path to the submissions CSV file")
    parser.add_argument("-o", "--output", default=str(DEFAULT_OUTPUT),
                        help=f"Output path (default: {DEFAULT_OUTPUT})")
    parser.add_argument("--ledger", action="append", default=[],
                        help="Group ledger CSV to anonymize; the copy is written "
                             "next to the output (repeatable)")
    args = parser.parse_args()

    rows = read_rows(Path(args.input))

    names = discover_names(rows)
    print(f"Found {len(names)} unique user names")

    mapping = generate_fake_names(names, SEED)

    for original, fake in sorted(mapping.items()):
        print(f"  {original} -> {fake}")

    result = anonymize_submissions(rows, mapping)

    # Verify no original names remain
    remaining = discover_names(result) & names
    if remaining:
        print(f"WARNING: {len(remaining)} names still found: {sorted(remaining)}")
    else:
        print("All names successfully replaced.")

    output_path = Path(args.output)
    write_rows(output_path, result)
    print(f"Written to {output_path}")

    for ledger in args.ledger:
        ledger_path = Path(ledger)
        ledger_output = output_path.parent / ledger_path.name
        write_rows(ledger_output, anonymize_ledger(read_rows(ledger_path), mapping))
        print(f"Written to {ledger_output}")


if __name__ == "__main__":
    main()
