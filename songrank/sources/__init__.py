"""Table sources for published spreadsheet exports."""

from .base import TableSource

# Source registry - import sources here to register them
_sources: list[type[TableSource]] = []


def register_source(source_class: type[TableSource]) -> type[TableSource]:
    """Decorator to register a table source class."""
    _sources.append(source_class)
    return source_class


def get_supported_url_formats() -> str:
    """Return a user-friendly description of supported URL formats."""
    lines = ["We currently read published sheets as:"]
    for source_class in _sources:
        example = getattr(source_class, "EXAMPLE_URL", None)
        if example:
            lines.append(f"  - {example}")
    return "\n".join(lines)


def detect_source(source: str) -> TableSource | None:
    """Auto-detect and return a source instance for the given URL or filename."""
    for source_class in _sources:
        parser = source_class()
        if parser.can_parse(source):
            return parser
    return None


def detect_source_by_content(content: bytes, filename: str) -> TableSource | None:
    """Auto-detect a source from the content itself."""
    for source_class in _sources:
        parser = source_class()
        if parser.can_parse_content(content, filename):
            return parser
    return None
