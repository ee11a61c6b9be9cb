"""Abstract base class for table source parsers."""

from abc import ABC, abstractmethod

from songrank.store import Table


class TableSource(ABC):
    """Abstract base class for turning fetched content into a table.

    Each source handles one export format of a published spreadsheet (CSV,
    HTML). Sources are registered via the @register_source decorator in
    songrank/sources/__init__.py.
    """

    @abstractmethod
    def can_parse(self, source: str) -> bool:
        """Check if this source can handle the given URL or filename."""
        pass

    def can_parse_content(self, content: bytes, filename: str) -> bool:
        """Check if this source can handle the given content.

        Used when the URL or filename gives no hint of the format.
        """
        return False

    @abstractmethod
    def parse(self, source: str, content: bytes) -> Table:
        """Parse the content into rows of string cells.

        Raises:
            ValueError: If the content cannot be parsed
        """
        pass
