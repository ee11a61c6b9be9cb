"""Abstract base class for statistics reports."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from songrank.config import Settings
from songrank.log import SyncLog
from songrank.models import Catalog, Ledger, ReportResult


@dataclass
class AnalysisContext:
    """Everything a report may read.

    Attributes:
        ledgers: Group ledgers, in group config order
        settings: Thresholds and list lengths
        catalog: Song catalog, needed only by attribution-based reports
        log: Sink for skip/diagnostic entries
    """
    ledgers: list[Ledger]
    settings: Settings = field(default_factory=Settings)
    catalog: Catalog | None = None
    log: SyncLog = field(default_factory=SyncLog)

    @property
    def group_names(self) -> list[str]:
        return [ledger.group for ledger in self.ledgers]


class Report(ABC):
    """Abstract base class for reports.

    Each report computes its tables from the ledgers in an AnalysisContext.
    Reports are registered via the @register_report decorator in
    songrank/stats/__init__.py.
    """

    section = "more"

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of this report."""
        pass

    @property
    def description(self) -> str:
        return ""

    @abstractmethod
    def compute(self, context: AnalysisContext) -> ReportResult:
        """Compute this report.

        Raises:
            InsufficientDataError: If the ledgers don't hold enough data
        """
        pass
