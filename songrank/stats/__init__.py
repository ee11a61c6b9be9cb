"""Comparative statistics reports over group ledgers."""

from .base import AnalysisContext, Report

# Report registry - import report modules to register them
_reports: list[type[Report]] = []


def register_report(report_class: type[Report]) -> type[Report]:
    """Decorator to register a report class."""
    _reports.append(report_class)
    return report_class


def get_all_reports() -> list[Report]:
    """Return instances of all registered reports, in registration order."""
    return [report_class() for report_class in _reports]
