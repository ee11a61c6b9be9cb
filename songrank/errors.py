"""Exception types raised by the sync and analysis passes."""


class SongrankError(Exception):
    """Base class for all songrank errors."""
    pass


class ConfigurationError(SongrankError):
    """A required input table (such as the song catalog) is missing.

    This aborts the whole pass; everything downstream depends on it.
    """
    pass


class NoValidRankingsError(SongrankError, ValueError):
    """No user in the submissions table has a single parseable ranking line."""
    pass


class InsufficientDataError(SongrankError, ValueError):
    """A report cannot be computed from the available ledgers.

    Raised by individual reports (e.g. fewer than two users share any
    fully-ranked song) and caught by the analysis orchestrator, which
    skips that report and continues with the rest.
    """
    pass


class AnalysisError(SongrankError):
    """Error during a full analysis pass."""
    pass
