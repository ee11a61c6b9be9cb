"""Table names, column conventions and analysis thresholds."""

from dataclasses import dataclass, field, fields
from typing import Any, Self

# Fixed leading columns of every group ledger
SYSTEM_COLUMNS = ["Rank", "Song", "Points", "Average"]

# Searchable catalog columns: ID/key, song name, attribution (artist info)
CATALOG_KEY_COLUMN = 0
CATALOG_NAME_COLUMN = 1
CATALOG_ATTRIBUTION_COLUMN = 7

# Header labels in the group config table that are not group names
GROUP_NAME_PLACEHOLDERS = {"Custom Tab Name", "Artist Reference"}

# First-column label of the user-name row in the submissions table
SUBMISSIONS_USER_LABEL = "User Name"


@dataclass
class Settings:
    """Runtime settings for a sync/analysis pass.

    Attributes:
        catalog_table: Table holding the canonical song catalog
        config_table: Table holding one group definition per column
        submissions_table: Table holding pasted rankings, one user per column
        log_table: Table the sync log is flushed to
        sleeper_best_below: A sleeper's best individual rank must be below this
        sleeper_mean_above: A sleeper's mean rank must be above this
        hot_take_threshold: Minimum |deviation| for the global hot takes list
        top_n: Length of most top-N report lists
        top_bottom_n: Length of each half of the top/bottom report
        attribution_labels: attribution key (e.g. "ID:160") -> display label
    """
    catalog_table: str = "Base"
    config_table: str = "Sheet Manager"
    submissions_table: str = "Paste Rankings Here"
    log_table: str = "Sync Log"
    divergence_table: str = "Opps"
    takes_table: str = "Takes"
    more_analysis_table: str = "More Analysis"
    spice_table: str = "Spice Index"
    sleeper_best_below: float = 30
    sleeper_mean_above: float = 60
    hot_take_threshold: float = 25
    top_n: int = 20
    top_bottom_n: int = 10
    attribution_labels: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Self:
        """Build settings from a (possibly partial) mapping of overrides.

        Raises:
            ValueError: If the mapping contains an unknown setting name
        """
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(unknown)}")
        return cls(**data)
