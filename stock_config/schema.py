"""
LedgerSettings schema.

Runtime settings for the stock ledger front end.  YAML files are parsed
into this type by ``stock_config.loader``; nothing else reads the
settings file or the environment directly.
"""

from __future__ import annotations

from dataclasses import dataclass, fields

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class LedgerSettings:
    """Settings for one ledger process."""

    data_file: str = "data.json"
    log_level: str = "INFO"
    cancel_keyword: str = "cancel"  # Ends an interactive shell session
    default_point_of_sale: int | None = None
    expiry_alert_days: int = 90

    def __post_init__(self) -> None:
        if not self.data_file:
            raise ValueError("data_file must not be empty")
        if str(self.log_level).upper() not in LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}"
            )
        if not str(self.cancel_keyword).strip():
            raise ValueError("cancel_keyword must not be empty")
        if isinstance(self.expiry_alert_days, bool) or not isinstance(self.expiry_alert_days, int) \
                or self.expiry_alert_days < 0:
            raise ValueError(
                f"expiry_alert_days must be a non-negative integer, got {self.expiry_alert_days!r}"
            )
        if self.default_point_of_sale is not None and (
            isinstance(self.default_point_of_sale, bool)
            or not isinstance(self.default_point_of_sale, int)
        ):
            raise ValueError(
                f"default_point_of_sale must be an integer id, got {self.default_point_of_sale!r}"
            )

    @classmethod
    def field_names(cls) -> frozenset[str]:
        return frozenset(f.name for f in fields(cls))
