"""Runtime settings read from environment variables."""

import os
import logging

from pydantic import BaseModel, Field

from .reconciliation.amounts import LocaleConfig

logger = logging.getLogger(__name__)


class EngineSettings(BaseModel):
    """Settings for the CLI and HTTP layers around the engine."""
    currency_symbol: str = Field(default="₹")
    digit_grouping: str = Field(default="indian")
    decimals: int = Field(default=2)
    export_dir: str = Field(default=".")
    log_level: str = Field(default="INFO")

    @property
    def locale(self) -> LocaleConfig:
        return LocaleConfig(
            symbol=self.currency_symbol,
            grouping=self.digit_grouping,
            decimals=self.decimals,
        )


def get_settings() -> EngineSettings:
    """
    Build settings from RECON_* environment variables.
    Unset or invalid values fall back to the defaults.
    """
    grouping = os.getenv("RECON_DIGIT_GROUPING", "indian").strip().lower()
    if grouping not in ("indian", "western"):
        logger.warning(f"Unknown RECON_DIGIT_GROUPING {grouping!r}, using 'indian'")
        grouping = "indian"

    decimals_text = os.getenv("RECON_DECIMALS", "2")
    try:
        decimals = max(0, min(6, int(decimals_text)))
    except ValueError:
        logger.warning(f"Invalid RECON_DECIMALS {decimals_text!r}, using 2")
        decimals = 2

    return EngineSettings(
        currency_symbol=os.getenv("RECON_CURRENCY_SYMBOL", "₹"),
        digit_grouping=grouping,
        decimals=decimals,
        export_dir=os.getenv("RECON_EXPORT_DIR", "."),
        log_level=os.getenv("RECON_LOG_LEVEL", "INFO").upper(),
    )
