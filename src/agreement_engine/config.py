"""Configuration management for the agreement engine."""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    """Engine settings loaded from environment."""

    engine_version: str
    assumed_annual_hours: Decimal
    near_minimum_margin_percent: Decimal
    standard_hours_per_week: Decimal
    log_level: str

    @property
    def near_minimum_factor(self) -> Decimal:
        """Multiplier marking the top of the "close to minimum" band."""
        return 1 + self.near_minimum_margin_percent / 100

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables."""
        load_dotenv()

        return cls(
            engine_version=os.getenv("AGREEMENT_ENGINE_VERSION", "1.0.0"),
            assumed_annual_hours=Decimal(
                os.getenv("AGREEMENT_ENGINE_ASSUMED_ANNUAL_HOURS", "1976")
            ),
            near_minimum_margin_percent=Decimal(
                os.getenv("AGREEMENT_ENGINE_NEAR_MINIMUM_MARGIN_PERCENT", "2")
            ),
            standard_hours_per_week=Decimal(
                os.getenv("AGREEMENT_ENGINE_STANDARD_HOURS_PER_WEEK", "38")
            ),
            log_level=os.getenv("AGREEMENT_ENGINE_LOG_LEVEL", "INFO").upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()
