# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for logging, memory diagnostics, file encoding
and the default combine parameters used by the CLI.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from recordkit.core.models import CombineOutcome, Precedence
from recordkit.logging.handlers import parse_size


PRECEDENCE_NAMES: dict[str, Precedence] = {
    "later": Precedence.LATER_WINS,
    "earlier": Precedence.EARLIER_WINS,
    "none": Precedence.NO_OVERRIDE,
}


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file (RECORDKIT_ prefix)."""

    model_config = SettingsConfigDict(
        env_prefix="RECORDKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # === Memory diagnostics ===
    memory_check_enabled: bool = True
    low_memory_threshold_bytes: int = 64 * 1024 * 1024

    # === Files ===
    default_data_parent: str = ""
    tab_delim_encoding: str = "utf-8"

    # === Combine defaults ===
    combine_precedence: Literal["later", "earlier", "none"] = "later"
    combine_max_allowed: CombineOutcome = CombineOutcome.OVERRIDE
    combine_min_no_loss: int = 0

    # --- Validators ---

    @field_validator("low_memory_threshold_bytes", "log_retention", "combine_min_no_loss")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @field_validator("log_rotation")
    @classmethod
    def validate_rotation(cls, v: str) -> str:
        parse_size(v)
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Cross-field rules."""
        errors: list[str] = []

        if (
            self.combine_precedence == "none"
            and self.combine_max_allowed == CombineOutcome.OVERRIDE
        ):
            errors.append(
                "COMBINE_MAX_ALLOWED=OVERRIDE has no effect with COMBINE_PRECEDENCE=none"
            )

        if self.memory_check_enabled and self.low_memory_threshold_bytes == 0:
            errors.append(
                "MEMORY_CHECK_ENABLED requires LOW_MEMORY_THRESHOLD_BYTES > 0"
            )

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def precedence(self) -> Precedence:
        return PRECEDENCE_NAMES[self.combine_precedence]


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides."""
    return Settings(**overrides)  # type: ignore[arg-type]
