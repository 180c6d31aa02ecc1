"""
config/settings.py — typewriter Runtime Settings

Merges config.yaml (defaults/structure) with TYPEWRITER_* environment
variables. Pydantic-powered: all fields are validated and typed.

  - DelayedConfig accepts durations as seconds (0.5) or ISO-8601 ("PT0.5S")
    and rejects negative values at parse time
  - validate_all() performs cross-field startup validation and raises
    ConfigError listing every problem found
  - load_settings() respects TYPEWRITER_CONFIG as a fallback when no
    explicit config_path argument is given
"""

from __future__ import annotations

import os
from datetime import timedelta
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from typewriter.exceptions import ConfigError


_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

# A single gap longer than this makes the REPL look hung.
_MAX_PRINT_DURATION = timedelta(minutes=5)


# ─────────────────────────────────────────────────────────────────────────────
# Sub-models
# ─────────────────────────────────────────────────────────────────────────────

class DelayedConfig(BaseModel):
    wait_duration: timedelta = timedelta(0)
    print_duration: timedelta = timedelta(0)
    ignore_delays: bool = False

    @field_validator("wait_duration", "print_duration")
    @classmethod
    def _non_negative(cls, v: timedelta) -> timedelta:
        if v < timedelta(0):
            raise ValueError("delayed durations must be >= 0")
        return v


class LoggingConfig(BaseModel):
    level: str = "INFO"
    log_dir: str = "./data/logs"
    max_file_size_mb: int = 10
    backup_count: int = 3
    console_output: bool = False
    json_format: bool = True

    @field_validator("level")
    @classmethod
    def _valid_log_level(cls, v: str) -> str:
        upper = v.upper()
        if upper not in _VALID_LOG_LEVELS:
            raise ValueError(
                f"logging.level '{v}' is not valid. "
                f"Must be one of: {sorted(_VALID_LOG_LEVELS)}"
            )
        return upper

    @field_validator("max_file_size_mb", "backup_count")
    @classmethod
    def _positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("logging.max_file_size_mb and logging.backup_count must be >= 1")
        return v


# ─────────────────────────────────────────────────────────────────────────────
# Root Settings
# ─────────────────────────────────────────────────────────────────────────────

class Settings(BaseSettings):
    """
    typewriter runtime settings.

    Priority (highest to lowest):
      1. Explicit keyword arguments (config.yaml sections)
      2. Environment variables (TYPEWRITER_DELAYED__PRINT_DURATION=1.5)
      3. Field defaults
    """

    model_config = SettingsConfigDict(
        env_prefix="TYPEWRITER_",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    delayed: DelayedConfig = Field(default_factory=DelayedConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("delayed", mode="before")
    @classmethod
    def _coerce_delayed(cls, v: Any) -> Any:
        return DelayedConfig(**v) if isinstance(v, dict) else v

    @field_validator("logging", mode="before")
    @classmethod
    def _coerce_logging(cls, v: Any) -> Any:
        return LoggingConfig(**v) if isinstance(v, dict) else v

    # -- Convenience properties ----------------------------------------------

    @property
    def log_level(self) -> str:
        return self.logging.level.upper()

    @property
    def log_dir(self) -> Path:
        return Path(self.logging.log_dir)

    @property
    def log_json_format(self) -> bool:
        return self.logging.json_format

    @property
    def log_console_output(self) -> bool:
        return self.logging.console_output

    def to_properties(self, writer=None):
        """Build delayed.Properties from the `delayed` section."""
        from typewriter.delayed.delayed import Properties

        return Properties(
            writer=writer,
            wait_duration=self.delayed.wait_duration,
            print_duration=self.delayed.print_duration,
            ignore_delays=self.delayed.ignore_delays,
        )

    def validate_all(self) -> None:
        """
        Full startup validation. Raises ConfigError listing every problem found.

        Pydantic field validators catch type/value errors at parse time; this
        method catches values that parse fine but make no sense at runtime.
        """
        errors: list[str] = []

        for name in ("wait_duration", "print_duration"):
            value: timedelta = getattr(self.delayed, name)
            if value > _MAX_PRINT_DURATION:
                errors.append(
                    f"delayed.{name} is {value.total_seconds():g}s; the maximum "
                    f"is {_MAX_PRINT_DURATION.total_seconds():g}s."
                )

        if not self.logging.log_dir.strip():
            errors.append("logging.log_dir must not be empty. Use './data/logs'.")

        if errors:
            numbered = "\n".join(f"  {i+1}. {e}" for i, e in enumerate(errors))
            raise ConfigError(
                f"\n\ntypewriter startup failed: {len(errors)} configuration "
                f"problem(s) found:\n\n{numbered}\n\n"
                f"Fix the issues above in config/config.yaml or your environment "
                f"and restart.\n"
            )


# ─────────────────────────────────────────────────────────────────────────────
# Loader
# ─────────────────────────────────────────────────────────────────────────────

_KNOWN_SECTIONS = {"delayed", "logging"}


def _load_yaml(path: Path) -> dict:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _resolve_config_path(config_path: str | Path | None) -> Path:
    """
    Resolve the config file path with this priority:
      1. Explicit config_path argument (from --config CLI flag)
      2. TYPEWRITER_CONFIG environment variable
      3. Default: config/config.yaml
    """
    if config_path is not None:
        return Path(config_path)
    env_path = os.environ.get("TYPEWRITER_CONFIG")
    if env_path:
        return Path(env_path)
    return Path("config/config.yaml")


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings by merging config.yaml with environment variables."""
    resolved_path = _resolve_config_path(config_path)
    yaml_data = _load_yaml(resolved_path)

    init_kwargs = {k: v for k, v in yaml_data.items() if k in _KNOWN_SECTIONS}

    return Settings(**init_kwargs)
