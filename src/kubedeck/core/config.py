"""Session engine configuration with Pydantic validation."""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class SessionConfig(BaseModel):
    """Timing and sizing knobs for the interactive session.

    Defaults match the behaviour operators expect: a 250ms tick, reconnect
    backoff from 1s up to 30s, five-second status banners.
    """

    model_config = ConfigDict(extra="forbid")

    tick_interval: float = Field(default=0.25, description="Tick period in seconds")
    backoff_base: float = Field(default=1.0, description="First reconnect delay in seconds")
    backoff_cap: float = Field(default=30.0, description="Maximum reconnect delay in seconds")
    backoff_jitter: float = Field(default=0.2, description="Jitter as a fraction of the delay")
    staleness_timeout: float = Field(
        default=60.0, description="Seconds stale data stays visible while reconnecting"
    )
    banner_duration: float = Field(default=5.0, description="Transient banner lifetime in seconds")
    log_buffer_lines: int = Field(default=5000, description="Maximum retained log lines")
    log_tail_lines: int = Field(default=100, description="Lines requested when a log stream opens")
    queue_capacity: int = Field(default=256, description="Event queue bound for coalescable events")
    editor: str | None = Field(default=None, description="External editor command")

    @field_validator(
        "tick_interval", "backoff_base", "backoff_cap", "staleness_timeout", "banner_duration"
    )
    @classmethod
    def validate_positive(cls, v: float) -> float:
        """Validate durations are positive."""
        if v <= 0:
            raise ValueError("must be positive")
        return v

    @field_validator("backoff_jitter")
    @classmethod
    def validate_jitter(cls, v: float) -> float:
        """Validate jitter is a fraction."""
        if not 0 <= v < 1:
            raise ValueError("backoff_jitter must be in [0, 1)")
        return v

    @field_validator("log_buffer_lines", "log_tail_lines", "queue_capacity")
    @classmethod
    def validate_count(cls, v: int) -> int:
        """Validate sizes are at least one."""
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @model_validator(mode="after")
    def validate_backoff_range(self) -> SessionConfig:
        """The cap cannot be below the base delay."""
        if self.backoff_cap < self.backoff_base:
            raise ValueError("backoff_cap must be >= backoff_base")
        return self

    @property
    def banner_ticks(self) -> int:
        """Banner lifetime expressed in ticks."""
        return max(1, round(self.banner_duration / self.tick_interval))

    @classmethod
    def from_env(cls, base_config: dict[str, Any] | None = None) -> SessionConfig:
        """Create configuration with environment variable overrides.

        Supported environment variables:
            KUBEDECK_EDITOR: Editor command
            KUBEDECK_STALENESS_TIMEOUT: Seconds before stale data is dropped
            KUBEDECK_LOG_BUFFER_LINES: Log buffer size
            KUBEDECK_LOG_TAIL_LINES: Initial tail size for log streams
        """
        config_dict = base_config.copy() if base_config else {}

        if editor := os.environ.get("KUBEDECK_EDITOR"):
            config_dict["editor"] = editor
        if staleness := os.environ.get("KUBEDECK_STALENESS_TIMEOUT"):
            config_dict["staleness_timeout"] = staleness
        if buffer_lines := os.environ.get("KUBEDECK_LOG_BUFFER_LINES"):
            config_dict["log_buffer_lines"] = buffer_lines
        if tail_lines := os.environ.get("KUBEDECK_LOG_TAIL_LINES"):
            config_dict["log_tail_lines"] = tail_lines

        return cls.model_validate(config_dict)
