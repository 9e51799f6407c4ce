"""Unit tests for SessionConfig."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from kubedeck.core.config import SessionConfig


@pytest.mark.unit
class TestSessionConfig:
    """Tests for SessionConfig model."""

    def test_defaults(self) -> None:
        """Defaults should match the documented timings."""
        config = SessionConfig()

        assert config.tick_interval == 0.25
        assert config.backoff_base == 1.0
        assert config.backoff_cap == 30.0
        assert config.backoff_jitter == 0.2
        assert config.banner_duration == 5.0
        assert config.editor is None

    def test_banner_ticks(self) -> None:
        """Banner lifetime should be expressed in whole ticks."""
        assert SessionConfig().banner_ticks == 20
        assert SessionConfig(tick_interval=1, banner_duration=0.1).banner_ticks == 1

    @pytest.mark.parametrize(
        "field", ["tick_interval", "backoff_base", "staleness_timeout", "banner_duration"]
    )
    def test_durations_must_be_positive(self, field: str) -> None:
        """Zero durations should be rejected."""
        with pytest.raises(ValidationError, match="must be positive"):
            SessionConfig(**{field: 0})

    def test_jitter_must_be_fraction(self) -> None:
        """Jitter of a whole delay or more should be rejected."""
        with pytest.raises(ValidationError, match="backoff_jitter"):
            SessionConfig(backoff_jitter=1.0)

    def test_counts_must_be_positive(self) -> None:
        """Buffer sizes below one should be rejected."""
        with pytest.raises(ValidationError, match="at least 1"):
            SessionConfig(log_buffer_lines=0)

    def test_cap_below_base_rejected(self) -> None:
        """The backoff cap cannot be lower than the base delay."""
        with pytest.raises(ValidationError, match="backoff_cap"):
            SessionConfig(backoff_base=10, backoff_cap=5)

    def test_unknown_field_rejected(self) -> None:
        """Extra fields should be forbidden."""
        with pytest.raises(ValidationError):
            SessionConfig(refresh_rate=1)  # type: ignore[call-arg]


@pytest.mark.unit
class TestSessionConfigFromEnv:
    """Tests for SessionConfig.from_env."""

    def test_from_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Environment variables should override base values."""
        monkeypatch.setenv("KUBEDECK_EDITOR", "nano")
        monkeypatch.setenv("KUBEDECK_STALENESS_TIMEOUT", "15")
        monkeypatch.setenv("KUBEDECK_LOG_BUFFER_LINES", "200")
        monkeypatch.setenv("KUBEDECK_LOG_TAIL_LINES", "10")

        config = SessionConfig.from_env({"editor": "vim", "tick_interval": 0.5})

        assert config.editor == "nano"
        assert config.staleness_timeout == 15
        assert config.log_buffer_lines == 200
        assert config.log_tail_lines == 10
        assert config.tick_interval == 0.5

    def test_from_env_without_variables(self) -> None:
        """No environment should yield defaults."""
        assert SessionConfig.from_env() == SessionConfig()

    def test_from_env_invalid_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Invalid environment values should fail validation."""
        monkeypatch.setenv("KUBEDECK_LOG_TAIL_LINES", "lots")

        with pytest.raises(ValidationError):
            SessionConfig.from_env()
