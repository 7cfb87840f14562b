"""Tests for application configuration."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from audiotally.config import AppConfig
from audiotally.formats import AUDIO_EXTENSIONS
from audiotally.pipeline.aggregator import CountMode


class TestAppConfig:
    """Test AppConfig dataclass."""

    def test_default_config(self) -> None:
        """Should create config with default values."""
        with patch("audiotally.pipeline.pool.os.cpu_count", return_value=6):
            config = AppConfig()

        assert config.workers == 6
        assert config.count_mode is CountMode.FAILURE
        assert config.job_timeout is None
        assert config.extensions == AUDIO_EXTENSIONS

    def test_cpu_count_unknown(self) -> None:
        """Should fall back to a single worker."""
        with patch("audiotally.pipeline.pool.os.cpu_count", return_value=None):
            assert AppConfig().workers == 1

    def test_custom_config(self) -> None:
        """Should create config with custom values."""
        config = AppConfig(workers=3, count_mode="duration", job_timeout=2.5, extensions=("MP3", ".Wav"))

        assert config.workers == 3
        assert config.count_mode is CountMode.DURATION
        assert config.job_timeout == 2.5
        assert config.extensions == (".mp3", ".wav")

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"workers": 0},
            {"job_timeout": 0},
            {"job_timeout": -1.0},
            {"count_mode": "bogus"},
        ],
    )
    def test_invalid_values(self, kwargs: dict) -> None:
        """Should reject invalid settings."""
        with pytest.raises(ValueError):
            AppConfig(**kwargs)
