"""
Tests for runtime settings
"""

import pytest

from fractal_prose.config import Settings, normalize_log_level


class TestLogLevel:
    """Tests for log level coercion."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("DEBUG", "debug"),
            ("Info", "info"),
            ("warn", "warning"),
            ("WARNING", "warning"),
            (" error ", "error"),
            ("critical", "error"),
            ("bogus", "info"),
            ("", "info"),
        ],
    )
    def test_coerced(self, value, expected):
        """Test case and aliases are normalised and unknown names fall back to info."""
        assert Settings(log_level=value).log_level == expected

    def test_environment(self, monkeypatch):
        """Test an upper-case level from the environment does not fail settings."""
        monkeypatch.setenv("FRACTAL_LOG_LEVEL", "DEBUG")
        assert Settings().log_level == "debug"
        monkeypatch.setenv("FRACTAL_LOG_LEVEL", "WARN")
        assert Settings().log_level == "warning"

    def test_normalize(self):
        """Test the shared normaliser leaves unknown names for the caller to reject."""
        assert normalize_log_level("WARN") == "warning"
        assert normalize_log_level("Bogus") == "bogus"


class TestServerSettings:
    """Tests for server settings."""

    def test_defaults(self, monkeypatch):
        """Test the server binds locally by default."""
        monkeypatch.delenv("FRACTAL_HOST", raising=False)
        monkeypatch.delenv("FRACTAL_PORT", raising=False)
        settings = Settings()
        assert settings.host == "127.0.0.1"
        assert settings.port == 8000

    def test_port_from_environment(self, monkeypatch):
        """Test the port is read from the environment."""
        monkeypatch.setenv("FRACTAL_PORT", "9100")
        assert Settings().port == 9100
