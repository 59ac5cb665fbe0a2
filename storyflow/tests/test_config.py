"""
Unit tests for storyflow configuration.
"""

import pytest
from pydantic import ValidationError

from storyflow.config import Settings, settings
from storyflow.utils import default_random_source


class TestSettings:
    """Test the Settings configuration class"""

    def test_default_values(self, monkeypatch):
        """Test that default values are set correctly"""
        for name in ("LOG_LEVEL", "LOG_FILE", "RANDOM_SEED", "TEXT_PREVIEW_LENGTH", "DEFAULT_LAYER_NAME"):
            monkeypatch.delenv(name, raising=False)

        config = Settings(_env_file=None)
        assert config.log_level == "INFO"
        assert config.log_file is None
        assert config.random_seed is None
        assert config.text_preview_length == 50
        assert config.default_layer_name == "root"

    def test_environment_variables(self, monkeypatch):
        """Test that environment variables override defaults"""
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("random_seed", "7")
        monkeypatch.setenv("TEXT_PREVIEW_LENGTH", "20")

        config = Settings(_env_file=None)
        assert config.log_level == "DEBUG"
        assert config.random_seed == 7
        assert config.text_preview_length == 20

    def test_invalid_values(self, monkeypatch):
        """Test that invalid values are rejected"""
        monkeypatch.setenv("TEXT_PREVIEW_LENGTH", "0")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

        monkeypatch.setenv("TEXT_PREVIEW_LENGTH", "50")
        monkeypatch.setenv("LOG_LEVEL", "LOUD")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_random_seed_makes_default_source_repeatable(self, monkeypatch):
        """Test that the configured seed reaches the default random source"""
        monkeypatch.setattr(settings, "random_seed", 42)

        first = default_random_source()
        second = default_random_source()
        assert [first.next(100) for _ in range(5)] == [second.next(100) for _ in range(5)]

    def test_preview_length_reaches_validator(self, monkeypatch, graph):
        """Test that the validator reads the preview length from settings"""
        from storyflow.engine import validate_graph_connectivity
        from storyflow.schemas import Layer

        monkeypatch.setattr(settings, "text_preview_length", 5)
        result = validate_graph_connectivity(
            Layer(id="l", nodes=[graph.narrative("a", "abcdefgh"), graph.narrative("b")])
        )
        assert result.start_nodes[0].text_preview == "abcde..."
