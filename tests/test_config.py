"""
Tests for autotube.core.config
"""

import pytest

from autotube.core.config import (
    Config,
    NarrationConfig,
    SafetyConfig,
    RenderingConfig,
    get_config,
    set_config,
    reset_config,
)
from autotube.core.exceptions import ConfigurationError


class TestDefaults:

    def test_safety_thresholds(self):
        config = SafetyConfig()
        assert (config.reject_threshold, config.review_threshold, config.auto_approve_threshold) == (40, 60, 85)
        assert config.sensitive_min_confidence > config.general_min_confidence

    def test_narration_defaults(self):
        config = NarrationConfig()
        assert config.primary_provider == "edge"
        assert config.secondary_provider == "elevenlabs"
        assert config.max_attempts == 3

    def test_secondary_is_the_other_backend(self):
        assert NarrationConfig(primary_provider="elevenlabs").secondary_provider == "edge"


class TestValidation:

    def test_threshold_order_enforced(self):
        with pytest.raises(ConfigurationError):
            SafetyConfig(reject_threshold=70, review_threshold=60)

    def test_threshold_bounds_enforced(self):
        with pytest.raises(ConfigurationError) as exc_info:
            SafetyConfig(auto_approve_threshold=120)
        assert exc_info.value.details["config_key"] == "safety.auto_approve_threshold"

    def test_confidence_bounds_enforced(self):
        with pytest.raises(ConfigurationError):
            SafetyConfig(general_min_confidence=80, sensitive_min_confidence=70)

    def test_unknown_provider(self):
        with pytest.raises(ConfigurationError):
            NarrationConfig(primary_provider="polly")

    def test_attempts_bounds(self):
        with pytest.raises(ConfigurationError):
            NarrationConfig(max_attempts=0)

    def test_poll_attempts(self):
        with pytest.raises(ConfigurationError):
            RenderingConfig(max_poll_attempts=0)

    def test_unknown_key_in_section(self):
        with pytest.raises(ConfigurationError):
            Config.from_dict({"narration": {"voice": "x"}})


class TestLoad:

    def test_load_yaml_with_env_interpolation(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MY_ELEVEN_KEY", "secret")
        path = tmp_path / "autotube.yaml"
        path.write_text(
            "narration:\n"
            "  primary_provider: elevenlabs\n"
            "  elevenlabs_api_key: ${MY_ELEVEN_KEY}\n"
            "rendering:\n"
            "  watermark: ${WATERMARK:-mychannel}\n"
            "safety:\n"
            "  auto_approve_threshold: 90\n"
        )

        config = Config.load(path)

        assert config.narration.primary_provider == "elevenlabs"
        assert config.narration.elevenlabs_api_key == "secret"
        assert config.rendering.watermark == "mychannel"
        assert config.safety.auto_approve_threshold == 90

    def test_env_defaults_fill_missing_keys(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("TTS_PROVIDER", "elevenlabs")
        monkeypatch.setenv("GEMINI_API_KEY", "gemini-key")

        config = Config.load()

        assert config.narration.primary_provider == "elevenlabs"
        assert config.script.api_key == "gemini-key"

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("narration: [unclosed\n")

        with pytest.raises(ConfigurationError):
            Config.load(path)

    def test_to_dict_round_trip(self):
        config = Config.from_dict({"storage": {"audio_path": "/data/audio"}})
        again = Config.from_dict(config.to_dict())

        assert again.storage.audio_path == "/data/audio"
        assert again.to_dict() == config.to_dict()


class TestGlobalConfig:

    def test_set_and_reset(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        custom = Config.from_dict({"rendering": {"watermark": "custom"}})

        set_config(custom)
        assert get_config() is custom

        reset_config()
        assert get_config().rendering.watermark == "autotube"
