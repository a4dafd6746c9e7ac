"""
Tests for autotube.narration.strategy
"""

import pytest
from unittest.mock import AsyncMock, patch

from autotube.content.category import Category, ContentFormat
from autotube.content.job import ContentConfig, ContentJob
from autotube.core.config import Config, NarrationConfig
from autotube.core.exceptions import NarrationError, ValidationError
from autotube.narration import EdgeNarrationProvider, ElevenLabsNarrationProvider
from autotube.narration.strategy import NarrationStrategy

from conftest import FakeNarrationProvider


TEXT = "오늘은 무릎 건강을 지키는 세 가지 방법을 알아보겠습니다."


@pytest.mark.asyncio
class TestGenerate:
    """Retry budget and fallback."""

    async def test_first_attempt_success(self, strategy, primary, secondary):
        result = await strategy.generate(TEXT, Category.HEALTH, ContentFormat.SHORTS)

        assert result.provider == "edge"
        assert primary.calls == 1
        assert secondary.calls == 0

    async def test_primary_fails_twice_then_succeeds(self, strategy, primary, secondary):
        primary.failures = 2

        result = await strategy.generate(TEXT, Category.HEALTH)

        assert result.provider == "edge"
        assert primary.calls == 3
        assert secondary.calls == 0

    async def test_primary_always_fails_secondary_called_once(self, strategy, primary, secondary):
        primary.failures = -1

        result = await strategy.generate(TEXT, Category.FINANCE)

        assert result.provider == "elevenlabs"
        assert primary.calls == 3
        assert secondary.calls == 1

    async def test_both_fail_raises_error_from_primary(self, strategy, primary, secondary):
        primary.failures = -1
        secondary.failures = -1

        with pytest.raises(NarrationError) as exc_info:
            await strategy.generate(TEXT, Category.GENERAL, job_id="job_1")

        error = exc_info.value
        assert error.provider == "edge"
        assert error.__cause__ is primary.error
        assert "edge synthesis failed" in str(error)
        assert error.details["fallback_provider"] == "elevenlabs"
        assert error.details["attempts"] == 3
        assert secondary.calls == 1

    async def test_validation_error_is_not_retried(self, strategy, primary, secondary):
        with pytest.raises(ValidationError):
            await strategy.generate("   ", Category.GENERAL)

        assert primary.calls == 0
        assert secondary.calls == 0

    async def test_over_length_text_rejected_before_any_call(self, secondary, no_delay_config):
        primary = FakeNarrationProvider("edge", max_characters=10)
        strategy = NarrationStrategy(primary, secondary, config=no_delay_config)

        with pytest.raises(ValidationError) as exc_info:
            await strategy.generate("x" * 11, Category.GENERAL)

        assert "maximum length of 10" in str(exc_info.value)
        assert primary.calls == 0

    async def test_validation_error_from_backend_propagates(self, strategy, primary, secondary):
        primary.failures = -1
        primary.error = ValidationError("Unsupported voice", field="voice_id")

        with pytest.raises(ValidationError):
            await strategy.generate(TEXT, Category.GENERAL)

        assert primary.calls == 1
        assert secondary.calls == 0

    async def test_backoff_delays(self, primary, secondary):
        primary.failures = -1
        strategy = NarrationStrategy(primary, secondary, config=NarrationConfig(primary_provider="edge"))

        with patch("autotube.narration.strategy.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            await strategy.generate(TEXT, Category.GENERAL)

        assert [c.args[0] for c in mock_sleep.call_args_list] == [1.0, 2.0]

    async def test_category_accepts_string(self, strategy):
        result = await strategy.generate(TEXT, "Senior Health")
        assert result.character_count == len(TEXT)

    async def test_custom_backends_use_default_retry_settings(self):
        primary = FakeNarrationProvider("azure", failures=-1)
        secondary = FakeNarrationProvider("polly")
        strategy = NarrationStrategy(primary, secondary)

        with patch("autotube.narration.strategy.asyncio.sleep", new_callable=AsyncMock):
            result = await strategy.generate(TEXT, Category.GENERAL)

        assert result.provider == "polly"
        assert primary.calls == NarrationConfig().max_attempts
        assert secondary.calls == 1


@pytest.mark.asyncio
class TestCostTracking:

    async def test_cost_written_to_job(self, strategy, store):
        job = await store.create(ContentJob(project_id="p1", config=ContentConfig(topic="knees")))

        await strategy.generate(TEXT, Category.HEALTH, job_id=job.job_id)

        saved = await store.get(job.job_id)
        assert saved.narration is not None
        assert saved.narration.provider == "edge"
        assert saved.narration.cost_usd == 0.0
        assert saved.narration.character_count == len(TEXT)

    async def test_tracking_failure_is_swallowed(self, strategy, store):
        # Job was never created, so the store update fails
        result = await strategy.generate(TEXT, Category.HEALTH, job_id="missing_job")
        assert result.provider == "edge"

    async def test_no_store_skips_tracking(self, primary, secondary, no_delay_config):
        strategy = NarrationStrategy(primary, secondary, config=no_delay_config)
        result = await strategy.generate(TEXT, Category.HEALTH, job_id="job_1")
        assert result.provider == "edge"


class TestCosts:

    def test_estimate_cost_uses_primary(self, strategy):
        estimate = strategy.estimate_cost(TEXT)
        assert estimate.provider == "edge"
        assert estimate.cost == 0.0

    def test_compare_costs(self, strategy):
        text = "가" * 1000
        comparison = strategy.compare_costs(text)

        assert comparison.free == 0.0
        assert comparison.paid == pytest.approx(0.30)
        assert comparison.savings == pytest.approx(0.30)
        assert comparison.savings_percent == pytest.approx(100.0)

    def test_compare_costs_with_paid_primary(self):
        paid = FakeNarrationProvider("elevenlabs", free=False)
        free = FakeNarrationProvider("edge", free=True)
        strategy = NarrationStrategy(paid, free, config=NarrationConfig(primary_provider="elevenlabs"))

        comparison = strategy.compare_costs("hello world")
        assert comparison.free == 0.0
        assert comparison.paid > 0

    def test_compare_costs_both_free(self, no_delay_config):
        strategy = NarrationStrategy(
            FakeNarrationProvider("edge"),
            FakeNarrationProvider("elevenlabs", free=True),
            config=no_delay_config,
        )

        comparison = strategy.compare_costs("hello")
        assert comparison.savings == 0.0
        assert comparison.savings_percent == 100.0


@pytest.mark.asyncio
class TestHealth:

    async def test_healthy(self, strategy):
        health = await strategy.health_check()
        assert health["status"] == "healthy"
        assert health["provider"] == "edge"

    async def test_degraded_when_only_fallback_is_up(self, strategy, primary):
        primary.health_status = "unhealthy"
        health = await strategy.health_check()
        assert health["status"] == "degraded"

    async def test_unhealthy_when_both_down(self, strategy, primary, secondary):
        primary.health_status = "unhealthy"
        secondary.health_status = "unhealthy"
        health = await strategy.health_check()
        assert health["status"] == "unhealthy"

    async def test_close_closes_both(self, strategy, primary, secondary):
        async with strategy:
            pass
        assert primary.closed
        assert secondary.closed


@pytest.mark.asyncio
class TestAudioFiles:

    async def test_delete_audio_file(self, strategy, tmp_path):
        audio = tmp_path / "job_1.mp3"
        audio.write_bytes(b"ID3")

        stats = await strategy.audio_stats(str(audio))
        assert stats["size"] == 3

        await strategy.delete_audio_file(str(audio))
        assert not audio.exists()

    async def test_delete_missing_file_does_not_raise(self, strategy, tmp_path):
        await strategy.delete_audio_file(str(tmp_path / "missing.mp3"))


class TestFromConfig:

    def test_edge_primary(self):
        config = Config.from_dict({"narration": {"primary_provider": "edge"}})
        strategy = NarrationStrategy.from_config(config)

        assert isinstance(strategy.primary, EdgeNarrationProvider)
        assert isinstance(strategy.secondary, ElevenLabsNarrationProvider)

    def test_elevenlabs_primary(self):
        config = Config.from_dict({
            "narration": {"primary_provider": "elevenlabs", "elevenlabs_api_key": "test-key"},
        })
        strategy = NarrationStrategy.from_config(config)

        assert isinstance(strategy.primary, ElevenLabsNarrationProvider)
        assert strategy.primary.api_key == "test-key"
        assert isinstance(strategy.secondary, EdgeNarrationProvider)
