"""
Tests for autotube.content
"""

import pytest

from autotube.content import (
    Category,
    ContentFormat,
    ContentConfig,
    ContentJob,
    JobStatus,
    ProjectAutomation,
    Tone,
)


class TestCategory:

    @pytest.mark.parametrize("value, expected", [
        ("health", Category.HEALTH),
        ("Senior Health", Category.HEALTH),
        ("FINANCE", Category.FINANCE),
        ("finance & investing", Category.FINANCE),
        (Category.TECH, Category.TECH),
        ("cooking", Category.GENERAL),
        (None, Category.GENERAL),
        ("", Category.GENERAL),
    ])
    def test_from_value(self, value, expected):
        assert Category.from_value(value) is expected

    def test_sensitive_set(self):
        sensitive = {c for c in Category if c.is_sensitive}
        assert sensitive == {Category.HEALTH, Category.FINANCE}

    def test_disclaimers_only_for_sensitive(self):
        for category in Category:
            assert bool(category.disclaimer) == category.is_sensitive

    def test_every_category_has_a_profile(self):
        for category in Category:
            assert category.label
            assert category.profile.edge_voice.startswith("ko-KR-")


class TestContentFormat:

    @pytest.mark.parametrize("value, expected", [
        ("Shorts", ContentFormat.SHORTS),
        ("long-form", ContentFormat.LONG_FORM),
        ("LONG_FORM", ContentFormat.LONG_FORM),
        ("longform", ContentFormat.LONG_FORM),
        ("unknown", ContentFormat.SHORTS),
        (None, ContentFormat.SHORTS),
    ])
    def test_from_value(self, value, expected):
        assert ContentFormat.from_value(value) is expected


class TestContentJob:

    def test_new_job_defaults(self):
        job = ContentJob(project_id="p1", config=ContentConfig(topic="Morning habits"))

        assert job.status is JobStatus.PENDING
        assert job.outcome is None
        assert job.video_url is None
        assert job.job_id

    def test_terminal_statuses(self):
        assert JobStatus.COMPLETED.is_terminal
        assert JobStatus.FAILED.is_terminal
        assert not JobStatus.UPLOADING.is_terminal

    def test_failed_outcome_always_has_error(self):
        job = ContentJob(project_id="p1", config=ContentConfig(topic="t"), status=JobStatus.FAILED)
        assert job.outcome.error == "Unknown error"

    def test_dict_round_trip(self):
        job = ContentJob(
            project_id="p1",
            config=ContentConfig(
                topic="노후 자금",
                category=Category.FINANCE,
                tone=Tone.PROFESSIONAL,
                format=ContentFormat.LONG_FORM,
            ),
            title="Retirement planning",
            visual_prompts=["piggy bank"],
        )

        restored = ContentJob.from_dict(job.to_dict())

        assert restored == job

    def test_config_from_dict_tolerates_missing_fields(self):
        config = ContentConfig.from_dict({"topic": "History of Seoul", "category": "History & Storytelling"})

        assert config.category is Category.HISTORY
        assert config.tone is Tone.FRIENDLY
        assert config.format is ContentFormat.SHORTS
        assert config.language == "ko"


class TestProjectAutomation:

    @pytest.mark.parametrize("auto_publish, channel_id, expected", [
        (True, "UC123", True),
        (True, None, False),
        (False, "UC123", False),
    ])
    def test_can_publish(self, auto_publish, channel_id, expected):
        automation = ProjectAutomation("p1", is_enabled=True, auto_publish=auto_publish, channel_id=channel_id)
        assert automation.can_publish is expected
