"""
Tests for autotube.safety.engine
"""

import pytest

from autotube.content.category import Category
from autotube.content.claim import Claim
from autotube.core.config import SafetyConfig
from autotube.safety import (
    SafetyScoringEngine,
    SafetyReport,
    IssueKind,
    IssueSeverity,
    UNIVERSAL_FORBIDDEN_TERMS,
)


GENERAL_SCRIPT = "Start your day with water. Take a short walk. Write down one goal."


@pytest.fixture
def engine():
    return SafetyScoringEngine()


class TestForbiddenTopics:
    """Universal and per-category forbidden terms."""

    @pytest.mark.parametrize("term", ["casino", "Gambling", "TERRORISM", "마약", "self-harm"])
    @pytest.mark.parametrize("field", ["title", "script", "narration_text"])
    def test_universal_term_fails_in_any_text_field(self, engine, term, field):
        content = {"title": "Weekend plans", "script": GENERAL_SCRIPT, "narration_text": GENERAL_SCRIPT}
        content[field] = f"{content[field]} {term}"

        report = engine.evaluate(content, Category.TECH)

        assert report.passed is False
        assert report.score < engine.config.reject_threshold
        assert report.critical_issues[0].kind is IssueKind.FORBIDDEN_TOPIC

    @pytest.mark.parametrize("category", list(Category))
    def test_universal_terms_apply_to_every_category(self, engine, category):
        report = engine.evaluate({"script": "A night at the casino"}, category)
        assert report.passed is False

    def test_category_term_only_applies_to_its_category(self, engine):
        content = {"script": "Why people chase guaranteed returns, and what professional advisors say."}

        finance = engine.evaluate(content, Category.FINANCE)
        tech = engine.evaluate(content, Category.TECH)

        assert finance.passed is False
        assert any(i.kind is IssueKind.FINANCIAL_ADVICE for i in finance.critical_issues)
        assert tech.passed is True

    def test_health_category_term_is_medical_advice(self, engine):
        report = engine.evaluate({"script": "This miracle treatment works. Consult a professional."}, "health")

        assert report.passed is False
        issue = report.critical_issues[0]
        assert issue.kind is IssueKind.MEDICAL_ADVICE
        assert "miracle treatment" in issue.description

    def test_matching_is_case_insensitive(self, engine):
        report = engine.evaluate({"title": "CASINO Night"}, Category.GENERAL)
        assert report.passed is False


class TestScore:
    """Score accumulation and clamping."""

    def test_score_clamped_at_zero(self, engine):
        text = " ".join(UNIVERSAL_FORBIDDEN_TERMS)
        report = engine.evaluate({"title": text, "script": text}, Category.HEALTH)

        assert report.score == 0
        assert report.passed is False

    def test_score_never_exceeds_hundred(self, engine):
        report = engine.evaluate({"title": "Morning", "script": GENERAL_SCRIPT}, Category.GENERAL)
        assert report.score == 100

    @pytest.mark.parametrize("content", [{}, {"title": "", "script": ""}])
    def test_empty_content_passes(self, engine, content):
        report = engine.evaluate(content, "general")

        assert report.score == 100
        assert report.passed is True
        assert report.auto_approved is True
        assert report.issues == ()

    def test_empty_health_content_only_misses_consult_phrase(self, engine):
        report = engine.evaluate({"title": "", "script": ""}, Category.HEALTH)

        assert report.score == 95
        assert report.passed is True
        assert report.critical_issues == []

    def test_report_is_immutable(self, engine):
        report = engine.evaluate({"script": GENERAL_SCRIPT}, Category.GENERAL)
        with pytest.raises(Exception):
            report.score = 50


class TestSensitivePatterns:

    def test_health_absolute_claim_is_warning(self, engine):
        report = engine.evaluate(
            {"script": "This stretch has no side effects. Consult your doctor first."},
            Category.HEALTH,
        )

        assert report.passed is True
        assert report.score == 90
        sensitive = [i for i in report.issues if i.kind is IssueKind.SENSITIVE_CLAIM]
        assert len(sensitive) == 1
        assert sensitive[0].severity is IssueSeverity.WARNING
        assert sensitive[0].claim_text.lower() == "no side effects"

    def test_finance_percentage_return_pattern(self, engine):
        report = engine.evaluate(
            {"script": "Some funds reported 12% returns last year. Talk to an advisor."},
            Category.FINANCE,
        )

        assert any(i.kind is IssueKind.SENSITIVE_CLAIM for i in report.issues)
        assert report.score == 90

    def test_patterns_ignored_for_non_sensitive_category(self, engine):
        report = engine.evaluate({"script": "The new phone shipped with no side effects on battery."}, Category.TECH)
        assert report.score == 100


class TestClaimConfidence:
    """Minimum confidence depends on whether the category is YMYL."""

    def test_confidence_between_bounds_flips_on_category(self, engine):
        config = engine.config
        confidence = (config.general_min_confidence + config.sensitive_min_confidence) / 2
        claims = [Claim(f"Claim number {i}", confidence, source="Journal") for i in range(6)]
        content = {"title": "Daily walking", "script": "Walk every day.", "claims": claims}

        health = engine.evaluate(content, Category.HEALTH)
        general = engine.evaluate(content, Category.GENERAL)

        assert health.passed is False
        assert any(i.kind is IssueKind.LOW_CONFIDENCE for i in health.issues)
        assert general.passed is True
        assert not any(i.kind is IssueKind.LOW_CONFIDENCE for i in general.issues)

    def test_very_low_confidence_is_critical(self, engine):
        report = engine.evaluate(
            {"script": GENERAL_SCRIPT, "claims": [Claim("Uncertain claim", 20)]},
            Category.GENERAL,
        )

        assert report.passed is False
        assert report.critical_issues[0].kind is IssueKind.LOW_CONFIDENCE
        assert report.score == 80

    def test_unsourced_claim_penalized_only_for_ymyl(self, engine):
        content = {
            "script": "Consult a professional before changing your savings plan.",
            "claims": [Claim("Index funds have lower fees", 90)],
        }

        finance = engine.evaluate(content, Category.FINANCE)
        history = engine.evaluate(content, Category.HISTORY)

        assert finance.score == 95
        assert any("without source" in i.description for i in finance.warnings)
        assert history.score == 100

    def test_claims_accepted_as_dicts(self, engine):
        report = engine.evaluate(
            {"script": GENERAL_SCRIPT, "claims": [{"text": "Dict claim", "confidence": 45}]},
            Category.GENERAL,
        )

        assert report.score == 90
        assert report.issues[0].claim_text == "Dict claim"


class TestCategoryPolicy:

    def test_health_without_consult_phrase(self, engine):
        report = engine.evaluate(
            {"title": "Knee care", "script": "Gentle stretches keep your knees moving every morning."},
            Category.HEALTH,
        )

        assert report.score == 95
        assert report.passed is True
        assert report.auto_approved is True
        assert len(report.warnings) == 1
        assert report.disclaimer_required is True
        assert report.disclaimer_text

    def test_consult_phrase_avoids_penalty(self, engine):
        report = engine.evaluate(
            {"script": "무릎 운동은 천천히 하세요. 통증이 있으면 전문가와 상담하세요."},
            Category.HEALTH,
        )

        assert report.score == 100
        assert any(i.severity is IssueSeverity.INFO for i in report.issues)

    def test_non_sensitive_category_has_no_disclaimer(self, engine):
        report = engine.evaluate({"script": GENERAL_SCRIPT}, Category.COMMERCE)

        assert report.disclaimer_required is False
        assert report.disclaimer_text is None
        assert report.issues == ()


class TestVerdict:

    def test_general_clean_content_is_auto_approved(self, engine):
        report = engine.evaluate(
            {
                "title": "Three morning habits",
                "script": GENERAL_SCRIPT,
                "claims": [Claim("Water helps you wake up", 90)],
            },
            "general",
        )

        assert report.passed is True
        assert report.score == 100
        assert report.auto_approved is True
        assert report.review_required is False

    def test_review_band(self):
        engine = SafetyScoringEngine(SafetyConfig(auto_approve_threshold=99))
        report = engine.evaluate(
            {"script": "Walking is healthy. Ask your doctor.", "claims": [Claim("Walking helps", 90)]},
            Category.HEALTH,
        )

        assert report.score == 95
        assert report.passed is True
        assert report.review_required is True
        assert report.auto_approved is False

    def test_unknown_category_resolves_to_general(self, engine):
        report = engine.evaluate({"script": GENERAL_SCRIPT}, "cooking")
        assert report.disclaimer_required is False
        assert report.score == 100

    def test_failure_reason_joins_descriptions(self, engine):
        report = engine.evaluate({"script": "casino and gambling"}, Category.GENERAL)
        reason = report.failure_reason()

        assert '"gambling"' in reason
        assert '"casino"' in reason
        assert ", " in reason

    def test_report_round_trips_through_dict(self, engine):
        report = engine.evaluate({"script": "Gentle stretches."}, Category.HEALTH)
        assert SafetyReport.from_dict(report.to_dict()) == report


class TestPrecheck:

    def test_clean_topic_allowed(self, engine):
        result = engine.precheck("무릎 관절 건강 지키는 법", Category.HEALTH)
        assert result.allowed is True
        assert result.reason is None

    def test_universal_term_blocked(self, engine):
        result = engine.precheck("Casino strategies", Category.FINANCE)
        assert result.allowed is False
        assert result.reason == "Topic contains forbidden content: casino"

    def test_category_term_blocked_with_label(self, engine):
        result = engine.precheck("How to get rich quick", "finance")
        assert result.allowed is False
        assert result.reason == "Topic not allowed for Finance & Investing: get rich quick"

    def test_category_term_allowed_elsewhere(self, engine):
        assert engine.precheck("How to get rich quick", Category.HISTORY).allowed is True
