"""
Safety Scoring Engine
=====================

Layered content-safety checks run between script generation and narration.

Four additive penalty layers are applied to a starting score of 100:
1. Forbidden topics (universal and per-category term lists)
2. Sensitive patterns (absolute or unqualified claims)
3. Claim confidence (stricter for YMYL categories)
4. Category policy (advisory + "consult a professional" check)
"""

import re
import logging
from dataclasses import dataclass
from typing import Optional, List, Dict, Any, Iterable, Tuple, Pattern

from ..content.category import Category
from ..content.claim import Claim
from ..core.config import SafetyConfig
from .report import SafetyReport, SafetyIssue, IssueKind, IssueSeverity

logger = logging.getLogger(__name__)


# =============================================================================
# Rule Tables
# =============================================================================


UNIVERSAL_FORBIDDEN_TERMS = (
    "gambling", "casino", "도박", "카지노",
    "adult content", "pornography", "성인물", "음란물",
    "illegal activities", "crime instructions", "불법", "범죄 방법",
    "drugs", "narcotics", "마약", "약물 남용",
    "violence", "gore", "폭력", "잔인한",
    "hate speech", "discrimination", "혐오", "차별",
    "terrorism", "extremism", "테러", "극단주의",
    "self-harm", "suicide", "자해", "자살",
)

CATEGORY_FORBIDDEN_TERMS: Dict[Category, Tuple[str, ...]] = {
    Category.HEALTH: (
        "prescription medication", "처방약 추천",
        "cure guarantee", "완치 보장",
        "miracle treatment", "기적의 치료",
        "replace doctor", "의사 대체",
        "stop medication", "약 중단",
        "specific dosage", "복용량 처방",
        "diagnose", "진단하다",
    ),
    Category.FINANCE: (
        "guaranteed returns", "수익 보장",
        "get rich quick", "단기 고수익",
        "insider trading", "내부자 거래",
        "ponzi", "pyramid", "다단계",
        "specific stock buy", "특정 종목 매수",
        "financial advice", "투자 조언",
    ),
}

SENSITIVE_PATTERNS: Dict[Category, Tuple[Pattern, ...]] = {
    Category.HEALTH: tuple(
        re.compile(p, re.IGNORECASE)
        for p in (
            r"(?:암|cancer)\s*(?:치료|treatment|cure)",
            r"(?:당뇨|diabetes)\s*(?:완치|cure)",
            r"(?:고혈압|hypertension)\s*(?:낫|치료)",
            r"(?:약|medication|medicine)\s*(?:없이|without)",
            r"(?:cured?)\s+without\s+(?:medication|medicine)",
            r"(?:100%|백퍼센트)\s*(?:효과|effective)",
            r"(?:부작용|side effects?)\s*(?:없|no|zero)",
            r"(?:no|zero)\s+side\s+effects?",
            r"(?:의사|doctor)\s*(?:필요\s*없|not\s*need)",
        )
    ),
    Category.FINANCE: tuple(
        re.compile(p, re.IGNORECASE)
        for p in (
            r"\d+%\s*(?:수익|returns?|profit)",
            r"guaranteed\s+(?:returns?|profit)",
            r"(?:원금|principal)\s*(?:보장|guaranteed)",
            r"(?:무조건|definitely|certainly)\s*(?:오르|rise|up)",
            r"(?:손실|loss)\s*(?:없|no|zero)",
            r"(?:지금|now)\s*(?:당장|immediately)\s*(?:사|buy)",
        )
    ),
}

CONSULT_PROFESSIONAL_PHRASES = (
    "전문가", "상담", "의사", "주의",
    "consult", "professional", "doctor", "advisor",
)

FORBIDDEN_PENALTY = 100
CATEGORY_FORBIDDEN_PENALTY = 50
SENSITIVE_PATTERN_PENALTY = 10
CRITICAL_CLAIM_PENALTY = 20
LOW_CLAIM_PENALTY = 10
UNSOURCED_CLAIM_PENALTY = 5
MISSING_CONSULT_PENALTY = 5


@dataclass(frozen=True)
class TopicPrecheck:
    """Result of a fast forbidden-term check on a bare topic."""

    allowed: bool
    reason: Optional[str] = None


@dataclass
class LayerResult:
    issues: List[SafetyIssue]
    penalty: int = 0


# =============================================================================
# Engine
# =============================================================================


class SafetyScoringEngine:
    """
    Evaluates generated content against layered safety rules.

    Usage:
        engine = SafetyScoringEngine()
        report = engine.evaluate(
            {"title": "...", "script": "...", "claims": [Claim("...", 90)]},
            category="health",
        )
        if not report.passed:
            print(report.failure_reason())
    """

    def __init__(self, config: Optional[SafetyConfig] = None):
        """
        Initialize the engine.

        Args:
            config: Thresholds; defaults to reject=40, review=60, auto_approve=85
        """
        self.config = config or SafetyConfig()

    def evaluate(self, content: Dict[str, Any], category: Any) -> SafetyReport:
        """
        Score content and produce a verdict.

        Args:
            content: Mapping with optional ``title``, ``script``,
                ``narration_text`` and ``claims`` (Claim objects or dicts)
            category: Category, category key, or display label

        Returns:
            An immutable SafetyReport
        """
        category = Category.from_value(category)
        text = self._combined_text(content)

        layers = [
            self._check_forbidden_topics(text, category),
            self._check_sensitive_patterns(text, category),
            self._check_claims(self._coerce_claims(content.get("claims")), category),
            self._check_category_policy(content.get("script") or "", category),
        ]

        issues: List[SafetyIssue] = []
        score = 100
        for layer in layers:
            issues.extend(layer.issues)
            score -= layer.penalty

        score = max(0, min(100, score))

        has_critical = any(i.severity is IssueSeverity.CRITICAL for i in issues)
        passed = not has_critical and score >= self.config.reject_threshold
        auto_approved = score >= self.config.auto_approve_threshold
        review_required = self.config.reject_threshold <= score < self.config.auto_approve_threshold

        report = SafetyReport(
            passed=passed,
            score=score,
            issues=tuple(issues),
            disclaimer_required=category.is_sensitive,
            disclaimer_text=category.disclaimer if category.is_sensitive else None,
            review_required=review_required,
            auto_approved=auto_approved,
        )

        logger.info(
            f"Safety check completed: category={category.value}, score={score}, "
            f"passed={passed}, issues={len(issues)}"
        )
        return report

    def precheck(self, topic: str, category: Any) -> TopicPrecheck:
        """
        Fast forbidden-term check on a topic before any generation spend.

        Args:
            topic: Requested topic
            category: Category, key, or label

        Returns:
            TopicPrecheck with the first offending term, if any
        """
        category = Category.from_value(category)
        text = (topic or "").lower()

        for term in UNIVERSAL_FORBIDDEN_TERMS:
            if term.lower() in text:
                return TopicPrecheck(False, f"Topic contains forbidden content: {term}")

        for term in CATEGORY_FORBIDDEN_TERMS.get(category, ()):
            if term.lower() in text:
                return TopicPrecheck(False, f"Topic not allowed for {category.label}: {term}")

        return TopicPrecheck(True)

    # -------------------------------------------------------------------------
    # Layers
    # -------------------------------------------------------------------------

    def _check_forbidden_topics(self, text: str, category: Category) -> LayerResult:
        result = LayerResult(issues=[])
        lowered = text.lower()

        for term in UNIVERSAL_FORBIDDEN_TERMS:
            if term.lower() in lowered:
                result.issues.append(SafetyIssue(
                    kind=IssueKind.FORBIDDEN_TOPIC,
                    severity=IssueSeverity.CRITICAL,
                    description=f'Forbidden content detected: "{term}"',
                    suggestion="Remove or replace this content entirely",
                ))
                result.penalty += FORBIDDEN_PENALTY

        is_health = category is Category.HEALTH
        for term in CATEGORY_FORBIDDEN_TERMS.get(category, ()):
            if term.lower() in lowered:
                result.issues.append(SafetyIssue(
                    kind=IssueKind.MEDICAL_ADVICE if is_health else IssueKind.FINANCIAL_ADVICE,
                    severity=IssueSeverity.CRITICAL,
                    description=f'{category.label} forbidden content: "{term}"',
                    suggestion=f"Rephrase to avoid {'medical' if is_health else 'financial'} advice",
                ))
                result.penalty += CATEGORY_FORBIDDEN_PENALTY

        return result

    def _check_sensitive_patterns(self, text: str, category: Category) -> LayerResult:
        result = LayerResult(issues=[])

        for pattern in SENSITIVE_PATTERNS.get(category, ()):
            match = pattern.search(text)
            if match:
                result.issues.append(SafetyIssue(
                    kind=IssueKind.SENSITIVE_CLAIM,
                    severity=IssueSeverity.WARNING,
                    description=f'Sensitive pattern detected: "{match.group(0)}"',
                    claim_text=match.group(0),
                    suggestion="Consider adding qualifiers or removing absolute claims",
                ))
                result.penalty += SENSITIVE_PATTERN_PENALTY

        return result

    def _check_claims(self, claims: List[Claim], category: Category) -> LayerResult:
        result = LayerResult(issues=[])
        sensitive = category.is_sensitive
        min_confidence = (
            self.config.sensitive_min_confidence if sensitive else self.config.general_min_confidence
        )

        for claim in claims:
            preview = claim.text[:50]

            if claim.confidence < min_confidence:
                critical = claim.confidence < self.config.critical_confidence
                result.issues.append(SafetyIssue(
                    kind=IssueKind.LOW_CONFIDENCE,
                    severity=IssueSeverity.CRITICAL if critical else IssueSeverity.WARNING,
                    description=f'Low confidence claim ({claim.confidence:g}%): "{preview}..."',
                    claim_text=claim.text,
                    suggestion=(
                        "Verify claim with additional sources"
                        if claim.source
                        else "Add source citation for this claim"
                    ),
                ))
                result.penalty += CRITICAL_CLAIM_PENALTY if critical else LOW_CLAIM_PENALTY

            if sensitive and not claim.source:
                result.issues.append(SafetyIssue(
                    kind=IssueKind.YMYL_CONTENT,
                    severity=IssueSeverity.WARNING,
                    description=f'YMYL claim without source: "{preview}..."',
                    claim_text=claim.text,
                    suggestion="Add credible source for YMYL content claims",
                ))
                result.penalty += UNSOURCED_CLAIM_PENALTY

        return result

    def _check_category_policy(self, script: str, category: Category) -> LayerResult:
        result = LayerResult(issues=[])
        if not category.is_sensitive:
            return result

        result.issues.append(SafetyIssue(
            kind=IssueKind.YMYL_CONTENT,
            severity=IssueSeverity.INFO,
            description=(
                f"{category.label} is a YMYL (Your Money or Your Life) vertical - "
                "enhanced verification applied"
            ),
            suggestion="Ensure all claims are verifiable and include appropriate disclaimers",
        ))

        lowered = script.lower()
        if not any(phrase in lowered for phrase in CONSULT_PROFESSIONAL_PHRASES):
            result.issues.append(SafetyIssue(
                kind=IssueKind.YMYL_CONTENT,
                severity=IssueSeverity.WARNING,
                description="Script may be missing professional consultation recommendation",
                suggestion="Add recommendation to consult professionals",
            ))
            result.penalty += MISSING_CONSULT_PENALTY

        return result

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _combined_text(content: Dict[str, Any]) -> str:
        return " ".join(
            content.get(key) or ""
            for key in ("title", "script", "narration_text")
        )

    @staticmethod
    def _coerce_claims(claims: Optional[Iterable[Any]]) -> List[Claim]:
        if not claims:
            return []
        return [c if isinstance(c, Claim) else Claim.from_dict(c) for c in claims]
