"""
Safety Report Models
====================

Point-in-time safety verdict attached to one content job.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any, Tuple


class IssueSeverity(Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class IssueKind(Enum):
    FORBIDDEN_TOPIC = "forbidden_topic"
    SENSITIVE_CLAIM = "sensitive_claim"
    YMYL_CONTENT = "ymyl_content"
    LOW_CONFIDENCE = "low_confidence"
    MEDICAL_ADVICE = "medical_advice"
    FINANCIAL_ADVICE = "financial_advice"


@dataclass(frozen=True)
class SafetyIssue:
    """One finding from a safety layer."""

    kind: IssueKind
    severity: IssueSeverity
    description: str
    claim_text: Optional[str] = None
    suggestion: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "severity": self.severity.value,
            "description": self.description,
            "claim_text": self.claim_text,
            "suggestion": self.suggestion,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SafetyIssue":
        return cls(
            kind=IssueKind(data["kind"]),
            severity=IssueSeverity(data["severity"]),
            description=data["description"],
            claim_text=data.get("claim_text"),
            suggestion=data.get("suggestion"),
        )


@dataclass(frozen=True)
class SafetyReport:
    """
    Safety verdict for one generation attempt.

    ``score`` is a penalty accumulator starting at 100, clamped to 0-100.
    A regenerated script gets a new report; reports are never mutated.
    """

    passed: bool
    score: int
    issues: Tuple[SafetyIssue, ...] = field(default_factory=tuple)
    disclaimer_required: bool = False
    disclaimer_text: Optional[str] = None
    review_required: bool = False
    auto_approved: bool = False

    @property
    def critical_issues(self) -> List[SafetyIssue]:
        return [i for i in self.issues if i.severity is IssueSeverity.CRITICAL]

    @property
    def warnings(self) -> List[SafetyIssue]:
        return [i for i in self.issues if i.severity is IssueSeverity.WARNING]

    def failure_reason(self) -> str:
        """Human-readable concatenation of the issue descriptions."""
        return ", ".join(issue.description for issue in self.issues)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "passed": self.passed,
            "score": self.score,
            "issues": [issue.to_dict() for issue in self.issues],
            "disclaimer_required": self.disclaimer_required,
            "disclaimer_text": self.disclaimer_text,
            "review_required": self.review_required,
            "auto_approved": self.auto_approved,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SafetyReport":
        return cls(
            passed=bool(data["passed"]),
            score=int(data["score"]),
            issues=tuple(SafetyIssue.from_dict(i) for i in data.get("issues", [])),
            disclaimer_required=bool(data.get("disclaimer_required", False)),
            disclaimer_text=data.get("disclaimer_text"),
            review_required=bool(data.get("review_required", False)),
            auto_approved=bool(data.get("auto_approved", False)),
        )
