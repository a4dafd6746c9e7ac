"""
Fact-check claims attached to a generated script.
"""

from dataclasses import dataclass
from typing import Optional, Dict, Any


@dataclass(frozen=True)
class Claim:
    """A factual claim made by the script, with the generator's confidence (0-100)."""

    text: str
    confidence: float
    source: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "confidence": self.confidence, "source": self.source}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Claim":
        return cls(
            text=str(data.get("text", "")),
            confidence=float(data.get("confidence", 0)),
            source=data.get("source") or None,
        )
