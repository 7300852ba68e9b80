"""Data models for payee classification agent."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class AIClassification:
    """Classification returned by the language model"""

    classification: str  # Business or Individual
    confidence: int  # 0-100
    reasoning: str
    sic_code: Optional[str] = None
    sic_description: Optional[str] = None
    matching_rules: List[str] = field(default_factory=list)
    runs: int = 1  # Number of model calls behind this result
    agreement: float = 1.0  # Share of runs agreeing with the classification

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        return {
            "classification": self.classification,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
            "sic_code": self.sic_code,
            "sic_description": self.sic_description,
            "matching_rules": list(self.matching_rules),
            "runs": self.runs,
            "agreement": self.agreement,
        }
