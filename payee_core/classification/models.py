"""Data models for payee classification."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple

from payee_core.classification.constants import NO_MATCH_REASONING
from payee_core.matching.similarity import SimilarityScores
from payee_core.utils.error.error_models import ItemFailure


def clamp_confidence(value: Any) -> int:
    """Round and clamp a confidence value into 0-100."""
    try:
        number = int(round(float(value)))
    except (TypeError, ValueError):
        return 0
    return max(0, min(100, number))


@dataclass(frozen=True)
class KeywordExclusionResult:
    """Outcome of matching a payee name against the exclusion keywords."""

    is_excluded: bool
    matched_keywords: Tuple[str, ...] = ()
    confidence: int = 0
    reasoning: str = NO_MATCH_REASONING

    def __post_init__(self):
        object.__setattr__(self, "matched_keywords", tuple(self.matched_keywords))
        if self.is_excluded != bool(self.matched_keywords):
            raise ValueError("is_excluded must be True exactly when keywords matched")

    @classmethod
    def empty(cls, reasoning: str = NO_MATCH_REASONING) -> "KeywordExclusionResult":
        return cls(is_excluded=False, matched_keywords=(), confidence=0, reasoning=reasoning)

    def to_dict(self) -> dict:
        return {
            "is_excluded": self.is_excluded,
            "matched_keywords": list(self.matched_keywords),
            "confidence": self.confidence,
            "reasoning": self.reasoning,
        }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "KeywordExclusionResult":
        if not data:
            return cls.empty()
        matched = tuple(data.get("matched_keywords") or ())
        return cls(
            is_excluded=bool(matched),
            matched_keywords=matched,
            confidence=clamp_confidence(data.get("confidence", 0)),
            reasoning=data.get("reasoning") or NO_MATCH_REASONING,
        )


@dataclass(frozen=True)
class ClassificationResult:
    """Result of classifying a single payee name."""

    classification: str
    confidence: int
    reasoning: str
    processing_tier: str
    processing_method: str = ""
    matching_rules: Tuple[str, ...] = ()
    keyword_exclusion: Optional[KeywordExclusionResult] = None
    similarity_scores: Optional[SimilarityScores] = None
    sic_code: Optional[str] = None
    sic_description: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "confidence", clamp_confidence(self.confidence))
        object.__setattr__(self, "matching_rules", tuple(self.matching_rules))

    def to_dict(self) -> dict:
        return {
            "classification": self.classification,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
            "processing_tier": self.processing_tier,
            "processing_method": self.processing_method,
            "matching_rules": list(self.matching_rules),
            "keyword_exclusion": self.keyword_exclusion.to_dict() if self.keyword_exclusion else None,
            "similarity_scores": self.similarity_scores.to_dict() if self.similarity_scores else None,
            "sic_code": self.sic_code,
            "sic_description": self.sic_description,
        }


@dataclass(frozen=True)
class PayeeClassification:
    """Classification of one payee occurrence (one input row)."""

    id: str
    payee_name: str
    result: ClassificationResult
    timestamp: datetime
    original_data: Optional[Mapping[str, Any]] = None
    row_index: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "payee_name": self.payee_name,
            "result": self.result.to_dict(),
            "timestamp": self.timestamp.isoformat(),
            "original_data": dict(self.original_data) if self.original_data is not None else None,
            "row_index": self.row_index,
        }


@dataclass
class DataIntegrityReport:
    """Row-index and keyword-exclusion coverage of a batch."""

    all_have_row_index: bool = True
    all_have_keyword_exclusion: bool = True
    missing_row_indexes: List[int] = field(default_factory=list)
    duplicate_row_indexes: List[int] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return (
            self.all_have_row_index
            and not self.missing_row_indexes
            and not self.duplicate_row_indexes
        )

    def to_dict(self) -> dict:
        return {
            "all_have_row_index": self.all_have_row_index,
            "all_have_keyword_exclusion": self.all_have_keyword_exclusion,
            "missing_row_indexes": self.missing_row_indexes,
            "duplicate_row_indexes": self.duplicate_row_indexes,
            "is_valid": self.is_valid,
        }


@dataclass
class BatchStatistics:
    """Aggregate statistics for a processed batch."""

    total_processed: int = 0
    business_count: int = 0
    individual_count: int = 0
    excluded_count: int = 0
    failed_count: int = 0
    average_confidence: float = 0.0
    high_confidence_count: int = 0
    medium_confidence_count: int = 0
    low_confidence_count: int = 0
    tier_counts: Dict[str, int] = field(default_factory=dict)
    sic_code_count: int = 0
    cache_hits: int = 0
    processing_time: float = 0.0
    data_integrity: DataIntegrityReport = field(default_factory=DataIntegrityReport)

    def to_dict(self) -> dict:
        return {
            "total_processed": self.total_processed,
            "business_count": self.business_count,
            "individual_count": self.individual_count,
            "excluded_count": self.excluded_count,
            "failed_count": self.failed_count,
            "average_confidence": self.average_confidence,
            "high_confidence_count": self.high_confidence_count,
            "medium_confidence_count": self.medium_confidence_count,
            "low_confidence_count": self.low_confidence_count,
            "tier_counts": dict(self.tier_counts),
            "sic_code_count": self.sic_code_count,
            "cache_hits": self.cache_hits,
            "processing_time": self.processing_time,
            "data_integrity": self.data_integrity.to_dict(),
        }


@dataclass
class BatchProcessingResult:
    """Ordered results of a batch run; ``results[i].row_index == i``."""

    results: List[PayeeClassification]
    success_count: int
    failure_count: int
    processing_time: float
    original_file_data: Optional[List[Mapping[str, Any]]] = None
    enhanced_stats: BatchStatistics = field(default_factory=BatchStatistics)
    errors: List[ItemFailure] = field(default_factory=list)
    batch_id: Optional[str] = None
    cancelled: bool = False

    def to_dict(self) -> dict:
        return {
            "batch_id": self.batch_id,
            "results": [item.to_dict() for item in self.results],
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "processing_time": self.processing_time,
            "enhanced_stats": self.enhanced_stats.to_dict(),
            "errors": [error.to_dict() for error in self.errors],
            "cancelled": self.cancelled,
        }
