"""Pydantic response models for the payee classification API."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class KeywordExclusionResponse(BaseModel):
    """Keyword exclusion outcome."""

    is_excluded: bool
    matched_keywords: List[str]
    confidence: int
    reasoning: str


class ClassificationResponse(BaseModel):
    """Response model for a single classification."""

    payee_name: str
    classification: str
    confidence: int
    reasoning: str
    processing_tier: str
    processing_method: str
    matching_rules: List[str]
    keyword_exclusion: Optional[KeywordExclusionResponse] = None
    similarity_scores: Optional[Dict[str, float]] = None
    sic_code: Optional[str] = None
    sic_description: Optional[str] = None


class BatchCreatedResponse(BaseModel):
    """Response model for a submitted batch job."""

    batch_id: str
    state: str
    total: int


class BatchStatusResponse(BaseModel):
    """Progress of a batch job."""

    batch_id: str
    state: str
    total: int
    processed: int
    failed: int
    percent_complete: float
    elapsed_seconds: float
    error: Optional[str] = None


class BatchSummaryResponse(BaseModel):
    """Statistics of a finished batch."""

    batch_id: str
    success_count: int
    failure_count: int
    processing_time: float
    cancelled: bool
    statistics: Dict[str, Any]
    errors: List[Dict[str, Any]] = Field(default_factory=list)


class ExportTableResponse(BaseModel):
    """Tabular export of a batch."""

    headers: List[str]
    rows: List[List[Any]]


class KeywordResponse(BaseModel):
    """A custom exclusion keyword."""

    id: int
    keyword: str
    category: str
    is_active: bool
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class KeywordListResponse(BaseModel):
    """Effective exclusion keyword list."""

    total: int
    builtin_count: int
    keywords: List[str]


class KeywordStatisticsResponse(BaseModel):
    """Keyword counts per category."""

    total: int
    by_category: Dict[str, int]


class SicCodeResponse(BaseModel):
    """A SIC reference code."""

    code: str
    description: str
    category: str


class KeywordValidationResponse(BaseModel):
    """Result of validating a keyword list."""

    is_valid: bool
    errors: List[str]
    warnings: List[str]


class StoredClassificationsResponse(BaseModel):
    """Stored classification rows."""

    total: int
    items: List[Dict[str, Any]]
