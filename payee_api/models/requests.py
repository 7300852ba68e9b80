"""Pydantic request models for the payee classification API."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class ClassifyRequest(BaseModel):
    """Request model for classifying a single payee name."""

    payee_name: str = Field(..., max_length=500, description="Payee name to classify")
    keywords: Optional[List[str]] = Field(
        None, description="Exclusion keywords to use instead of the configured list"
    )


class ExclusionCheckRequest(BaseModel):
    """Request model for testing a name against exclusion keywords."""

    payee_name: str = Field(..., max_length=500, description="Payee name to check")
    keywords: Optional[List[str]] = Field(
        None, description="Keywords to check against (default: configured list)"
    )


class CreateBatchRequest(BaseModel):
    """Request model for starting a batch classification job.

    Either ``names`` or ``rows`` plus ``payee_column`` must be given. With
    rows, each row is kept verbatim and merged back in on export.
    """

    names: Optional[List[Optional[str]]] = Field(None, description="Payee names in row order")
    rows: Optional[List[Dict[str, Any]]] = Field(None, description="Original file rows")
    payee_column: Optional[str] = Field(None, description="Column of rows holding the payee name")

    @model_validator(mode="after")
    def check_source(self) -> "CreateBatchRequest":
        """Require exactly one way of supplying names."""
        if self.names is not None and self.rows is not None:
            raise ValueError("Provide either names or rows, not both")
        if self.names is None and self.rows is None:
            raise ValueError("Provide names or rows")
        if self.rows is not None and not self.payee_column:
            raise ValueError("payee_column is required when rows are provided")
        return self


class KeywordCreateRequest(BaseModel):
    """Request model for adding a custom exclusion keyword."""

    keyword: str = Field(..., min_length=1, max_length=100, description="Keyword text")
    category: str = Field(default="custom", max_length=50, description="Keyword category")

    @field_validator("keyword")
    @classmethod
    def validate_keyword(cls, v: str) -> str:
        """Reject whitespace-only keywords."""
        if not v.strip():
            raise ValueError("keyword cannot be blank")
        return v


class KeywordUpdateRequest(BaseModel):
    """Request model for updating a custom exclusion keyword."""

    keyword: Optional[str] = Field(None, min_length=1, max_length=100)
    category: Optional[str] = Field(None, max_length=50)
    is_active: Optional[bool] = None


class ValidateKeywordsRequest(BaseModel):
    """Request model for validating a keyword list."""

    keywords: List[Any] = Field(..., description="Keywords to validate")
