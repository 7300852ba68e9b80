"""Exclusion keyword API router."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from payee_api.dependencies import get_keyword_db, get_keyword_service
from payee_api.models.requests import KeywordCreateRequest, KeywordUpdateRequest, ValidateKeywordsRequest
from payee_api.models.responses import (
    KeywordListResponse,
    KeywordResponse,
    KeywordStatisticsResponse,
    KeywordValidationResponse,
)
from payee_core.classification.keywords import (
    KeywordService,
    keyword_statistics,
    search_keywords,
    validate_keywords,
)
from payee_core.database.db_manager import KeywordDBManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["keywords"])


@router.get("/keywords", response_model=KeywordListResponse)
def list_effective_keywords(
    search: Optional[str] = Query(None, description="Only keywords containing this text"),
    keyword_service: KeywordService = Depends(get_keyword_service),
):
    """Built-in and active custom keywords as used by the classifier."""
    keywords = list(keyword_service.get_keywords())
    if search:
        keywords = search_keywords(keywords, search)
    return KeywordListResponse(
        total=len(keywords),
        builtin_count=len(keyword_service.builtin_keywords),
        keywords=keywords,
    )


@router.get("/keywords/statistics", response_model=KeywordStatisticsResponse)
def get_keyword_statistics(keyword_service: KeywordService = Depends(get_keyword_service)):
    """Effective keywords counted per built-in category (custom for the rest)."""
    return KeywordStatisticsResponse(**keyword_statistics(keyword_service.get_keywords()))


@router.get("/keywords/custom", response_model=List[KeywordResponse])
def list_custom_keywords(
    include_inactive: bool = Query(False),
    keyword_db: KeywordDBManager = Depends(get_keyword_db),
):
    """Custom keywords stored in the database."""
    return [KeywordResponse(**entry) for entry in keyword_db.list_keywords(include_inactive)]


@router.post("/keywords/custom", response_model=KeywordResponse, status_code=201)
def add_custom_keyword(
    request: KeywordCreateRequest,
    keyword_db: KeywordDBManager = Depends(get_keyword_db),
    keyword_service: KeywordService = Depends(get_keyword_service),
):
    """Add a custom keyword; the effective list is refreshed on next use."""
    entry = keyword_db.add_keyword(request.keyword, category=request.category)
    keyword_service.invalidate()
    return KeywordResponse(**entry)


@router.put("/keywords/custom/{keyword_id}", response_model=KeywordResponse)
def update_custom_keyword(
    keyword_id: int,
    request: KeywordUpdateRequest,
    keyword_db: KeywordDBManager = Depends(get_keyword_db),
    keyword_service: KeywordService = Depends(get_keyword_service),
):
    """Edit, recategorize or (de)activate a custom keyword."""
    entry = keyword_db.update_keyword(
        keyword_id,
        keyword=request.keyword,
        category=request.category,
        is_active=request.is_active,
    )
    keyword_service.invalidate()
    return KeywordResponse(**entry)


@router.delete("/keywords/custom/{keyword_id}")
def delete_custom_keyword(
    keyword_id: int,
    keyword_db: KeywordDBManager = Depends(get_keyword_db),
    keyword_service: KeywordService = Depends(get_keyword_service),
):
    """Delete a custom keyword."""
    keyword_db.delete_keyword(keyword_id)
    keyword_service.invalidate()
    return {"status": "deleted", "id": keyword_id}


@router.post("/keywords/validate", response_model=KeywordValidationResponse)
def validate_keyword_list(request: ValidateKeywordsRequest):
    """Check a keyword list for empty, over-long, duplicate or suspicious entries."""
    return KeywordValidationResponse(**validate_keywords(request.keywords).to_dict())
