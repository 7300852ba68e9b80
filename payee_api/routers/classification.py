"""Single-name classification API router."""

import logging

from fastapi import APIRouter, Depends

from payee_api.dependencies import get_classification_engine, get_keyword_service
from payee_api.models.requests import ClassifyRequest, ExclusionCheckRequest
from payee_api.models.responses import ClassificationResponse, KeywordExclusionResponse
from payee_core.classification.engine import ClassificationEngine
from payee_core.classification.exceptions import KeywordListError
from payee_core.classification.keyword_exclusion import check_exclusion
from payee_core.classification.keywords import KeywordService, merge_keyword_lists

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["classification"])


def _request_keywords(keywords):
    if keywords is None:
        return None
    merged = merge_keyword_lists(keywords)
    if not merged:
        raise KeywordListError("Keyword list is empty")
    return merged


@router.post("/classify", response_model=ClassificationResponse)
def classify_payee(
    request: ClassifyRequest,
    engine: ClassificationEngine = Depends(get_classification_engine),
):
    """
    Classify one payee name through the full cascade.

    Args:
        request: Payee name and optional keyword override
        engine: Decision engine dependency

    Returns:
        Classification with tier, reasoning and keyword-exclusion details
    """
    result = engine.classify(request.payee_name, keywords=_request_keywords(request.keywords))
    return ClassificationResponse(payee_name=request.payee_name.strip(), **result.to_dict())


@router.post("/exclusion/check", response_model=KeywordExclusionResponse)
def check_keyword_exclusion(
    request: ExclusionCheckRequest,
    keyword_service: KeywordService = Depends(get_keyword_service),
):
    """Test a payee name against the exclusion keywords."""
    keywords = _request_keywords(request.keywords)
    if keywords is None:
        keywords = keyword_service.get_keywords()
    result = check_exclusion(request.payee_name, keywords)
    return KeywordExclusionResponse(**result.to_dict())
