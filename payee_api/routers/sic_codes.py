"""SIC reference code API router."""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query

from payee_api.models.responses import SicCodeResponse
from payee_core.classification.sic_codes import (
    COMMON_SIC_CODES,
    get_default_sic_code,
    get_sic_info,
    is_valid_sic_code,
    search_sic_codes,
)

router = APIRouter(prefix="/api/v1", tags=["sic-codes"])


@router.get("/sic-codes", response_model=List[SicCodeResponse])
def list_sic_codes(search: Optional[str] = Query(None, description="Text in description or category")):
    """Reference SIC codes, optionally filtered."""
    codes = search_sic_codes(search) if search else list(COMMON_SIC_CODES.values())
    return [SicCodeResponse(**info.to_dict()) for info in codes]


@router.get("/sic-codes/suggest", response_model=SicCodeResponse)
def suggest_sic_code(business_type: Optional[str] = Query(None, description="Free-text business type")):
    """Best-guess code for a business type; generic business services when nothing fits."""
    return SicCodeResponse(**get_default_sic_code(business_type).to_dict())


@router.get("/sic-codes/{code}", response_model=SicCodeResponse)
def get_sic_code(code: str):
    """
    Look up one SIC code.

    Raises:
        HTTPException: 400 for malformed codes, 404 for codes not in the table
    """
    if not is_valid_sic_code(code):
        raise HTTPException(status_code=400, detail=f"SIC codes are four digits, got '{code}'")
    info = get_sic_info(code)
    if info is None:
        raise HTTPException(status_code=404, detail=f"SIC code {code} not in reference table")
    return SicCodeResponse(**info.to_dict())
