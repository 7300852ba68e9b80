"""Stored classification results API router."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from payee_api.dependencies import get_classification_db
from payee_api.models.responses import StoredClassificationsResponse
from payee_core.database.db_manager import ClassificationDBManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["classifications"])


@router.get("/classifications", response_model=StoredClassificationsResponse)
def list_classifications(
    batch_id: Optional[str] = Query(None, description="Only rows of this batch"),
    limit: int = Query(1000, ge=1, le=100000),
    classification_db: ClassificationDBManager = Depends(get_classification_db),
):
    """Stored classification rows ordered by batch and row index."""
    items = classification_db.load_all(batch_id=batch_id, limit=limit)
    return StoredClassificationsResponse(
        total=len(items),
        items=[item.to_dict() for item in items],
    )


@router.delete("/classifications")
def clear_classifications(
    classification_db: ClassificationDBManager = Depends(get_classification_db),
):
    """Delete every stored classification."""
    deleted = classification_db.clear_all()
    logger.info(f"Deleted {deleted} stored classifications via API")
    return {"deleted": deleted}
