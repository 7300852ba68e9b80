"""Batch classification API router."""

import logging
from typing import Any, Dict, List, Union

from fastapi import APIRouter, Depends, Query, status

from payee_api.dependencies import get_batch_job_service, get_classification_db
from payee_api.models.requests import CreateBatchRequest
from payee_api.models.responses import (
    BatchCreatedResponse,
    BatchStatusResponse,
    BatchSummaryResponse,
    ExportTableResponse,
)
from payee_api.services.batch_job_service import BatchJobService, extract_payee_names
from payee_core.classification.export import export_rows, export_summary_rows, export_table
from payee_core.database.db_manager import ClassificationDBManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["batches"])


@router.post("/batches", response_model=BatchCreatedResponse, status_code=status.HTTP_202_ACCEPTED)
def create_batch(
    request: CreateBatchRequest,
    job_service: BatchJobService = Depends(get_batch_job_service),
):
    """
    Start a background batch classification.

    Rows are kept verbatim and merged back in on export; only the
    ``payee_column`` value of each row is read.
    """
    if request.rows is not None:
        names = extract_payee_names(request.rows, request.payee_column)
        job = job_service.submit(names, original_rows=request.rows)
    else:
        job = job_service.submit(request.names)
    snapshot = job.status.snapshot()
    return BatchCreatedResponse(batch_id=job.batch_id, state=snapshot["state"], total=snapshot["total"])


@router.get("/batches/{batch_id}", response_model=BatchStatusResponse)
def get_batch_status(
    batch_id: str,
    job_service: BatchJobService = Depends(get_batch_job_service),
):
    """Poll the progress of a batch."""
    return BatchStatusResponse(**job_service.get_status(batch_id))


@router.post("/batches/{batch_id}/cancel", response_model=BatchStatusResponse)
def cancel_batch(
    batch_id: str,
    job_service: BatchJobService = Depends(get_batch_job_service),
):
    """Request cancellation; unstarted rows are marked as cancelled."""
    return BatchStatusResponse(**job_service.cancel(batch_id))


@router.get("/batches/{batch_id}/export", response_model=Union[ExportTableResponse, List[Dict[str, Any]]])
def export_batch(
    batch_id: str,
    export_format: str = Query("table", alias="format", pattern="^(table|records|summary)$", description="Export layout"),
    backfill_sic: bool = Query(True, description="Fill missing SIC codes from stored results"),
    job_service: BatchJobService = Depends(get_batch_job_service),
    classification_db: ClassificationDBManager = Depends(get_classification_db),
):
    """
    Export a finished batch in input row order.

    ``table`` returns headers and rows for CSV/XLSX writers, ``records``
    one merged dict per row, ``summary`` a condensed view.
    """
    batch_result = job_service.get_result(batch_id)

    sic_lookup = None
    if backfill_sic:
        missing = [item.payee_name for item in batch_result.results if not item.result.sic_code]
        sic_lookup = classification_db.get_sic_lookup(missing)

    if export_format == "records":
        return export_rows(batch_result, sic_lookup)
    if export_format == "summary":
        return export_summary_rows(batch_result, sic_lookup)
    return ExportTableResponse(**export_table(batch_result, sic_lookup))


@router.get("/batches/{batch_id}/summary", response_model=BatchSummaryResponse)
def get_batch_summary(
    batch_id: str,
    job_service: BatchJobService = Depends(get_batch_job_service),
):
    """Statistics of a finished batch."""
    batch_result = job_service.get_result(batch_id)
    return BatchSummaryResponse(
        batch_id=batch_id,
        success_count=batch_result.success_count,
        failure_count=batch_result.failure_count,
        processing_time=batch_result.processing_time,
        cancelled=batch_result.cancelled,
        statistics=batch_result.enhanced_stats.to_dict(),
        errors=[error.to_dict() for error in batch_result.errors],
    )
