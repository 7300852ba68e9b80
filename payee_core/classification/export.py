"""Merge batch results back onto the original file rows for export."""

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

import pandas as pd

from payee_core.classification.exceptions import ExportAlignmentError
from payee_core.classification.models import BatchProcessingResult, PayeeClassification

logger = logging.getLogger(__name__)

# payee name -> (sic_code, sic_description)
SicLookup = Mapping[str, Tuple[Optional[str], Optional[str]]]

PAYEE_NAME_COLUMN = "Payee_Name"

CLASSIFICATION_COLUMNS = [
    "Classification",
    "Confidence_%",
    "Processing_Tier",
    "Reasoning",
    "Processing_Method",
    "SIC_Code",
    "SIC_Description",
    "Keyword_Exclusion",
    "Matched_Keywords",
    "Keyword_Confidence",
    "Keyword_Reasoning",
    "Matching_Rules",
    "Levenshtein_Score",
    "Jaro_Score",
    "Jaro_Winkler_Score",
    "Dice_Coefficient",
    "Token_Sort_Ratio",
    "Combined_Similarity",
    "Timestamp",
    "Row_Index",
]

SUMMARY_COLUMNS = [
    PAYEE_NAME_COLUMN,
    "Classification",
    "Confidence",
    "SIC_Code",
    "SIC_Description",
    "Reasoning",
]


def _validate_alignment(batch_result: BatchProcessingResult) -> None:
    results = batch_result.results
    original = batch_result.original_file_data
    if original is not None and len(original) != len(results):
        raise ExportAlignmentError(
            f"Cannot export: {len(results)} results for {len(original)} original rows"
        )
    for position, item in enumerate(results):
        if item.row_index != position:
            raise ExportAlignmentError(
                f"Result at position {position} has row index {item.row_index}"
            )


def _resolve_sic(
    item: PayeeClassification,
    sic_lookup: Optional[SicLookup],
) -> Tuple[Optional[str], Optional[str]]:
    result = item.result
    if result.sic_code or not sic_lookup:
        return result.sic_code, result.sic_description
    return sic_lookup.get(item.payee_name, (None, None))


def _classification_columns(
    item: PayeeClassification,
    sic_lookup: Optional[SicLookup],
) -> Dict[str, Any]:
    result = item.result
    exclusion = result.keyword_exclusion
    scores = result.similarity_scores
    sic_code, sic_description = _resolve_sic(item, sic_lookup)

    return {
        "Classification": result.classification,
        "Confidence_%": result.confidence,
        "Processing_Tier": result.processing_tier,
        "Reasoning": result.reasoning,
        "Processing_Method": result.processing_method,
        "SIC_Code": sic_code or "",
        "SIC_Description": sic_description or "",
        "Keyword_Exclusion": "Yes" if exclusion and exclusion.is_excluded else "No",
        "Matched_Keywords": ", ".join(exclusion.matched_keywords) if exclusion else "",
        "Keyword_Confidence": exclusion.confidence if exclusion else 0,
        "Keyword_Reasoning": exclusion.reasoning if exclusion else "",
        "Matching_Rules": "; ".join(result.matching_rules),
        "Levenshtein_Score": round(scores.levenshtein, 2) if scores else "",
        "Jaro_Score": round(scores.jaro, 2) if scores else "",
        "Jaro_Winkler_Score": round(scores.jaro_winkler, 2) if scores else "",
        "Dice_Coefficient": round(scores.dice, 2) if scores else "",
        "Token_Sort_Ratio": round(scores.token_sort, 2) if scores else "",
        "Combined_Similarity": round(scores.combined, 2) if scores else "",
        "Timestamp": item.timestamp.isoformat(),
        "Row_Index": item.row_index,
    }


def export_rows(
    batch_result: BatchProcessingResult,
    sic_lookup: Optional[SicLookup] = None,
) -> List[Dict[str, Any]]:
    """
    Build one flat record per input row, in input order.

    Original columns come first and are copied verbatim; without original
    data a ``Payee_Name`` column takes their place. Nothing is reordered,
    filtered or deduplicated.

    Args:
        batch_result: Completed batch
        sic_lookup: Persisted SIC codes by payee name, used when a result has none

    Returns:
        List of records

    Raises:
        ExportAlignmentError: If results and original rows do not line up
    """
    _validate_alignment(batch_result)
    original = batch_result.original_file_data

    rows = []
    for position, item in enumerate(batch_result.results):
        if original is not None:
            record = dict(original[position])
        else:
            record = {PAYEE_NAME_COLUMN: item.payee_name}
        record.update(_classification_columns(item, sic_lookup))
        rows.append(record)
    return rows


def export_headers(batch_result: BatchProcessingResult) -> List[str]:
    """Original columns in first-seen order, then the classification columns."""
    if batch_result.original_file_data is None:
        leading = [PAYEE_NAME_COLUMN]
    else:
        leading = []
        for row in batch_result.original_file_data:
            for key in row.keys():
                if key not in leading and key not in CLASSIFICATION_COLUMNS:
                    leading.append(key)
    return leading + CLASSIFICATION_COLUMNS


def export_table(
    batch_result: BatchProcessingResult,
    sic_lookup: Optional[SicLookup] = None,
) -> Dict[str, List]:
    """Export as ``{"headers": [...], "rows": [[...], ...]}`` for tabular writers."""
    records = export_rows(batch_result, sic_lookup)
    headers = export_headers(batch_result)
    return {
        "headers": headers,
        "rows": [[record.get(header, "") for header in headers] for record in records],
    }


def export_summary_rows(
    batch_result: BatchProcessingResult,
    sic_lookup: Optional[SicLookup] = None,
) -> List[Dict[str, Any]]:
    """Condensed one-line-per-row view without original columns."""
    _validate_alignment(batch_result)
    rows = []
    for item in batch_result.results:
        sic_code, sic_description = _resolve_sic(item, sic_lookup)
        rows.append({
            PAYEE_NAME_COLUMN: item.payee_name,
            "Classification": item.result.classification,
            "Confidence": item.result.confidence,
            "SIC_Code": sic_code or "",
            "SIC_Description": sic_description or "",
            "Reasoning": item.result.reasoning,
        })
    return rows


def to_dataframe(
    batch_result: BatchProcessingResult,
    sic_lookup: Optional[SicLookup] = None,
) -> pd.DataFrame:
    """Export as a DataFrame with the same columns and order as ``export_table``."""
    table = export_table(batch_result, sic_lookup)
    logger.debug(f"Exporting {len(table['rows'])} rows with {len(table['headers'])} columns")
    return pd.DataFrame(table["rows"], columns=table["headers"])
