"""Batch statistics and data-integrity checks."""

from collections import Counter
from typing import Sequence

from payee_core.classification.constants import (
    HIGH_CONFIDENCE_BUCKET,
    MEDIUM_CONFIDENCE_BUCKET,
    Classification,
    ProcessingTier,
)
from payee_core.classification.models import (
    BatchStatistics,
    DataIntegrityReport,
    PayeeClassification,
)


def check_data_integrity(
    results: Sequence[PayeeClassification],
    expected_count: int,
) -> DataIntegrityReport:
    """
    Verify that results cover row indexes 0..expected_count-1 exactly once.

    Args:
        results: Ordered batch results
        expected_count: Number of input rows

    Returns:
        DataIntegrityReport
    """
    report = DataIntegrityReport()
    seen = Counter()
    for item in results:
        if item.row_index is None:
            report.all_have_row_index = False
            continue
        seen[item.row_index] += 1
        if item.result.keyword_exclusion is None:
            report.all_have_keyword_exclusion = False

    report.missing_row_indexes = [i for i in range(expected_count) if i not in seen]
    report.duplicate_row_indexes = sorted(i for i, count in seen.items() if count > 1)
    return report


def compute_batch_statistics(
    results: Sequence[PayeeClassification],
    processing_time: float = 0.0,
    cache_hits: int = 0,
) -> BatchStatistics:
    """Aggregate counts, confidence buckets and tier usage for a batch."""
    stats = BatchStatistics(
        total_processed=len(results),
        processing_time=processing_time,
        cache_hits=cache_hits,
        data_integrity=check_data_integrity(results, len(results)),
    )
    if not results:
        return stats

    tiers = Counter()
    confidence_total = 0
    for item in results:
        result = item.result
        tiers[result.processing_tier] += 1
        confidence_total += result.confidence

        if result.classification == Classification.BUSINESS:
            stats.business_count += 1
        else:
            stats.individual_count += 1
        if result.keyword_exclusion is not None and result.keyword_exclusion.is_excluded:
            stats.excluded_count += 1
        if result.processing_tier == ProcessingTier.FAILED:
            stats.failed_count += 1
        if result.sic_code:
            stats.sic_code_count += 1

        if result.confidence >= HIGH_CONFIDENCE_BUCKET:
            stats.high_confidence_count += 1
        elif result.confidence >= MEDIUM_CONFIDENCE_BUCKET:
            stats.medium_confidence_count += 1
        else:
            stats.low_confidence_count += 1

    stats.tier_counts = dict(tiers)
    stats.average_confidence = round(confidence_total / len(results), 2)
    return stats
