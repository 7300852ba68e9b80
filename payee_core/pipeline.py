"""Batch classification pipeline: classify many payee names with strict row alignment."""

import logging
import threading
import time
import uuid
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional, Sequence

from payee_core.classification.constants import (
    CANCELLED_ITEM_METHOD,
    FAILED_ITEM_CONFIDENCE,
    FAILED_ITEM_METHOD,
    Classification,
    ProcessingTier,
)
from payee_core.classification.engine import ClassificationEngine, create_classification_engine
from payee_core.classification.exceptions import (
    BatchIntegrityError,
    KeywordListError,
    RowAlignmentError,
)
from payee_core.classification.keywords import KeywordService, validate_keywords
from payee_core.classification.models import (
    BatchProcessingResult,
    ClassificationResult,
    KeywordExclusionResult,
    PayeeClassification,
)
from payee_core.classification.progress import BatchStatus
from payee_core.classification.statistics import compute_batch_statistics
from payee_core.config import get_config
from payee_core.database.db_manager import ClassificationDBManager
from payee_core.utils.cache import LRUCache
from payee_core.utils.error import ItemFailure
from payee_core.utils.values import coerce_payee_name, sanitize_for_logging

logger = logging.getLogger(__name__)


def failed_item_result(error: Exception) -> ClassificationResult:
    """Deterministic record placed at the index of a name that could not be classified."""
    return ClassificationResult(
        classification=Classification.INDIVIDUAL,
        confidence=FAILED_ITEM_CONFIDENCE,
        reasoning=f"Classification failed: {error}",
        processing_tier=ProcessingTier.FAILED,
        processing_method=FAILED_ITEM_METHOD,
        keyword_exclusion=KeywordExclusionResult.empty(
            "Classification failed - no keyword exclusion applied"
        ),
    )


def cancelled_item_result() -> ClassificationResult:
    return ClassificationResult(
        classification=Classification.INDIVIDUAL,
        confidence=FAILED_ITEM_CONFIDENCE,
        reasoning="Batch cancelled before this row was processed",
        processing_tier=ProcessingTier.FAILED,
        processing_method=CANCELLED_ITEM_METHOD,
        keyword_exclusion=KeywordExclusionResult.empty(
            "Batch cancelled - no keyword exclusion applied"
        ),
    )


class BatchClassificationPipeline:
    """
    Classifies an ordered list of payee names.

    Guarantees for every completed batch:
    1. ``len(results) == len(names)``
    2. ``results[i].row_index == i``
    3. ``results[i].original_data is original_rows[i]`` when rows are given

    A failing name becomes a fallback record at its own index; only
    malformed input or a broken alignment raises.
    """

    def __init__(
        self,
        engine: Optional[ClassificationEngine] = None,
        keyword_service: Optional[KeywordService] = None,
        db_manager: Optional[ClassificationDBManager] = None,
        max_workers: Optional[int] = None,
        cache_size: Optional[int] = None,
        persist_results: Optional[bool] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            engine: Decision engine (default: built from configuration)
            keyword_service: Keyword source for a default engine
            db_manager: Classification store; created from DATABASE_PATH when
                persistence is enabled and none is given
            max_workers: Parallel workers (1 = sequential, the default)
            cache_size: Per-batch cache capacity
            persist_results: Save each batch to the classification store
        """
        app_config = get_config()
        settings = app_config.classification

        self.engine = engine or create_classification_engine(keyword_service=keyword_service)
        self.max_workers = max(1, max_workers if max_workers is not None else settings.max_workers)
        self.cache_size = cache_size if cache_size is not None else settings.batch_cache_size
        self.persist_results = (
            persist_results if persist_results is not None else settings.persist_results
        )

        if db_manager is None and self.persist_results:
            db_manager = ClassificationDBManager(db_path=app_config.database_path)
        self.db_manager = db_manager

    def warm_memory(self, limit: Optional[int] = None) -> int:
        """
        Seed the engine's classification memory from persisted results.

        Returns:
            Number of stored results offered to the memory
        """
        if self.db_manager is None or self.engine.memory is None:
            return 0
        stored = self.db_manager.load_all(limit=limit)
        self.engine.memory.remember_all((item.payee_name, item.result) for item in stored)
        logger.info(f"Warmed classification memory with {len(stored)} stored results")
        return len(stored)

    def process_batch(
        self,
        names: Sequence[Any],
        original_rows: Optional[Sequence[Mapping[str, Any]]] = None,
        batch_id: Optional[str] = None,
        status: Optional[BatchStatus] = None,
        cancel_event: Optional[threading.Event] = None,
        keywords: Optional[Sequence[str]] = None,
    ) -> BatchProcessingResult:
        """
        Classify every name and return results aligned with the input.

        Args:
            names: Payee names in row order (missing values are classified as blank)
            original_rows: Opaque row mappings, one per name, passed through untouched
            batch_id: Identifier used for persistence (default: new UUID)
            status: Progress object updated as rows complete
            cancel_event: When set, unstarted rows get a cancelled record
            keywords: Keyword snapshot (default: the engine's current list)

        Returns:
            BatchProcessingResult

        Raises:
            RowAlignmentError: If ``original_rows`` and ``names`` differ in length
            KeywordListError: If the keyword list is empty or invalid
            BatchIntegrityError: If the output fails the alignment check
        """
        names = list(names)
        rows = list(original_rows) if original_rows is not None else None
        if rows is not None and len(rows) != len(names):
            raise RowAlignmentError(
                f"Row count mismatch: {len(names)} names but {len(rows)} original rows"
            )

        snapshot = tuple(keywords) if keywords is not None else tuple(self.engine.current_keywords())
        validation = validate_keywords(list(snapshot))
        if not validation.is_valid:
            raise KeywordListError("; ".join(validation.errors))

        batch_id = batch_id or str(uuid.uuid4())
        total = len(names)
        if status is not None:
            status.start(total)

        try:
            return self._run(names, rows, batch_id, snapshot, status, cancel_event)
        except Exception as e:
            if status is not None:
                status.fail(str(e))
            raise

    def _run(
        self,
        names: List[Any],
        rows: Optional[List[Mapping[str, Any]]],
        batch_id: str,
        keywords: Sequence[str],
        status: Optional[BatchStatus],
        cancel_event: Optional[threading.Event],
    ) -> BatchProcessingResult:
        start_time = time.time()
        total = len(names)
        cache: LRUCache[ClassificationResult] = LRUCache(max_size=self.cache_size)
        slots: List[Optional[PayeeClassification]] = [None] * total
        errors: List[ItemFailure] = []
        errors_lock = threading.Lock()

        def is_cancelled() -> bool:
            return cancel_event is not None and cancel_event.is_set()

        def process_row(index: int) -> None:
            if is_cancelled():
                return
            payee_name = coerce_payee_name(names[index])
            failed = False
            try:
                result = self._classify_cached(payee_name, keywords, cache)
            except Exception as e:
                logger.error(
                    f"Failed to classify row {index} '{sanitize_for_logging(payee_name)}': {e}",
                    exc_info=True,
                )
                with errors_lock:
                    errors.append(ItemFailure.from_exception(index, payee_name, e))
                result = failed_item_result(e)
                failed = True

            slots[index] = self._build_item(index, payee_name, result, rows)
            if status is not None:
                status.advance(failed=failed)

        logger.info(f"Processing batch {batch_id}: {total} names (max_workers={self.max_workers})")

        if self.max_workers > 1 and total > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures = [executor.submit(process_row, index) for index in range(total)]
                for future in as_completed(futures):
                    future.result()
        else:
            for index in range(total):
                if is_cancelled():
                    break
                process_row(index)

        cancelled = False
        for index in range(total):
            if slots[index] is None and is_cancelled():
                payee_name = coerce_payee_name(names[index])
                slots[index] = self._build_item(index, payee_name, cancelled_item_result(), rows)
                cancelled = True
        if cancelled:
            logger.warning(f"Batch {batch_id} cancelled; unprocessed rows marked as cancelled")

        results = self._validate_slots(slots, total)

        processing_time = time.time() - start_time
        failure_count = sum(1 for item in results if item.result.processing_tier == ProcessingTier.FAILED)
        stats = compute_batch_statistics(results, processing_time, cache_hits=cache.hits)

        batch_result = BatchProcessingResult(
            results=results,
            success_count=total - failure_count,
            failure_count=failure_count,
            processing_time=processing_time,
            original_file_data=rows,
            enhanced_stats=stats,
            errors=errors,
            batch_id=batch_id,
            cancelled=cancelled,
        )

        self._persist(batch_result)

        if status is not None:
            status.complete(cancelled=cancelled)

        logger.info(
            f"Batch {batch_id} finished: {batch_result.success_count} classified, "
            f"{failure_count} failed, {cache.hits} cache hits in {processing_time:.2f}s"
        )
        return batch_result

    def _classify_cached(
        self,
        payee_name: str,
        keywords: Sequence[str],
        cache: LRUCache[ClassificationResult],
    ) -> ClassificationResult:
        # Keyed on the exact text the tiers see: case and punctuation change the outcome
        key = payee_name.strip()
        if key:
            cached = cache.get(key)
            if cached is not None:
                return cached

        result = self.engine.classify(payee_name, keywords=keywords)
        if key:
            cache.set(key, result)
        return result

    @staticmethod
    def _build_item(
        index: int,
        payee_name: str,
        result: ClassificationResult,
        rows: Optional[List[Mapping[str, Any]]],
    ) -> PayeeClassification:
        return PayeeClassification(
            id=f"payee-{index}",
            payee_name=payee_name,
            result=result,
            timestamp=datetime.now(timezone.utc),
            original_data=rows[index] if rows is not None else None,
            row_index=index,
        )

    @staticmethod
    def _validate_slots(
        slots: List[Optional[PayeeClassification]],
        expected: int,
    ) -> List[PayeeClassification]:
        if len(slots) != expected:
            raise BatchIntegrityError(f"Expected {expected} results, got {len(slots)}")
        missing = [index for index, item in enumerate(slots) if item is None]
        if missing:
            raise BatchIntegrityError(f"Unfilled result slots: {missing[:10]}")
        misaligned = [index for index, item in enumerate(slots) if item.row_index != index]
        if misaligned:
            raise BatchIntegrityError(f"Row index mismatch at positions: {misaligned[:10]}")
        return list(slots)

    def _persist(self, batch_result: BatchProcessingResult) -> None:
        if not self.persist_results or self.db_manager is None:
            return
        try:
            saved = self.db_manager.save(batch_result.results, batch_id=batch_result.batch_id)
            logger.info(f"Persisted {saved} results for batch {batch_result.batch_id}")
        except Exception as e:
            logger.warning(
                f"Failed to persist batch {batch_result.batch_id}, results kept in memory: {e}",
                exc_info=True,
            )
