"""
Tests for the batch classification pipeline: alignment, failure isolation,
caching, cancellation, progress and persistence.
"""

import threading
from unittest.mock import MagicMock

import pytest

from payee_core.classification.constants import BatchState, Classification, ProcessingTier
from payee_core.classification.exceptions import KeywordListError, RowAlignmentError
from payee_core.classification.progress import BatchStatus
from payee_core.pipeline import BatchClassificationPipeline


def _pipeline(engine, **kwargs):
    kwargs.setdefault("persist_results", False)
    kwargs.setdefault("max_workers", 1)
    return BatchClassificationPipeline(engine=engine, **kwargs)


@pytest.fixture
def mock_engine(make_result):
    """Engine double: raises for names containing BOOM, otherwise returns a Business result."""
    engine = MagicMock()
    engine.current_keywords.return_value = ("BANK",)
    engine.memory = None

    def classify(payee_name, keywords=None):
        if "BOOM" in payee_name.upper():
            raise RuntimeError(f"cannot classify {payee_name}")
        return make_result()

    engine.classify.side_effect = classify
    return engine


# =============================================================================
# ALIGNMENT
# =============================================================================

class TestAlignment:

    def test_results_follow_input_order(self, offline_engine):
        names = ["Bank of America", "John Smith", "", None, "Acme Widgets LLC"]
        rows = [{"Vendor": name, "foo": i} for i, name in enumerate(names)]

        batch = _pipeline(offline_engine).process_batch(names, original_rows=rows)

        assert len(batch.results) == len(names)
        for i, item in enumerate(batch.results):
            assert item.row_index == i
            assert item.original_data is rows[i]
            assert item.id == f"payee-{i}"
        assert batch.original_file_data == rows
        assert batch.results[0].result.processing_tier == ProcessingTier.EXCLUDED
        assert batch.results[2].payee_name == ""
        assert batch.results[3].result.processing_method == "Input validation fallback"

    def test_parallel_workers_keep_alignment(self, offline_engine):
        names = [f"Vendor {i} Holdings" if i % 2 else f"Person Number{i}" for i in range(40)]
        rows = [{"foo": i} for i in range(40)]

        batch = _pipeline(offline_engine, max_workers=4).process_batch(names, original_rows=rows)

        assert [item.row_index for item in batch.results] == list(range(40))
        assert [item.original_data["foo"] for item in batch.results] == list(range(40))
        assert [item.payee_name for item in batch.results] == names

    def test_row_count_mismatch(self, offline_engine):
        with pytest.raises(RowAlignmentError):
            _pipeline(offline_engine).process_batch(["A", "B"], original_rows=[{}, {}, {}])

    def test_empty_keyword_list_is_rejected(self, offline_engine):
        with pytest.raises(KeywordListError):
            _pipeline(offline_engine).process_batch(["A"], keywords=[])

    def test_exclusions_with_custom_keywords(self, offline_engine):
        names = ["Bank of America", "John Smith", "VA Medical Center", "Missoula Valley Storage"]
        batch = _pipeline(offline_engine).process_batch(names, keywords=["BANK", "VA"])

        excluded = [item.result.keyword_exclusion.is_excluded for item in batch.results]
        assert excluded == [True, False, True, False]
        assert batch.results[2].result.classification == Classification.BUSINESS
        assert batch.results[2].result.keyword_exclusion.matched_keywords == ("VA",)

    def test_empty_batch(self, offline_engine):
        batch = _pipeline(offline_engine).process_batch([])
        assert batch.results == []
        assert batch.enhanced_stats.total_processed == 0


# =============================================================================
# FAILURE ISOLATION AND CACHING
# =============================================================================

class TestFailureIsolation:

    def test_failed_name_gets_fallback_record_at_its_index(self, mock_engine):
        batch = _pipeline(mock_engine).process_batch(["Acme", "Boom Corp", "Apex"])

        failed = batch.results[1]
        assert failed.row_index == 1
        assert failed.result.processing_tier == ProcessingTier.FAILED
        assert failed.result.classification == Classification.INDIVIDUAL
        assert failed.result.confidence == 30
        assert failed.result.processing_method == "Error fallback"
        assert not failed.result.keyword_exclusion.is_excluded

        assert batch.success_count == 2
        assert batch.failure_count == 1
        assert len(batch.errors) == 1
        assert batch.errors[0].row_index == 1
        assert batch.errors[0].error_type == "RuntimeError"

    def test_failures_in_parallel(self, mock_engine):
        names = ["Boom" if i % 3 == 0 else f"Vendor {i}" for i in range(12)]
        batch = _pipeline(mock_engine, max_workers=3).process_batch(names)
        assert batch.failure_count == 4
        assert sorted(error.row_index for error in batch.errors) == [0, 3, 6, 9]

    def test_repeated_name_hits_cache(self, mock_engine):
        batch = _pipeline(mock_engine).process_batch(["Acme LLC", " Acme LLC ", "Acme LLC", "Apex"])
        assert mock_engine.classify.call_count == 2
        assert batch.enhanced_stats.cache_hits == 2
        assert [item.row_index for item in batch.results] == [0, 1, 2, 3]

    def test_spelling_variants_are_classified_separately(self, mock_engine):
        _pipeline(mock_engine).process_batch(["Acme LLC", "ACME, LLC", "acme llc"])
        assert mock_engine.classify.call_count == 3

    @pytest.mark.parametrize("names", [
        ["JOHN SMITH", "John Smith"],
        ["John Smith", "JOHN SMITH"],
    ])
    def test_case_variants_do_not_depend_on_row_order(self, offline_engine, names):
        batch = _pipeline(offline_engine).process_batch(names)
        by_name = {item.payee_name: item.result for item in batch.results}

        assert by_name["John Smith"].classification == Classification.INDIVIDUAL
        assert by_name["John Smith"].confidence == 80
        assert by_name["JOHN SMITH"].classification == Classification.BUSINESS
        assert by_name["JOHN SMITH"].confidence == 90
        assert batch.enhanced_stats.cache_hits == 0

    def test_keyword_snapshot_passed_to_engine(self, mock_engine):
        _pipeline(mock_engine).process_batch(["Acme"], keywords=["ZORBLAX"])
        mock_engine.classify.assert_called_once_with("Acme", keywords=("ZORBLAX",))


# =============================================================================
# CANCELLATION AND PROGRESS
# =============================================================================

class TestCancellationAndProgress:

    def test_cancel_before_start_marks_every_row(self, mock_engine):
        cancel_event = threading.Event()
        cancel_event.set()
        status = BatchStatus("b1")

        batch = _pipeline(mock_engine).process_batch(
            ["A", "B", "C"], status=status, cancel_event=cancel_event
        )

        assert batch.cancelled
        assert len(batch.results) == 3
        assert all(item.result.processing_method == "Cancelled" for item in batch.results)
        assert status.state == BatchState.CANCELLED
        mock_engine.classify.assert_not_called()

    def test_cancel_mid_batch(self, mock_engine, make_result):
        cancel_event = threading.Event()

        def classify(payee_name, keywords=None):
            if payee_name == "Second":
                cancel_event.set()
            return make_result()

        mock_engine.classify.side_effect = classify
        batch = _pipeline(mock_engine).process_batch(
            ["First", "Second", "Third", "Fourth"], cancel_event=cancel_event
        )

        methods = [item.result.processing_method for item in batch.results]
        assert methods == ["Test", "Test", "Cancelled", "Cancelled"]
        assert [item.row_index for item in batch.results] == [0, 1, 2, 3]

    def test_status_tracks_progress(self, mock_engine):
        status = BatchStatus("b2")
        _pipeline(mock_engine).process_batch(["Acme", "Boom", "Apex"], status=status)

        snapshot = status.snapshot()
        assert snapshot["state"] == BatchState.COMPLETED
        assert snapshot["total"] == 3
        assert snapshot["processed"] == 3
        assert snapshot["failed"] == 1
        assert snapshot["percent_complete"] == 100.0

    def test_status_fails_on_integrity_error(self, mock_engine, monkeypatch):
        status = BatchStatus("b3")
        pipeline = _pipeline(mock_engine)
        monkeypatch.setattr(
            pipeline, "_validate_slots", MagicMock(side_effect=ValueError("broken slots"))
        )
        with pytest.raises(ValueError):
            pipeline.process_batch(["Acme"], status=status)
        assert status.state == BatchState.FAILED
        assert status.snapshot()["error"] == "broken slots"


# =============================================================================
# STATISTICS AND PERSISTENCE
# =============================================================================

class TestStatisticsAndPersistence:

    def test_statistics(self, offline_engine):
        names = ["Bank of America", "John Smith", "Acme Widgets LLC", "Zorblax"]
        stats = _pipeline(offline_engine).process_batch(names).enhanced_stats

        assert stats.total_processed == 4
        assert stats.business_count == 2
        assert stats.individual_count == 2
        assert stats.excluded_count == 1
        assert stats.high_confidence_count == 2
        assert stats.medium_confidence_count == 2
        assert stats.tier_counts[ProcessingTier.EXCLUDED] == 1
        assert stats.data_integrity.is_valid
        assert stats.average_confidence == pytest.approx((100 + 80 + 95 + 75) / 4)

    def test_results_are_persisted(self, offline_engine, classification_db):
        pipeline = _pipeline(offline_engine, db_manager=classification_db, persist_results=True)
        batch = pipeline.process_batch(["Bank of America", "John Smith"], batch_id="batch-1")

        stored = classification_db.load_all(batch_id="batch-1")
        assert [item.payee_name for item in stored] == ["Bank of America", "John Smith"]
        assert batch.batch_id == "batch-1"

    def test_persistence_failure_keeps_results(self, offline_engine):
        db_manager = MagicMock()
        db_manager.save.side_effect = RuntimeError("disk full")
        pipeline = _pipeline(offline_engine, db_manager=db_manager, persist_results=True)

        batch = pipeline.process_batch(["John Smith"])

        assert len(batch.results) == 1
        db_manager.save.assert_called_once()

    def test_warm_memory_from_store(self, offline_engine, classification_db):
        _pipeline(offline_engine, db_manager=classification_db, persist_results=True).process_batch(
            ["Bank of America", "Acme Widgets LLC"]
        )
        offline_engine.memory.clear()

        warmed = _pipeline(offline_engine, db_manager=classification_db).warm_memory()

        assert warmed == 2
        assert len(offline_engine.memory) == 2
