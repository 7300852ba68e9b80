"""
Payee Classifier Test Configuration and Fixtures
================================================

Shared fixtures: an offline decision engine, temporary SQLite stores, a
stub DSPy predictor for the AI agent and a FastAPI test client wired to
temporary dependencies. Nothing here talks to the network.
"""

from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, List, Optional

import dspy
import pytest

from payee_core.classification.constants import Classification, ProcessingTier
from payee_core.classification.engine import ClassificationEngine
from payee_core.classification.keywords import KeywordService
from payee_core.classification.memory import ClassificationMemory
from payee_core.classification.models import (
    ClassificationResult,
    KeywordExclusionResult,
    PayeeClassification,
)
from payee_core.database.db_manager import ClassificationDBManager, KeywordDBManager


# =============================================================================
# HELPERS
# =============================================================================

class StubPredictor:
    """Stands in for ``dspy.Predict``; replays queued responses in order.

    The last response repeats once the queue is exhausted. Exceptions in the
    queue are raised instead of returned.
    """

    def __init__(self, *responses: Any):
        self.responses = list(responses)
        self.calls: List[str] = []

    def __call__(self, payee_name: str):
        self.calls.append(payee_name)
        response = self.responses[min(len(self.calls), len(self.responses)) - 1]
        if isinstance(response, Exception):
            raise response
        return response


def _make_prediction(
    classification: str = "Business",
    confidence: Any = 90,
    reasoning: str = "Name reads like a company",
    sic_code: str = "",
    sic_description: str = "",
    matching_rules: str = "[]",
) -> dspy.Prediction:
    return dspy.Prediction(
        classification=classification,
        confidence=confidence,
        reasoning=reasoning,
        sic_code=sic_code,
        sic_description=sic_description,
        matching_rules=matching_rules,
    )


def _make_result(
    classification: str = Classification.BUSINESS,
    confidence: int = 90,
    tier: str = ProcessingTier.RULE_BASED,
    sic_code: Optional[str] = None,
    sic_description: Optional[str] = None,
    exclusion: Optional[KeywordExclusionResult] = None,
) -> ClassificationResult:
    return ClassificationResult(
        classification=classification,
        confidence=confidence,
        reasoning=f"Test result ({classification})",
        processing_tier=tier,
        processing_method="Test",
        matching_rules=("Test rule",),
        keyword_exclusion=exclusion or KeywordExclusionResult.empty(),
        sic_code=sic_code,
        sic_description=sic_description,
    )


def _make_item(
    index: int,
    payee_name: str,
    result: Optional[ClassificationResult] = None,
    original_data: Optional[dict] = None,
    timestamp: Optional[datetime] = None,
) -> PayeeClassification:
    return PayeeClassification(
        id=f"payee-{index}",
        payee_name=payee_name,
        result=result or _make_result(),
        timestamp=timestamp or datetime.now(timezone.utc),
        original_data=original_data,
        row_index=index,
    )


# =============================================================================
# FACTORY FIXTURES
# =============================================================================

@pytest.fixture
def stub_predictor():
    """Factory for StubPredictor instances."""
    return StubPredictor


@pytest.fixture
def make_prediction():
    """Factory for DSPy predictions shaped like the classification signature."""
    return _make_prediction


@pytest.fixture
def make_result():
    """Factory for ClassificationResult objects."""
    return _make_result


@pytest.fixture
def make_item():
    """Factory for PayeeClassification rows."""
    return _make_item


# =============================================================================
# ENGINE AND STORAGE FIXTURES
# =============================================================================

@pytest.fixture
def offline_engine():
    """Decision engine with the AI tier disabled and a fresh memory."""
    return ClassificationEngine(offline_mode=True, memory=ClassificationMemory())


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "classifications.db"


@pytest.fixture
def classification_db(db_path):
    return ClassificationDBManager(db_path=db_path)


@pytest.fixture
def keyword_db(db_path):
    return KeywordDBManager(db_path=db_path)


# =============================================================================
# API FIXTURES
# =============================================================================

@pytest.fixture
def api(db_path):
    """
    FastAPI TestClient with every dependency pointed at temporary stores.

    Yields a namespace with ``client``, ``jobs`` (the BatchJobService),
    ``classification_db`` and ``keyword_db``.
    """
    from fastapi.testclient import TestClient

    from payee_api import dependencies
    from payee_api.main import app
    from payee_api.services.batch_job_service import BatchJobService
    from payee_core.pipeline import BatchClassificationPipeline

    classification_db = ClassificationDBManager(db_path=db_path)
    keyword_db = KeywordDBManager(db_path=db_path)
    keyword_service = KeywordService(custom_loader=keyword_db.load_custom_keywords)
    engine = ClassificationEngine(
        offline_mode=True,
        keyword_service=keyword_service,
        memory=ClassificationMemory(),
    )
    pipeline = BatchClassificationPipeline(
        engine=engine,
        db_manager=classification_db,
        max_workers=1,
        persist_results=True,
    )
    jobs = BatchJobService(pipeline)

    app.dependency_overrides[dependencies.get_classification_db] = lambda: classification_db
    app.dependency_overrides[dependencies.get_keyword_db] = lambda: keyword_db
    app.dependency_overrides[dependencies.get_keyword_service] = lambda: keyword_service
    app.dependency_overrides[dependencies.get_classification_engine] = lambda: engine
    app.dependency_overrides[dependencies.get_batch_job_service] = lambda: jobs

    with TestClient(app) as client:
        yield SimpleNamespace(
            client=client,
            jobs=jobs,
            classification_db=classification_db,
            keyword_db=keyword_db,
        )

    app.dependency_overrides.clear()
