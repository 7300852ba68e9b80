"""FastAPI dependencies for stores, the classification engine and batch jobs."""

from functools import lru_cache

from payee_api.services.batch_job_service import BatchJobService
from payee_core.classification.engine import ClassificationEngine, create_classification_engine
from payee_core.classification.keywords import KeywordService
from payee_core.config import get_config
from payee_core.database.db_manager import ClassificationDBManager, KeywordDBManager
from payee_core.pipeline import BatchClassificationPipeline


@lru_cache()
def get_classification_db() -> ClassificationDBManager:
    """Get cached classification store."""
    return ClassificationDBManager(db_path=get_config().database_path)


@lru_cache()
def get_keyword_db() -> KeywordDBManager:
    """Get cached custom keyword store."""
    return KeywordDBManager(db_path=get_config().database_path)


@lru_cache()
def get_keyword_service() -> KeywordService:
    """Get cached keyword service merging built-in and custom keywords."""
    return KeywordService(
        custom_loader=get_keyword_db().load_custom_keywords,
        ttl_seconds=get_config().classification.keyword_cache_ttl_seconds,
    )


@lru_cache()
def get_classification_engine() -> ClassificationEngine:
    """Get cached decision engine (AI tier enabled unless offline mode is set)."""
    return create_classification_engine(keyword_service=get_keyword_service())


@lru_cache()
def get_batch_job_service() -> BatchJobService:
    """Get cached batch job service."""
    pipeline = BatchClassificationPipeline(
        engine=get_classification_engine(),
        db_manager=get_classification_db(),
    )
    return BatchJobService(pipeline)
