"""Database managers for classification results and custom exclusion keywords."""

import logging
import math
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from payee_core.classification.exceptions import (
    DuplicateKeywordError,
    KeywordListError,
    KeywordNotFoundError,
)
from payee_core.classification.keywords import clean_keyword, validate_keywords
from payee_core.classification.models import (
    ClassificationResult,
    KeywordExclusionResult,
    PayeeClassification,
)
from payee_core.database.models import ExclusionKeyword, PayeeClassificationRecord
from payee_core.database.schema import get_session_factory, init_database
from payee_core.matching.similarity import SimilarityScores

logger = logging.getLogger(__name__)

# Rows per query when matching existing records; keeps IN() lists small
SAVE_CHUNK_SIZE = 500


def _json_safe(value: Any) -> Any:
    """Convert cell values (numpy scalars, timestamps, NaN) into JSON-storable values."""
    if value is None or isinstance(value, (str, bool, int)):
        return value
    if isinstance(value, float):
        return None if math.isnan(value) else value
    if isinstance(value, Mapping):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    item = getattr(value, "item", None)
    if callable(item):
        try:
            return _json_safe(item())
        except (TypeError, ValueError):
            return str(value)
    return str(value)


class _SessionMixin:
    """Engine and session handling shared by the managers."""

    def __init__(self, db_path: Path, echo: bool = False):
        """
        Initialize database manager.

        Args:
            db_path: Path to SQLite database file
            echo: Whether to echo SQL queries (for debugging)
        """
        self.db_path = Path(db_path)
        self.engine = init_database(self.db_path, echo=echo)
        self.Session = get_session_factory(self.engine)

    @contextmanager
    def _get_session(self, commit: bool = True):
        """
        Context manager for database sessions.

        Args:
            commit: Whether to commit on successful exit (default: True)
        """
        session = self.Session()
        try:
            yield session
            if commit:
                session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


class ClassificationDBManager(_SessionMixin):
    """Stores classified payee rows keyed by (payee_name, row_index, batch_id)."""

    def save(self, results: Sequence[PayeeClassification], batch_id: Optional[str] = None) -> int:
        """
        Upsert classification results.

        Args:
            results: Classified rows
            batch_id: Batch the rows belong to ("" when None)

        Returns:
            Number of rows written
        """
        if not results:
            return 0

        batch_key = batch_id or ""
        written = 0
        with self._get_session() as session:
            for start in range(0, len(results), SAVE_CHUNK_SIZE):
                chunk = results[start:start + SAVE_CHUNK_SIZE]
                names = {item.payee_name for item in chunk}
                existing_entries = (
                    session.query(PayeeClassificationRecord)
                    .filter(
                        PayeeClassificationRecord.batch_id == batch_key,
                        PayeeClassificationRecord.payee_name.in_(names),
                    )
                    .all()
                )
                existing_map = {(e.payee_name, e.row_index): e for e in existing_entries}

                for item in chunk:
                    row_index = item.row_index if item.row_index is not None else -1
                    entry = existing_map.get((item.payee_name, row_index))
                    if entry is None:
                        entry = PayeeClassificationRecord(
                            batch_id=batch_key,
                            payee_name=item.payee_name,
                            row_index=row_index,
                        )
                        session.add(entry)
                        existing_map[(item.payee_name, row_index)] = entry
                    self._apply_result(entry, item)
                    written += 1

        logger.debug(f"Saved {written} classification rows (batch '{batch_key}')")
        return written

    @staticmethod
    def _apply_result(entry: PayeeClassificationRecord, item: PayeeClassification) -> None:
        result = item.result
        entry.classification = result.classification
        entry.confidence = result.confidence
        entry.processing_tier = result.processing_tier
        entry.processing_method = result.processing_method
        entry.reasoning = result.reasoning
        entry.matching_rules = list(result.matching_rules)
        entry.keyword_exclusion = result.keyword_exclusion.to_dict() if result.keyword_exclusion else None
        entry.similarity_scores = result.similarity_scores.to_dict() if result.similarity_scores else None
        entry.sic_code = result.sic_code
        entry.sic_description = result.sic_description
        entry.original_data = _json_safe(item.original_data) if item.original_data is not None else None
        timestamp = item.timestamp
        if timestamp.tzinfo is not None:
            timestamp = timestamp.astimezone(timezone.utc).replace(tzinfo=None)
        entry.classified_at = timestamp

    def load_all(
        self,
        batch_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[PayeeClassification]:
        """
        Load stored rows, optionally for one batch, ordered by batch then row.

        Args:
            batch_id: Only rows of this batch when given
            limit: Maximum number of rows

        Returns:
            List of PayeeClassification
        """
        with self._get_session(commit=False) as session:
            query = session.query(PayeeClassificationRecord)
            if batch_id is not None:
                query = query.filter(PayeeClassificationRecord.batch_id == batch_id)
            query = query.order_by(
                PayeeClassificationRecord.batch_id, PayeeClassificationRecord.row_index
            )
            if limit:
                query = query.limit(limit)
            return [self._to_payee_classification(entry) for entry in query.all()]

    def count(self) -> int:
        with self._get_session(commit=False) as session:
            return session.query(PayeeClassificationRecord).count()

    def clear_all(self) -> int:
        """
        Delete every stored classification.

        Returns:
            Number of records deleted
        """
        with self._get_session() as session:
            count = session.query(PayeeClassificationRecord).count()
            session.query(PayeeClassificationRecord).delete()
            logger.info(f"Cleared {count} stored classifications")
            return count

    def get_sic_lookup(self, payee_names: Iterable[str]) -> Dict[str, Tuple[Optional[str], Optional[str]]]:
        """
        Most recent stored SIC code per payee name.

        Args:
            payee_names: Names to look up

        Returns:
            Mapping of payee name to (sic_code, sic_description); names
            without a stored code are absent
        """
        names = list({name for name in payee_names if name})
        lookup: Dict[str, Tuple[Optional[str], Optional[str]]] = {}
        if not names:
            return lookup

        with self._get_session(commit=False) as session:
            for start in range(0, len(names), SAVE_CHUNK_SIZE):
                entries = (
                    session.query(PayeeClassificationRecord)
                    .filter(
                        PayeeClassificationRecord.payee_name.in_(names[start:start + SAVE_CHUNK_SIZE]),
                        PayeeClassificationRecord.sic_code.isnot(None),
                    )
                    .order_by(PayeeClassificationRecord.classified_at.desc())
                    .all()
                )
                for entry in entries:
                    lookup.setdefault(entry.payee_name, (entry.sic_code, entry.sic_description))
        return lookup

    @staticmethod
    def _to_payee_classification(entry: PayeeClassificationRecord) -> PayeeClassification:
        """Convert database entry to PayeeClassification."""
        scores = SimilarityScores(**entry.similarity_scores) if entry.similarity_scores else None
        result = ClassificationResult(
            classification=entry.classification,
            confidence=entry.confidence,
            reasoning=entry.reasoning or "",
            processing_tier=entry.processing_tier,
            processing_method=entry.processing_method or "",
            matching_rules=tuple(entry.matching_rules or ()),
            keyword_exclusion=KeywordExclusionResult.from_dict(entry.keyword_exclusion),
            similarity_scores=scores,
            sic_code=entry.sic_code,
            sic_description=entry.sic_description,
        )
        return PayeeClassification(
            id=f"{entry.batch_id or 'adhoc'}-{entry.row_index}",
            payee_name=entry.payee_name,
            result=result,
            timestamp=entry.classified_at.replace(tzinfo=timezone.utc),
            original_data=entry.original_data,
            row_index=entry.row_index,
        )


class KeywordDBManager(_SessionMixin):
    """CRUD for custom exclusion keywords."""

    @staticmethod
    def _validated(keyword: str) -> str:
        validation = validate_keywords([keyword])
        if not validation.is_valid:
            raise KeywordListError("; ".join(validation.errors))
        return clean_keyword(keyword)

    def load_custom_keywords(self) -> List[str]:
        """Active custom keywords, oldest first."""
        with self._get_session(commit=False) as session:
            entries = (
                session.query(ExclusionKeyword)
                .filter(ExclusionKeyword.is_active.is_(True))
                .order_by(ExclusionKeyword.id)
                .all()
            )
            return [entry.keyword for entry in entries]

    def list_keywords(self, include_inactive: bool = False) -> List[dict]:
        with self._get_session(commit=False) as session:
            query = session.query(ExclusionKeyword)
            if not include_inactive:
                query = query.filter(ExclusionKeyword.is_active.is_(True))
            return [entry.to_dict() for entry in query.order_by(ExclusionKeyword.id).all()]

    def add_keyword(self, keyword: str, category: str = "custom") -> dict:
        """
        Add a custom keyword.

        Raises:
            KeywordListError: If the keyword is blank or too long
            DuplicateKeywordError: If the keyword already exists
        """
        cleaned = self._validated(keyword)
        with self._get_session() as session:
            exists = session.query(ExclusionKeyword).filter(ExclusionKeyword.keyword == cleaned).first()
            if exists is not None:
                raise DuplicateKeywordError(f"Keyword already exists: {cleaned}")
            entry = ExclusionKeyword(keyword=cleaned, category=category or "custom", is_active=True)
            session.add(entry)
            session.flush()
            logger.info(f"Added custom exclusion keyword '{cleaned}'")
            return entry.to_dict()

    def update_keyword(
        self,
        keyword_id: int,
        keyword: Optional[str] = None,
        category: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> dict:
        """
        Update a custom keyword.

        Raises:
            KeywordNotFoundError: If no keyword has this id
            DuplicateKeywordError: If the new text belongs to another keyword
        """
        with self._get_session() as session:
            entry = session.get(ExclusionKeyword, keyword_id)
            if entry is None:
                raise KeywordNotFoundError(f"Keyword {keyword_id} not found")

            if keyword is not None:
                cleaned = self._validated(keyword)
                clash = (
                    session.query(ExclusionKeyword)
                    .filter(ExclusionKeyword.keyword == cleaned, ExclusionKeyword.id != keyword_id)
                    .first()
                )
                if clash is not None:
                    raise DuplicateKeywordError(f"Keyword already exists: {cleaned}")
                entry.keyword = cleaned
            if category is not None:
                entry.category = category
            if is_active is not None:
                entry.is_active = is_active

            entry.updated_at = datetime.utcnow()
            session.flush()
            return entry.to_dict()

    def delete_keyword(self, keyword_id: int) -> None:
        """
        Delete a custom keyword.

        Raises:
            KeywordNotFoundError: If no keyword has this id
        """
        with self._get_session() as session:
            entry = session.get(ExclusionKeyword, keyword_id)
            if entry is None:
                raise KeywordNotFoundError(f"Keyword {keyword_id} not found")
            session.delete(entry)
            logger.info(f"Deleted custom exclusion keyword '{entry.keyword}'")
