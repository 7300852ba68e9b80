"""Database module for storing classification results and custom keywords."""

from payee_core.database.db_manager import ClassificationDBManager, KeywordDBManager
from payee_core.database.models import ExclusionKeyword, PayeeClassificationRecord

__all__ = [
    "ClassificationDBManager",
    "KeywordDBManager",
    "ExclusionKeyword",
    "PayeeClassificationRecord",
]
