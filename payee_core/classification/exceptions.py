"""Custom exceptions for payee classification."""

from typing import Optional


class PayeeClassificationError(Exception):
    """Base exception for payee classification errors."""
    pass


class InputValidationError(PayeeClassificationError):
    """Batch input rejected before any processing started."""
    pass


class RowAlignmentError(InputValidationError):
    """Names and original rows have different lengths."""
    pass


class KeywordListError(InputValidationError):
    """Exclusion keyword list is empty or contains invalid entries."""
    pass


class BatchIntegrityError(PayeeClassificationError):
    """Batch output failed the slot/row-index integrity check."""
    pass


class ExportAlignmentError(PayeeClassificationError):
    """Results cannot be aligned with the original file rows for export."""
    pass


class DuplicateKeywordError(PayeeClassificationError):
    """Custom keyword already exists."""
    pass


class KeywordNotFoundError(PayeeClassificationError):
    """Custom keyword does not exist."""
    pass


class AIClassificationError(PayeeClassificationError):
    """Remote AI classification failed.

    ``kind`` is one of auth, quota, network, timeout, parse or unknown.
    """

    def __init__(self, message: str, kind: str = "unknown", cause: Optional[Exception] = None):
        super().__init__(message)
        self.kind = kind
        self.cause = cause
