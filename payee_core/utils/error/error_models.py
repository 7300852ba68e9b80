"""Error models for batch classification."""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class ItemFailure:
    """A single payee that could not be classified and received a fallback record."""

    row_index: int
    payee_name: Optional[str]
    error: str
    error_type: str

    def to_dict(self) -> dict:
        return {
            'row_index': self.row_index,
            'payee_name': self.payee_name,
            'error': self.error,
            'error_type': self.error_type,
        }

    @classmethod
    def from_exception(cls, row_index: int, payee_name: Optional[str], exc: Exception) -> 'ItemFailure':
        return cls(
            row_index=row_index,
            payee_name=payee_name,
            error=str(exc),
            error_type=type(exc).__name__,
        )

    @classmethod
    def from_dict(cls, data: dict) -> 'ItemFailure':
        row_index: Any = data.get('row_index', data.get('row'))
        return cls(
            row_index=int(row_index) if row_index is not None else -1,
            payee_name=data.get('payee_name'),
            error=data.get('error', str(data)),
            error_type=data.get('error_type', 'UNKNOWN'),
        )
