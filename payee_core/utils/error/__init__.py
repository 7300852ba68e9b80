"""Error models."""

from payee_core.utils.error.error_models import ItemFailure

__all__ = ["ItemFailure"]
