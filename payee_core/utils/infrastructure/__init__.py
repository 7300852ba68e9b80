"""Infrastructure utilities."""

from payee_core.utils.infrastructure.mlflow import (
    is_mlflow_enabled,
    mlflow_run,
    setup_mlflow_tracing,
)

__all__ = [
    "is_mlflow_enabled",
    "mlflow_run",
    "setup_mlflow_tracing",
]
