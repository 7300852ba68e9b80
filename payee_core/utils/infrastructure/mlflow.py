"""Central MLflow setup for DSPy tracing."""

import logging
from contextlib import contextmanager
from typing import Optional

import mlflow

from payee_core.config import get_config

logger = logging.getLogger(__name__)

# Track if autolog has been initialized
_autolog_initialized = False


def setup_mlflow_tracing(experiment_name: Optional[str] = None):
    """
    Set up MLflow tracing for DSPy.

    Enables DSPy autologging so every AI classification call is captured as
    a trace. Does nothing when MLflow is disabled in configuration.

    Args:
        experiment_name: Name of the MLflow experiment. If None, uses config default.
    """
    global _autolog_initialized

    config = get_config()
    if not config.mlflow.enabled:
        return

    if config.mlflow.tracking_uri:
        mlflow.set_tracking_uri(config.mlflow.tracking_uri)

    mlflow.set_experiment(experiment_name or config.mlflow.experiment_name)

    if not _autolog_initialized:
        mlflow.dspy.autolog()
        _autolog_initialized = True
        logger.info(f"MLflow DSPy tracing enabled ({config.mlflow.tracking_uri})")


@contextmanager
def mlflow_run(experiment_name: Optional[str] = None, run_name: Optional[str] = None):
    """
    Group the traces of one batch under a single MLflow run.

    Args:
        experiment_name: Name of the MLflow experiment. If None, uses config default.
        run_name: Name of the MLflow run. If None, uses config default or auto-generated.

    Example:
        >>> with mlflow_run(run_name="vendor_file_2024_06"):
        ...     pipeline.process_batch(names)
    """
    config = get_config()

    if not config.mlflow.enabled:
        yield
        return

    setup_mlflow_tracing(experiment_name=experiment_name)

    with mlflow.start_run(run_name=run_name or config.mlflow.run_name):
        yield


def is_mlflow_enabled() -> bool:
    """Check if MLflow tracing is enabled."""
    return get_config().mlflow.enabled
