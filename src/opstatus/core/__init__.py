"""Core primitives shared by the status engine.

    errors.py      Structured error hierarchy (NotFoundError, TransientStoreError, ...)
    logging.py     structlog configuration and loggers
    settings.py    StatusSettings (pydantic-settings)
    protocols.py   ObjectStore and WorkloadInspector contracts
"""

from opstatus.core.errors import (
    ConfigError,
    NotFoundError,
    OperatorStatusError,
    StoreError,
    TransientStoreError,
    WorkloadFetchError,
)
from opstatus.core.protocols import ObjectStore, WorkloadInspector

__all__ = [
    "ConfigError",
    "NotFoundError",
    "OperatorStatusError",
    "StoreError",
    "TransientStoreError",
    "WorkloadFetchError",
    "ObjectStore",
    "WorkloadInspector",
]
