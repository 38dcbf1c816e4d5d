"""Typed client for the Databricks jobs, runs and clusters REST APIs."""

__version__ = "0.1.0"

from .client import DatabricksClient
from .config import DatabricksConfig
from .errors import (
    AmbiguousNameError,
    DatabricksRestError,
    RunWaitTimeout,
    TransportError,
    ValidationError,
)
from .models import Job, JobSettings, NotebookTask
from .resolver import JobResolver, Resolution

__all__ = [
    "DatabricksClient",
    "DatabricksConfig",
    "AmbiguousNameError",
    "DatabricksRestError",
    "RunWaitTimeout",
    "TransportError",
    "ValidationError",
    "Job",
    "JobSettings",
    "NotebookTask",
    "JobResolver",
    "Resolution",
]
