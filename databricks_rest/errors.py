"""Exceptions raised by the Databricks REST client."""

from typing import List, Optional, Sequence


class DatabricksRestError(Exception):
    """Base class for errors raised by this library."""
    pass


class TransportError(DatabricksRestError):
    """The HTTP call to Databricks failed or returned an unusable body."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        method: Optional[str] = None,
        path: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code
        self.method = method
        self.path = path


class AmbiguousNameError(DatabricksRestError):
    """Several jobs share a name and the caller asked for strict resolution."""

    def __init__(self, name: str, job_ids: Sequence[int]):
        self.name = name
        self.job_ids: List[int] = list(job_ids)
        super().__init__(
            f"{len(self.job_ids)} jobs are named '{name}' (ids: "
            f"{', '.join(str(i) for i in self.job_ids)}). "
            "Delete the duplicates or look the job up by id."
        )


class ValidationError(DatabricksRestError, ValueError):
    """Job settings failed local validation and were not sent."""

    def __init__(self, errors: Sequence[str]):
        self.errors: List[str] = list(errors)
        super().__init__("Invalid job settings: " + "; ".join(self.errors))


class RunWaitTimeout(DatabricksRestError):
    """A run did not reach the awaited state in time."""

    def __init__(self, run_id: int, timeout: float, last_state: Optional[str] = None):
        self.run_id = run_id
        self.timeout = timeout
        self.last_state = last_state
        super().__init__(
            f"Run {run_id} did not finish within {timeout:.0f}s (last state: {last_state})"
        )
