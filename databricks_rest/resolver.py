"""
Resolve a job name to a single job.

Job names are not unique in Databricks. JobResolver asks a job listing for
every job carrying a name and applies the caller's ambiguity policy: fail
when several match, or take the first one the listing returned.

The listing order is whatever the API returns (creation order in
practice). "First" is only as stable as that order.
"""

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from .errors import AmbiguousNameError
from .logger import StructuredLogger, get_logger
from .models import Job


class JobLister(Protocol):
    """Anything that can list jobs whose name equals a given name."""

    def get_jobs_by_name(self, name: str) -> Sequence[Job]:
        ...


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving a job name.

    ``job`` is None both when nothing matched and when resolution failed;
    ``error`` tells the two apart.
    """

    name: str
    job: Optional[Job] = None
    matches: int = 0
    error: Optional[AmbiguousNameError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def found(self) -> bool:
        return self.job is not None

    @property
    def ambiguous(self) -> bool:
        return self.matches > 1

    def unwrap(self) -> Optional[Job]:
        """Return the resolved job (None if absent), or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.job


class JobResolver:
    def __init__(self, lister: JobLister, logger: Optional[StructuredLogger] = None):
        self.lister = lister
        self.logger = logger or get_logger()

    def resolve_by_name(self, name: str, fail_on_multiple: bool) -> Resolution:
        """
        Resolve ``name`` to at most one job.

        Args:
            name: Exact, case-sensitive job name
            fail_on_multiple: Report AmbiguousNameError instead of picking
                the first match when several jobs share the name

        Returns:
            Resolution; errors from the listing call are raised, not wrapped

        Raises:
            ValueError: If name is empty
        """
        if not isinstance(name, str) or not name:
            raise ValueError("Job name must be a non-empty string")

        candidates = list(self.lister.get_jobs_by_name(name))
        if not candidates:
            return Resolution(name=name)
        if len(candidates) == 1:
            return Resolution(name=name, job=candidates[0], matches=1)

        job_ids = [job.job_id for job in candidates]
        if fail_on_multiple:
            return Resolution(
                name=name,
                matches=len(candidates),
                error=AmbiguousNameError(name, job_ids),
            )

        self.logger.warning(
            "Multiple jobs share a name; using the first listed",
            name=name, job_ids=job_ids,
        )
        return Resolution(name=name, job=candidates[0], matches=len(candidates))
