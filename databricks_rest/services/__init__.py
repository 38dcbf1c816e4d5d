from .clusters import ClusterService
from .jobs import JobService

__all__ = ["ClusterService", "JobService"]
