from typing import Optional

import requests

from .config import DatabricksConfig
from .logger import StructuredLogger
from .services import ClusterService, JobService
from .transport import DatabricksTransport


class DatabricksClient:
    """Entry point wiring one transport into the service classes.

    Usage:
        client = DatabricksClient.from_env()
        job = client.jobs.get_job_by_name("nightly-etl", fail_on_multiple=True)
    """

    def __init__(
        self,
        config: DatabricksConfig,
        session: Optional[requests.Session] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        self.config = config
        self.transport = DatabricksTransport(config, session=session, logger=logger)
        self.jobs = JobService(self.transport)
        self.clusters = ClusterService(self.transport)

    @classmethod
    def from_env(cls, **kwargs) -> "DatabricksClient":
        return cls(DatabricksConfig.from_env(), **kwargs)
