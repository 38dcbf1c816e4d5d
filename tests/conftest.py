"""
Pytest configuration and shared fixtures.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import pytest
import requests

from databricks_rest.config import DatabricksConfig
from databricks_rest.logger import StructuredLogger, reset_logger
from databricks_rest.models import Job, JobSettings


def make_response(status: int = 200, payload: Any = None, text: Optional[str] = None, url: str = "") -> requests.Response:
    """Build a real requests.Response without touching the network."""
    resp = requests.Response()
    resp.status_code = status
    resp.url = url
    if text is not None:
        resp._content = text.encode("utf-8")
    elif payload is not None:
        resp._content = json.dumps(payload).encode("utf-8")
    else:
        resp._content = b""
    resp.encoding = "utf-8"
    return resp


class FakeSession:
    """Stands in for requests.Session; replays queued responses or exceptions."""

    def __init__(self, responses: Optional[List[Any]] = None):
        self.headers: Dict[str, str] = {}
        self.responses = list(responses or [])
        self.calls: List[Dict[str, Any]] = []

    def queue(self, *items):
        self.responses.extend(items)

    def request(self, method, url, params=None, json=None, timeout=None):
        self.calls.append({
            "method": method,
            "url": url,
            "params": params,
            "json": json,
            "timeout": timeout,
        })
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        item.url = url
        return item


class FakeTransport:
    """Returns canned payloads per (method, path); the last payload repeats."""

    def __init__(self, logger: StructuredLogger):
        self.logger = logger
        self.payloads: Dict[tuple, List[Dict[str, Any]]] = {}
        self.calls: List[tuple] = []

    def on(self, method: str, path: str, *payloads: Dict[str, Any]):
        self.payloads[(method, path)] = list(payloads)
        return self

    def _next(self, method, path):
        queue = self.payloads.get((method, path))
        if not queue:
            raise AssertionError(f"Unexpected call: {method} {path}")
        return queue.pop(0) if len(queue) > 1 else queue[0]

    def get(self, path, params=None):
        self.calls.append(("GET", path, params))
        return self._next("GET", path)

    def post(self, path, body=None):
        self.calls.append(("POST", path, body))
        return self._next("POST", path)


class StaticLister:
    """In-memory job listing that counts how often it was queried."""

    def __init__(self, jobs: List[Job]):
        self.jobs = jobs
        self.queries: List[str] = []

    def get_jobs_by_name(self, name: str) -> List[Job]:
        self.queries.append(name)
        return [job for job in self.jobs if job.name == name]


def make_job(job_id: int, name: str) -> Job:
    return Job(job_id=job_id, settings=JobSettings(name=name, existing_cluster_id="0101-abc"))


class RecordCollector(logging.Handler):
    """Keeps the formatted message of every record it sees."""

    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.messages: List[str] = []

    def emit(self, record):
        self.messages.append(record.getMessage())


@pytest.fixture(autouse=True)
def _reset_shared_logger():
    """The CLI installs a shared console logger; drop it after each test."""
    yield
    reset_logger()


@pytest.fixture
def quiet_logger() -> StructuredLogger:
    """Logger with no handlers, for asserting on metrics."""
    return StructuredLogger(name="databricks_rest.test", level="DEBUG", enable_console=False)


@pytest.fixture
def config() -> DatabricksConfig:
    return DatabricksConfig(
        host="https://example.cloud.databricks.com",
        token="dapi-test-token",
        max_retries=2,
        retry_base_delay=0.0,
        timeout=5.0,
    )


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def fake_transport(quiet_logger) -> FakeTransport:
    return FakeTransport(quiet_logger)


@pytest.fixture
def log_records(quiet_logger) -> RecordCollector:
    """Collects what is logged through quiet_logger."""
    collector = RecordCollector()
    quiet_logger.logger.addHandler(collector)
    yield collector
    quiet_logger.logger.removeHandler(collector)


@pytest.fixture
def notebook_job_settings() -> Dict[str, Any]:
    """Valid settings for a notebook job on an existing cluster."""
    return {
        "name": "nightly-etl",
        "existing_cluster_id": "0101-abc",
        "notebook_task": {
            "notebook_path": "/Users/etl@example.com/nightly",
            "base_parameters": {"env": "prod"},
        },
        "max_retries": 1,
        "timeout_seconds": 3600,
    }


@pytest.fixture
def job_payload(notebook_job_settings) -> Dict[str, Any]:
    """A /jobs/get response body."""
    return {
        "job_id": 42,
        "creator_user_name": "etl@example.com",
        "created_time": 1533000000000,
        "settings": notebook_job_settings,
    }


@pytest.fixture
def run_payload() -> Dict[str, Any]:
    """A /jobs/runs/get response body for a finished run."""
    return {
        "job_id": 42,
        "run_id": 7001,
        "number_in_job": 3,
        "state": {
            "life_cycle_state": "TERMINATED",
            "result_state": "SUCCESS",
            "state_message": "",
        },
        "run_page_url": "https://example.cloud.databricks.com/#job/42/run/3",
        "start_time": 1533000100000,
        "setup_duration": 1000,
        "execution_duration": 20000,
        "cleanup_duration": 500,
        "creator_user_name": "etl@example.com",
    }
