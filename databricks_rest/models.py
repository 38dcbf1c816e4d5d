"""
Data-transfer objects for the Databricks jobs, runs and clusters APIs.

Each DTO maps the API's snake_case JSON through from_dict()/to_dict().
Keys a DTO does not model are kept in ``extra`` and written back
unchanged, so settings fetched from the server can be sent back as-is.
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Optional, Union


def _split_known(cls, data: Dict[str, Any], nested=()) -> tuple:
    names = {f.name for f in fields(cls)} - {"extra"}
    known = {k: v for k, v in data.items() if k in names and k not in nested}
    extra = {k: v for k, v in data.items() if k not in names}
    return known, extra


def _prune(data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop unset fields so they are not sent as explicit nulls."""
    return {k: v for k, v in data.items() if v is not None}


def _enum_or_raw(enum_cls, value):
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        return value


def _enum_value(value):
    return value.value if isinstance(value, Enum) else value


@dataclass
class NotebookTask:
    notebook_path: str
    base_parameters: Optional[Dict[str, str]] = None
    revision_timestamp: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NotebookTask":
        known, extra = _split_known(cls, data)
        return cls(extra=extra, **known)

    def to_dict(self) -> Dict[str, Any]:
        return _prune({
            "notebook_path": self.notebook_path,
            "base_parameters": self.base_parameters,
            "revision_timestamp": self.revision_timestamp,
            **self.extra,
        })


@dataclass
class JobSettings:
    """Settings of a job, as sent to /jobs/create and /jobs/reset."""

    name: Optional[str] = None
    existing_cluster_id: Optional[str] = None
    new_cluster: Optional[Dict[str, Any]] = None
    notebook_task: Optional[NotebookTask] = None
    spark_jar_task: Optional[Dict[str, Any]] = None
    spark_python_task: Optional[Dict[str, Any]] = None
    libraries: Optional[List[Dict[str, Any]]] = None
    timeout_seconds: Optional[int] = None
    max_retries: Optional[int] = None
    min_retry_interval_millis: Optional[int] = None
    retry_on_timeout: Optional[bool] = None
    schedule: Optional[Dict[str, Any]] = None
    email_notifications: Optional[Dict[str, Any]] = None
    max_concurrent_runs: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JobSettings":
        known, extra = _split_known(cls, data, nested=("notebook_task",))
        task = data.get("notebook_task")
        return cls(
            notebook_task=NotebookTask.from_dict(task) if task is not None else None,
            extra=extra,
            **known,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "extra"}
        if self.notebook_task is not None:
            data["notebook_task"] = self.notebook_task.to_dict()
        data.update(self.extra)
        return _prune(data)


@dataclass
class Job:
    job_id: int
    settings: JobSettings = field(default_factory=JobSettings)
    creator_user_name: Optional[str] = None
    created_time: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> Optional[str]:
        return self.settings.name

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Job":
        known, extra = _split_known(cls, data, nested=("settings",))
        return cls(
            settings=JobSettings.from_dict(data.get("settings") or {}),
            extra=extra,
            **known,
        )

    def to_dict(self) -> Dict[str, Any]:
        return _prune({
            "job_id": self.job_id,
            "settings": self.settings.to_dict(),
            "creator_user_name": self.creator_user_name,
            "created_time": self.created_time,
            **self.extra,
        })


class RunLifeCycleState(str, Enum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    TERMINATING = "TERMINATING"
    TERMINATED = "TERMINATED"
    SKIPPED = "SKIPPED"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    @property
    def is_final(self) -> bool:
        return self in (
            RunLifeCycleState.TERMINATED,
            RunLifeCycleState.SKIPPED,
            RunLifeCycleState.INTERNAL_ERROR,
        )


class RunResultState(str, Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    TIMEDOUT = "TIMEDOUT"
    CANCELED = "CANCELED"


@dataclass
class RunState:
    life_cycle_state: Union[RunLifeCycleState, str, None] = None
    result_state: Union[RunResultState, str, None] = None
    state_message: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RunState":
        return cls(
            life_cycle_state=_enum_or_raw(RunLifeCycleState, data.get("life_cycle_state")),
            result_state=_enum_or_raw(RunResultState, data.get("result_state")),
            state_message=data.get("state_message"),
        )

    @property
    def is_final(self) -> bool:
        return isinstance(self.life_cycle_state, RunLifeCycleState) and self.life_cycle_state.is_final

    def to_dict(self) -> Dict[str, Any]:
        return _prune({
            "life_cycle_state": _enum_value(self.life_cycle_state),
            "result_state": _enum_value(self.result_state),
            "state_message": self.state_message,
        })


@dataclass
class Run:
    run_id: int
    job_id: Optional[int] = None
    number_in_job: Optional[int] = None
    state: RunState = field(default_factory=RunState)
    run_page_url: Optional[str] = None
    start_time: Optional[int] = None
    setup_duration: Optional[int] = None
    execution_duration: Optional[int] = None
    cleanup_duration: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Run":
        known, extra = _split_known(cls, data, nested=("state",))
        return cls(
            state=RunState.from_dict(data.get("state") or {}),
            extra=extra,
            **known,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "extra"}
        data["state"] = self.state.to_dict()
        data.update(self.extra)
        return _prune(data)


@dataclass
class RunsPage:
    runs: List[Run] = field(default_factory=list)
    has_more: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RunsPage":
        return cls(
            runs=[Run.from_dict(r) for r in data.get("runs") or []],
            has_more=bool(data.get("has_more", False)),
        )


@dataclass
class RunNowResult:
    run_id: int
    number_in_job: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RunNowResult":
        return cls(run_id=data["run_id"], number_in_job=data.get("number_in_job"))


@dataclass
class NotebookOutput:
    result: Optional[str] = None
    truncated: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NotebookOutput":
        return cls(result=data.get("result"), truncated=bool(data.get("truncated", False)))


@dataclass
class RunMetadata:
    """A run together with its notebook output (/jobs/runs/get-output)."""

    run: Run
    notebook_output: Optional[NotebookOutput] = None
    error: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RunMetadata":
        output = data.get("notebook_output")
        return cls(
            run=Run.from_dict(data.get("metadata") or {}),
            notebook_output=NotebookOutput.from_dict(output) if output is not None else None,
            error=data.get("error"),
        )


class ClusterState(str, Enum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    RESTARTING = "RESTARTING"
    RESIZING = "RESIZING"
    TERMINATING = "TERMINATING"
    TERMINATED = "TERMINATED"
    ERROR = "ERROR"
    UNKNOWN = "UNKNOWN"


@dataclass
class Cluster:
    cluster_id: str
    cluster_name: Optional[str] = None
    state: Union[ClusterState, str, None] = None
    spark_version: Optional[str] = None
    node_type_id: Optional[str] = None
    num_workers: Optional[int] = None
    state_message: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Cluster":
        known, extra = _split_known(cls, data, nested=("state",))
        return cls(
            state=_enum_or_raw(ClusterState, data.get("state")),
            extra=extra,
            **known,
        )
