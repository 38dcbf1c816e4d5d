"""Jobs and job-runs API (/jobs/*)."""

import time
from typing import Any, Callable, Dict, List, Optional, Union

from ..errors import RunWaitTimeout, ValidationError
from ..models import Job, JobSettings, Run, RunMetadata, RunNowResult, RunsPage
from ..resolver import JobResolver, Resolution
from ..schema import validate_job_settings_strict
from ..transport import DatabricksTransport

LIST_PAGE_SIZE = 25
DEFAULT_WAIT_TIMEOUT = 600.0
DEFAULT_POLL_INTERVAL = 5.0

SettingsLike = Union[JobSettings, Dict[str, Any]]


def _settings_payload(settings: SettingsLike) -> Dict[str, Any]:
    data = settings.to_dict() if isinstance(settings, JobSettings) else dict(settings)
    is_valid, errors = validate_job_settings_strict(data)
    if not is_valid:
        raise ValidationError(errors)
    return data


class JobService:
    """
    Typed wrapper over the jobs endpoints.

    Every method raises TransportError when the underlying call fails.
    """

    def __init__(self, transport: DatabricksTransport):
        self.transport = transport
        self.logger = transport.logger
        self.resolver = JobResolver(self, logger=self.logger)

    # Jobs

    def create_job(self, settings: SettingsLike) -> int:
        """Create a job and return its id.

        The request is never retried: a resent create makes a second job
        with the same name.
        """
        payload = _settings_payload(settings)
        data = self.transport.post("/jobs/create", payload)
        job_id = data["job_id"]
        self.logger.info("Created job", job_id=job_id, name=payload.get("name"))
        return job_id

    def delete_job(self, job_id: int) -> None:
        self.transport.post("/jobs/delete", {"job_id": job_id})
        self.logger.info("Deleted job", job_id=job_id)

    def get_job(self, job_id: int) -> Job:
        return Job.from_dict(self.transport.get("/jobs/get", {"job_id": job_id}))

    def list_all_jobs(self) -> List[Job]:
        """List every job in the workspace, following pagination if present."""
        jobs: List[Job] = []
        params: Optional[Dict[str, Any]] = None
        while True:
            data = self.transport.get("/jobs/list", params)
            page = [Job.from_dict(j) for j in data.get("jobs") or []]
            jobs.extend(page)
            if not data.get("has_more") or not page:
                return jobs
            if data.get("next_page_token"):
                params = {"page_token": data["next_page_token"], "limit": LIST_PAGE_SIZE}
            else:
                params = {"offset": len(jobs), "limit": LIST_PAGE_SIZE}

    def get_jobs_by_name(self, name: str) -> List[Job]:
        """All jobs named exactly ``name``, in listing order."""
        return [job for job in self.list_all_jobs() if job.name == name]

    def resolve_job(self, name: str, fail_on_multiple: bool) -> Resolution:
        return self.resolver.resolve_by_name(name, fail_on_multiple)

    def get_job_by_name(self, name: str, fail_on_multiple: bool = False) -> Optional[Job]:
        """
        Return the job called ``name``, or None if there is none.

        Raises:
            AmbiguousNameError: If fail_on_multiple and several jobs match
        """
        return self.resolve_job(name, fail_on_multiple).unwrap()

    def reset(self, job_id: int, settings: SettingsLike) -> None:
        """Overwrite all settings of an existing job."""
        payload = _settings_payload(settings)
        self.transport.post("/jobs/reset", {"job_id": job_id, "new_settings": payload})
        self.logger.info("Reset job", job_id=job_id)

    def upsert_job(self, settings: SettingsLike, fail_on_multiple: bool = True) -> int:
        """
        Reset the job with the same name, or create it if none exists.

        Returns:
            Id of the reset or created job
        """
        payload = _settings_payload(settings)
        existing = self.get_job_by_name(payload["name"], fail_on_multiple)
        if existing is None:
            return self.create_job(payload)
        self.reset(existing.job_id, payload)
        return existing.job_id

    # Runs

    def run_job_now(
        self,
        job_id: int,
        notebook_params: Optional[Dict[str, str]] = None,
        jar_params: Optional[List[str]] = None,
        python_params: Optional[List[str]] = None,
        spark_submit_params: Optional[List[str]] = None,
        idempotency_token: Optional[str] = None,
    ) -> RunNowResult:
        """
        Trigger a run of a job.

        Without an idempotency_token the request is sent once and never
        retried, so a lost response cannot start a second run. With a token
        Databricks returns the existing run for a repeated request, and the
        call is retried on transient failures.
        """
        body: Dict[str, Any] = {"job_id": job_id}
        if notebook_params is not None:
            body["notebook_params"] = notebook_params
        if jar_params is not None:
            body["jar_params"] = jar_params
        if python_params is not None:
            body["python_params"] = python_params
        if spark_submit_params is not None:
            body["spark_submit_params"] = spark_submit_params
        if idempotency_token is not None:
            body["idempotency_token"] = idempotency_token
        result = RunNowResult.from_dict(self.transport.post("/jobs/run-now", body))
        self.logger.info("Triggered job run", job_id=job_id, run_id=result.run_id)
        return result

    def list_runs(
        self,
        job_id: Optional[int] = None,
        active_only: Optional[bool] = None,
        offset: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> RunsPage:
        params = {
            "job_id": job_id,
            # the API expects lowercase booleans in the query string
            "active_only": None if active_only is None else str(active_only).lower(),
            "offset": offset,
            "limit": limit,
        }
        return RunsPage.from_dict(self.transport.get("/jobs/runs/list", params))

    def get_run(self, run_id: int) -> Run:
        return Run.from_dict(self.transport.get("/jobs/runs/get", {"run_id": run_id}))

    def get_run_output(self, run_id: int) -> RunMetadata:
        return RunMetadata.from_dict(self.transport.get("/jobs/runs/get-output", {"run_id": run_id}))

    def cancel_run(self, run_id: int) -> None:
        self.transport.post("/jobs/runs/cancel", {"run_id": run_id})
        self.logger.info("Cancelled run", run_id=run_id)

    def delete_run(self, run_id: int) -> None:
        self.transport.post("/jobs/runs/delete", {"run_id": run_id})

    def wait_for_run(
        self,
        run_id: int,
        timeout: float = DEFAULT_WAIT_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        until: Optional[Callable[[Run], bool]] = None,
    ) -> Run:
        """
        Poll a run until it reaches a final life-cycle state.

        Args:
            run_id: Run to watch
            timeout: Seconds to wait before giving up
            poll_interval: Seconds between polls
            until: Custom stop condition; defaults to a final state

        Raises:
            RunWaitTimeout: If the condition is not met in time
        """
        done = until or (lambda r: r.state.is_final)
        deadline = time.monotonic() + timeout
        while True:
            run = self.get_run(run_id)
            if done(run):
                self.logger.info(
                    "Run finished",
                    run_id=run_id,
                    state=run.state.life_cycle_state,
                    result=run.state.result_state,
                )
                return run
            if time.monotonic() >= deadline:
                state = run.state.life_cycle_state
                raise RunWaitTimeout(run_id, timeout, getattr(state, "value", state))
            self.logger.debug("Waiting for run", run_id=run_id, state=run.state.life_cycle_state)
            time.sleep(poll_interval)
