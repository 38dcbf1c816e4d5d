"""
Tests for the command line interface.
"""

import logging

import pytest

from conftest import make_response
from databricks_rest import __version__
from databricks_rest.app import _setup_logging, build_parser, main
from databricks_rest.client import DatabricksClient


def _job(job_id, name):
    return {"job_id": job_id, "settings": {"name": name, "existing_cluster_id": "0101-abc"}}


@pytest.fixture
def client(config, fake_session, quiet_logger):
    return DatabricksClient(config, session=fake_session, logger=quiet_logger)


def test_version(capsys):
    main(["--version"])
    assert capsys.readouterr().out.strip() == __version__


def test_jobs_list(client, fake_session, capsys):
    fake_session.queue(make_response(200, {"jobs": [_job(1, "a"), _job(2, "b")]}))

    main(["jobs-list"], client=client)

    out = capsys.readouterr().out
    assert "Found 2 jobs" in out
    assert "2\tb" in out


def test_jobs_resolve_single(client, fake_session, capsys):
    fake_session.queue(make_response(200, {"jobs": [_job(1, "JobA")]}))

    main(["jobs-resolve", "--name", "JobA", "--strict"], client=client)

    assert "Job: 1" in capsys.readouterr().out


def test_jobs_resolve_ambiguous_strict_exits(client, fake_session):
    fake_session.queue(make_response(200, {"jobs": [_job(1, "Dup"), _job(2, "Dup")]}))

    with pytest.raises(SystemExit) as exc_info:
        main(["jobs-resolve", "--name", "Dup", "--strict"], client=client)

    assert "Dup" in str(exc_info.value.code)


def test_jobs_resolve_ambiguous_lenient_warns(client, fake_session, capsys):
    fake_session.queue(make_response(200, {"jobs": [_job(1, "Dup"), _job(2, "Dup")]}))

    main(["jobs-resolve", "--name", "Dup"], client=client)

    out = capsys.readouterr().out
    assert "[warn] 2 jobs" in out
    assert "Job: 1" in out


def test_jobs_resolve_missing_exits_nonzero(client, fake_session):
    fake_session.queue(make_response(200, {"jobs": []}))

    with pytest.raises(SystemExit) as exc_info:
        main(["jobs-resolve", "--name", "nope"], client=client)

    assert exc_info.value.code == 1


def test_jobs_run_with_wait(client, fake_session, capsys):
    fake_session.queue(
        make_response(200, {"run_id": 9}),
        make_response(200, {"run_id": 9, "state": {"life_cycle_state": "TERMINATED", "result_state": "SUCCESS"}}),
    )

    main(["jobs-run", "--job-id", "42", "--param", "env=prod", "--wait", "--poll-interval", "0"], client=client)

    out = capsys.readouterr().out
    assert "Run: 9" in out
    assert "State: TERMINATED" in out
    assert "Result: SUCCESS" in out
    assert fake_session.calls[0]["json"] == {"job_id": 42, "notebook_params": {"env": "prod"}}


def test_jobs_run_bad_param(client):
    with pytest.raises(SystemExit, match="key=value"):
        main(["jobs-run", "--job-id", "42", "--param", "oops"], client=client)


def test_transport_error_becomes_exit(client, fake_session):
    fake_session.queue(make_response(403, {"error_code": "PERMISSION_DENIED", "message": "no access"}))

    with pytest.raises(SystemExit) as exc_info:
        main(["jobs-get", "--job-id", "1"], client=client)

    assert "PERMISSION_DENIED" in str(exc_info.value.code)


def test_runs_list(client, fake_session, capsys):
    fake_session.queue(make_response(200, {
        "runs": [{"run_id": 5, "job_id": 42, "state": {"life_cycle_state": "RUNNING"}}],
        "has_more": True,
    }))

    main(["runs-list", "--job-id", "42", "--active-only"], client=client)

    out = capsys.readouterr().out
    assert "5\tjob=42\tRUNNING\t-" in out
    assert "more runs available" in out
    assert fake_session.calls[0]["params"] == {"job_id": 42, "active_only": "true"}


def test_clusters_list_empty(client, fake_session, capsys):
    fake_session.queue(make_response(200, {}))
    main(["clusters-list"], client=client)
    assert "No clusters found." in capsys.readouterr().out


def test_missing_credentials_exit(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("DATABRICKS_HOST", raising=False)
    monkeypatch.delenv("DATABRICKS_TOKEN", raising=False)

    with pytest.raises(SystemExit, match="DATABRICKS_HOST"):
        main(["jobs-list"])


def test_jobs_run_passes_idempotency_token(client, fake_session, capsys):
    fake_session.queue(make_response(200, {"run_id": 9}))

    main(["jobs-run", "--job-id", "42", "--idempotency-token", "deploy-17"], client=client)

    assert "Run: 9" in capsys.readouterr().out
    assert fake_session.calls[0]["json"] == {"job_id": 42, "idempotency_token": "deploy-17"}


def test_metrics_flag_logs_summary(client, fake_session, log_records):
    fake_session.queue(make_response(200, {"jobs": [_job(1, "a")]}))

    main(["--metrics", "jobs-list"], client=client)

    assert "=== Databricks API Metrics ===" in log_records.messages
    assert "Requests: 1/1 (100.0% success)" in log_records.messages


def test_metrics_summary_after_failure(client, fake_session, log_records):
    fake_session.queue(make_response(403, {"error_code": "PERMISSION_DENIED"}))

    with pytest.raises(SystemExit):
        main(["--metrics", "jobs-get", "--job-id", "1"], client=client)

    assert "Requests: 0/1 (0.0% success)" in log_records.messages
    assert "  HTTPError_403: 1" in log_records.messages


def test_no_summary_without_flag(client, fake_session, log_records):
    fake_session.queue(make_response(200, {"jobs": []}))
    main(["jobs-list"], client=client)
    assert "=== Databricks API Metrics ===" not in log_records.messages


def test_cli_logging_setup():
    args = build_parser().parse_args(["--metrics", "jobs-list"])

    logger = _setup_logging(args)

    assert logger.logger.name == "databricks_rest"
    assert logger.logger.level == logging.INFO
    assert len(logger.logger.handlers) == 1
    assert logger.logger.propagate is False
