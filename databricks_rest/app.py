import argparse
import json
from typing import Dict, List, Optional

from . import __version__
from .client import DatabricksClient
from .env import load_env
from .errors import DatabricksRestError
from .logger import get_logger, reset_logger

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _parse_params(pairs: Optional[List[str]]) -> Optional[Dict[str, str]]:
    if not pairs:
        return None
    params = {}
    for pair in pairs:
        if "=" not in pair:
            raise SystemExit(f"Invalid --param '{pair}', expected key=value")
        k, v = pair.split("=", 1)
        params[k.strip()] = v
    return params


def _state_label(value) -> str:
    if value is None:
        return "-"
    return getattr(value, "value", value)


def cmd_jobs_list(args: argparse.Namespace, client: DatabricksClient) -> None:
    jobs = client.jobs.list_all_jobs()
    if not jobs:
        print("No jobs found.")
        return
    print(f"Found {len(jobs)} jobs:\n")
    for job in jobs:
        print(f"{job.job_id}\t{job.name}")


def cmd_jobs_get(args: argparse.Namespace, client: DatabricksClient) -> None:
    job = client.jobs.get_job(args.job_id)
    print(json.dumps(job.to_dict(), indent=2))


def cmd_jobs_resolve(args: argparse.Namespace, client: DatabricksClient) -> None:
    resolution = client.jobs.resolve_job(args.name, fail_on_multiple=args.strict)
    if not resolution.ok:
        raise SystemExit(str(resolution.error))
    if not resolution.found:
        print(f"No job named '{args.name}'")
        raise SystemExit(1)
    if resolution.ambiguous:
        print(f"[warn] {resolution.matches} jobs share this name; using the first")
    print(f"Job: {resolution.job.job_id}")


def cmd_jobs_run(args: argparse.Namespace, client: DatabricksClient) -> None:
    result = client.jobs.run_job_now(
        args.job_id,
        notebook_params=_parse_params(args.param),
        idempotency_token=args.idempotency_token,
    )
    print(f"Run: {result.run_id}")
    if not args.wait:
        return
    run = client.jobs.wait_for_run(result.run_id, timeout=args.timeout, poll_interval=args.poll_interval)
    print(f"State: {_state_label(run.state.life_cycle_state)}")
    print(f"Result: {_state_label(run.state.result_state)}")


def cmd_runs_list(args: argparse.Namespace, client: DatabricksClient) -> None:
    page = client.jobs.list_runs(
        job_id=args.job_id,
        active_only=True if args.active_only else None,
        limit=args.limit,
    )
    if not page.runs:
        print("No runs found.")
        return
    for run in page.runs:
        print(
            f"{run.run_id}\tjob={run.job_id}\t"
            f"{_state_label(run.state.life_cycle_state)}\t{_state_label(run.state.result_state)}"
        )
    if page.has_more:
        print("(more runs available)")


def cmd_runs_get(args: argparse.Namespace, client: DatabricksClient) -> None:
    run = client.jobs.get_run(args.run_id)
    print(json.dumps(run.to_dict(), indent=2))


def cmd_clusters_list(args: argparse.Namespace, client: DatabricksClient) -> None:
    clusters = client.clusters.list_clusters()
    if not clusters:
        print("No clusters found.")
        return
    for cluster in clusters:
        print(f"{cluster.cluster_id}\t{cluster.cluster_name}\t{_state_label(cluster.state)}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="databricks-rest", description="Databricks jobs/runs/clusters REST client")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--log-level", choices=LOG_LEVELS, default="WARNING", help="Console log level (default WARNING)")
    parser.add_argument("--metrics", action="store_true", help="Log a summary of API calls when done")

    subparsers = parser.add_subparsers(dest="command")
    jl = subparsers.add_parser("jobs-list", help="List all jobs")
    jl.set_defaults(func=cmd_jobs_list)

    jg = subparsers.add_parser("jobs-get", help="Show a job's settings as JSON")
    jg.add_argument("--job-id", type=int, required=True, help="Job id")
    jg.set_defaults(func=cmd_jobs_get)

    jr = subparsers.add_parser("jobs-resolve", help="Resolve a job name to its id")
    jr.add_argument("--name", required=True, help="Exact job name (case-sensitive)")
    jr.add_argument("--strict", action="store_true", help="Fail if several jobs share the name")
    jr.set_defaults(func=cmd_jobs_resolve)

    run = subparsers.add_parser("jobs-run", help="Trigger a job run now")
    run.add_argument("--job-id", type=int, required=True, help="Job id")
    run.add_argument("--param", action="append", help="Notebook parameter key=value (repeatable)")
    run.add_argument("--wait", action="store_true", help="Wait for the run to finish")
    run.add_argument("--timeout", type=float, default=600.0, help="Seconds to wait with --wait (default 600)")
    run.add_argument("--poll-interval", type=float, default=5.0, help="Seconds between polls (default 5)")
    run.add_argument("--idempotency-token", help="Token that makes a repeated trigger return the same run")
    run.set_defaults(func=cmd_jobs_run)

    rl = subparsers.add_parser("runs-list", help="List recent runs")
    rl.add_argument("--job-id", type=int, help="Only runs of this job")
    rl.add_argument("--active-only", action="store_true", help="Only active runs")
    rl.add_argument("--limit", type=int, help="Maximum number of runs")
    rl.set_defaults(func=cmd_runs_list)

    rg = subparsers.add_parser("runs-get", help="Show a run as JSON")
    rg.add_argument("--run-id", type=int, required=True, help="Run id")
    rg.set_defaults(func=cmd_runs_get)

    cl = subparsers.add_parser("clusters-list", help="List clusters")
    cl.set_defaults(func=cmd_clusters_list)
    return parser


def _setup_logging(args: argparse.Namespace):
    level = args.log_level
    if args.metrics and level in ("WARNING", "ERROR"):
        # the summary is logged at INFO
        level = "INFO"
    reset_logger()
    return get_logger(level=level, enable_console=True)


def main(argv: Optional[List[str]] = None, client: Optional[DatabricksClient] = None):
    # Load .env if present (DATABRICKS_HOST, DATABRICKS_TOKEN, etc.)
    load_env()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if not hasattr(args, "func"):
        parser.print_help()
        return

    try:
        if client is None:
            client = DatabricksClient.from_env(logger=_setup_logging(args))
        args.func(args, client)
    except (DatabricksRestError, ValueError) as e:
        raise SystemExit(str(e))
    finally:
        if args.metrics and client is not None:
            client.transport.logger.log_metrics_summary()


if __name__ == "__main__":
    main()
