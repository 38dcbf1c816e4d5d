from typing import Any, Dict, List, Tuple

CLUSTER_FIELDS = ["existing_cluster_id", "new_cluster"]
TASK_FIELDS = [
    "notebook_task",
    "spark_jar_task",
    "spark_python_task",
    "spark_submit_task",
]
# field -> minimum allowed value (max_retries = -1 means retry forever)
INT_FIELDS = {
    "max_retries": -1,
    "timeout_seconds": 0,
    "min_retry_interval_millis": 0,
    "max_concurrent_runs": 0,
}


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def validate_job_settings(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    Checks only what the jobs API would otherwise reject after a round trip.
    """
    errors: List[str] = []

    if "name" not in data or data["name"] is None:
        errors.append("Missing required field: name")
    elif not _is_non_empty_str(data["name"]):
        errors.append("Field 'name' must be a non-empty string")

    clusters = [f for f in CLUSTER_FIELDS if data.get(f) is not None]
    if not clusters:
        errors.append("One of existing_cluster_id or new_cluster is required")
    elif len(clusters) > 1:
        errors.append("Only one of existing_cluster_id or new_cluster may be set")

    tasks = [f for f in TASK_FIELDS if data.get(f) is not None]
    if not tasks:
        errors.append(f"One task is required ({', '.join(TASK_FIELDS)})")
    elif len(tasks) > 1:
        errors.append(f"Only one task may be set, got: {', '.join(tasks)}")

    notebook = data.get("notebook_task")
    if isinstance(notebook, dict):
        path = notebook.get("notebook_path")
        if not _is_non_empty_str(path):
            errors.append("Field 'notebook_task.notebook_path' is required")
        elif not path.startswith("/"):
            errors.append("Field 'notebook_task.notebook_path' must be an absolute workspace path")

    for f, minimum in INT_FIELDS.items():
        if data.get(f) is None:
            continue
        v = data[f]
        if isinstance(v, bool) or not isinstance(v, int):
            errors.append(f"Field '{f}' must be an integer")
        elif v < minimum:
            errors.append(f"Field '{f}' must be >= {minimum}")

    return errors


def validate_job_settings_strict(data: Dict[str, Any]) -> Tuple[bool, List[str]]:
    """Like validate_job_settings, but also rejects a blank cluster id."""
    errors = validate_job_settings(data)
    cluster_id = data.get("existing_cluster_id")
    if cluster_id is not None and not _is_non_empty_str(cluster_id):
        errors.append("Field 'existing_cluster_id' must be a non-empty string")
    return (not errors, errors)
