"""
Client configuration.

Connection settings come from DATABRICKS_* environment variables
(optionally loaded from a .env file by the CLI).
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_API_VERSION = "2.0"
DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_BASE_DELAY = 1.0


def normalize_host(host: str) -> str:
    host = host.strip().rstrip("/")
    if not host:
        return host
    if "://" not in host:
        host = f"https://{host}"
    return host


@dataclass
class DatabricksConfig:
    """Connection settings for a single Databricks workspace."""

    host: str
    token: str
    api_version: str = DEFAULT_API_VERSION
    timeout: float = DEFAULT_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_base_delay: float = DEFAULT_RETRY_BASE_DELAY

    def __post_init__(self):
        self.host = normalize_host(self.host or "")
        if not self.host:
            raise ValueError("Databricks host is required (set DATABRICKS_HOST)")
        if not self.token:
            raise ValueError("Databricks token is required (set DATABRICKS_TOKEN)")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")

    @property
    def base_url(self) -> str:
        return f"{self.host}/api/{self.api_version}"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DatabricksConfig":
        """
        Build a config from environment variables.

        Args:
            environ: Mapping to read instead of os.environ

        Raises:
            ValueError: If host or token is missing, or a number is malformed
        """
        env = os.environ if environ is None else environ
        try:
            timeout = float(env.get("DATABRICKS_TIMEOUT", DEFAULT_TIMEOUT))
            max_retries = int(env.get("DATABRICKS_MAX_RETRIES", DEFAULT_MAX_RETRIES))
        except ValueError as e:
            raise ValueError(f"Invalid numeric DATABRICKS_* setting: {e}") from e
        return cls(
            host=env.get("DATABRICKS_HOST", ""),
            token=env.get("DATABRICKS_TOKEN", ""),
            api_version=env.get("DATABRICKS_API_VERSION", DEFAULT_API_VERSION),
            timeout=timeout,
            max_retries=max_retries,
        )
