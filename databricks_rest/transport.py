"""HTTP transport shared by all Databricks services."""

from typing import Any, Dict, Optional

import requests

from . import __version__
from .config import DatabricksConfig
from .errors import TransportError
from .logger import StructuredLogger, get_logger
from .retry import RetryError, exponential_backoff, is_idempotent, should_retry_http_status

USER_AGENT = f"databricks-rest-client/{__version__}"

RETRYABLE_EXCEPTIONS = (
    requests.exceptions.Timeout,
    requests.exceptions.ConnectionError,
    requests.exceptions.HTTPError,
)


class DatabricksTransport:
    """
    Sends authenticated JSON requests to the Databricks REST API.

    Every call returns the decoded JSON object or raises TransportError.
    """

    def __init__(
        self,
        config: DatabricksConfig,
        session: Optional[requests.Session] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        self.config = config
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {config.token}",
            "User-Agent": USER_AGENT,
        })
        self.logger = logger or get_logger()

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.perform("GET", path, params=params)

    def post(
        self,
        path: str,
        body: Optional[Dict[str, Any]] = None,
        retry: Optional[bool] = None,
    ) -> Dict[str, Any]:
        return self.perform("POST", path, body=body, retry=retry)

    def perform(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
        retry: Optional[bool] = None,
    ) -> Dict[str, Any]:
        """Send a request and decode the JSON response.

        Args:
            method: HTTP verb
            path: Resource path below /api/<version>, e.g. '/jobs/get'
            params: Query string parameters; None values are dropped
            body: JSON body
            retry: Resend on transient failures; defaults to whether the
                request is idempotent (see retry.is_idempotent)

        Returns:
            Decoded JSON object ({} for an empty body)

        Raises:
            TransportError: On connection failure, timeout, non-2xx status
                or an undecodable body
        """
        method = method.upper()
        endpoint = f"{method} {path}"
        url = f"{self.config.base_url}{path}"
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        if retry is None:
            retry = is_idempotent(method, path, body)

        self.logger.record_api_call(endpoint)
        self.logger.debug("Databricks request", method=method, path=path, params=params, retry=retry)
        try:
            if retry:
                resp = self._send_with_retry(method, url, params, body)
            else:
                resp = self._send(method, url, params, body)
            resp.raise_for_status()
        except RetryError as e:
            raise self._failure(endpoint, method, path, e.__cause__) from e
        except requests.exceptions.RequestException as e:
            raise self._failure(endpoint, method, path, e) from e

        payload = self._decode(resp, endpoint, method, path)
        self.logger.record_api_success(endpoint)
        return payload

    def _send_with_retry(self, method, url, params, body) -> requests.Response:
        def on_retry(attempt, exc, delay):
            self.logger.warning(
                "Retrying Databricks request",
                url=url, attempt=attempt, delay=delay, error=str(exc),
            )

        send = exponential_backoff(
            max_retries=self.config.max_retries,
            base_delay=self.config.retry_base_delay,
            exceptions=RETRYABLE_EXCEPTIONS,
            on_retry=on_retry,
        )(self._send)
        return send(method, url, params, body)

    def _send(self, method, url, params, body) -> requests.Response:
        resp = self.session.request(
            method, url, params=params, json=body, timeout=self.config.timeout
        )
        # Only retryable statuses raise here; the rest are reported by perform()
        if should_retry_http_status(resp.status_code):
            resp.raise_for_status()
        return resp

    def _failure(self, endpoint: str, method: str, path: str, exc) -> TransportError:
        if isinstance(exc, requests.exceptions.HTTPError):
            response = exc.response
            status = response.status_code if response is not None else None
            error_code, message = _error_details(response)
            self.logger.record_api_failure(endpoint, f"HTTPError_{status}")
            if status == 404:
                self.logger.warning("Databricks resource not found", path=path, status=404)
            else:
                self.logger.error(
                    "Databricks request failed", path=path, status=status, error_code=error_code
                )
            detail = f": {message}" if message else ""
            return TransportError(
                f"{endpoint} failed ({status}{', ' + error_code if error_code else ''}){detail}",
                status_code=status,
                error_code=error_code,
                method=method,
                path=path,
            )
        if isinstance(exc, requests.exceptions.Timeout):
            self.logger.record_api_failure(endpoint, "Timeout")
            self.logger.warning("Databricks request timed out", path=path)
            return TransportError(f"{endpoint} timed out", method=method, path=path)
        self.logger.record_api_failure(endpoint, type(exc).__name__)
        self.logger.error("Databricks request error", path=path, error=str(exc))
        return TransportError(f"{endpoint} request error: {exc}", method=method, path=path)

    def _decode(self, resp: requests.Response, endpoint: str, method: str, path: str) -> Dict[str, Any]:
        if not resp.content or not resp.content.strip():
            return {}
        try:
            payload = resp.json()
        except ValueError as e:
            self.logger.record_api_failure(endpoint, "DecodeError")
            self.logger.error("Databricks response is not JSON", path=path)
            raise TransportError(
                f"{endpoint} returned a non-JSON body",
                status_code=resp.status_code, method=method, path=path,
            ) from e
        if not isinstance(payload, dict):
            self.logger.record_api_failure(endpoint, "DecodeError")
            raise TransportError(
                f"{endpoint} returned {type(payload).__name__}, expected a JSON object",
                status_code=resp.status_code, method=method, path=path,
            )
        return payload


def _error_details(response) -> tuple:
    """Extract Databricks' error_code and message from an error response."""
    if response is None:
        return None, None
    try:
        data = response.json()
    except ValueError:
        text = (response.text or "").strip()
        return None, text[:200] or None
    if not isinstance(data, dict):
        return None, None
    return data.get("error_code"), data.get("message")
