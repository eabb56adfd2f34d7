"""HTTP request task."""

import httpx
from typing import Any, Dict, Optional
import json
import logging

from config import settings
from scheduler import Task, TaskFailed


class HttpTask(Task):
    """Sends an HTTP request, e.g. a heartbeat probe against a health endpoint.

    The request fails the task when it times out, cannot connect, or returns
    a status other than expected_status (any 2xx when unset).
    """

    def __init__(self, url: str, method: str = "GET",
                 headers: Optional[Dict[str, str]] = None,
                 body: Any = None,
                 params: Optional[Dict[str, Any]] = None,
                 timeout: Optional[float] = None,
                 expected_status: Optional[int] = None,
                 client: Optional[httpx.Client] = None,
                 name: Optional[str] = None,
                 logger: Optional[logging.Logger] = None):
        super().__init__(name=name, logger=logger)
        if not url:
            raise ValueError("URL is required for HTTP task")
        self.url = url
        self.method = method.upper()
        self.headers = dict(headers or {})
        self.body = body
        self.params = params
        self.timeout = timeout if timeout is not None else settings.http_timeout
        self.expected_status = expected_status
        self.client = client
        self.last_response: Optional[Dict[str, Any]] = None

    def _request_args(self) -> Dict[str, Any]:
        request_args = {
            "method": self.method,
            "url": self.url,
            "headers": self.headers,
            "timeout": self.timeout
        }

        if self.params:
            request_args["params"] = self.params

        if self.body is not None:
            if isinstance(self.body, (dict, list)):
                request_args["json"] = self.body
            else:
                request_args["content"] = str(self.body)

        return request_args

    def _send(self) -> httpx.Response:
        if self.client is not None:
            return self.client.request(**self._request_args())
        with httpx.Client() as client:
            return client.request(**self._request_args())

    def handle(self) -> None:
        self.log("info", f"HTTP {self.method} {self.url}")

        try:
            response = self._send()
        except httpx.TimeoutException as e:
            raise TaskFailed(f"Request timeout after {self.timeout} seconds") from e
        except httpx.HTTPError as e:
            raise TaskFailed(f"HTTP request failed: {e}") from e

        body: Any = response.text
        if "application/json" in response.headers.get("content-type", ""):
            try:
                body = response.json()
            except json.JSONDecodeError:
                pass

        self.last_response = {
            "status_code": response.status_code,
            "body": body
        }

        if self.expected_status is not None:
            success = response.status_code == self.expected_status
        else:
            success = 200 <= response.status_code < 300

        if not success:
            raise TaskFailed(f"HTTP {response.status_code} from {self.url}")

        self.log("info", f"HTTP request completed with status {response.status_code}")
