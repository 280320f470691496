"""Client for the console's HTTP proxy surface."""

from typing import Any, Dict, List, Optional, Tuple

import requests

from ec2_console.core.constants import READ_TIMEOUT_SECONDS
from ec2_console.core.models.instance import InstanceRecord
from ec2_console.utils.exceptions import (
    Ec2ConsoleError,
    NotFound,
    RemoteError,
    RemoteUnavailable,
    Unauthorized,
    ValidationError,
)
from ec2_console.utils.logger import setup_logger

STATUS_ERRORS = {
    400: ValidationError,
    401: Unauthorized,
    404: NotFound,
}


class ProxyClient:
    """Talks to ``/api/*`` on a running proxy with the same error taxonomy as EC2Manager."""

    def __init__(
        self,
        base_url: str,
        timeout: float = READ_TIMEOUT_SECONDS,
        http: Optional[requests.Session] = None,
    ):
        if not base_url:
            raise ValidationError("A proxy base URL is required", code="MissingApiUrl")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = http or requests.Session()
        self.logger = setup_logger(__name__, "proxy_client.log")

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self.http.request(method, url, timeout=self.timeout, **kwargs)
        except (requests.ConnectionError, requests.Timeout) as e:
            self.logger.error(f"{method} {url} failed: {e}")
            raise RemoteUnavailable(f"Proxy unreachable at {self.base_url}", code=type(e).__name__) from e

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if response.ok and payload.get("success", True):
            return payload

        message = payload.get("error") or payload.get("message") or response.reason or "Request failed"
        code = payload.get("code", "")
        self.logger.error(f"{method} {url} returned {response.status_code}: {message}")
        raise self._error_for(response.status_code, message, code)

    @staticmethod
    def _error_for(status: int, message: str, code: str) -> Ec2ConsoleError:
        if status in STATUS_ERRORS:
            return STATUS_ERRORS[status](message, code=code)
        if status >= 500:
            return RemoteUnavailable(message, code=code)
        return RemoteError(message, code=code, status_code=status)

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/api/health")

    def list_instances(
        self,
        instance_ids: str = "",
        tags: str = "",
        tag_key: str = "",
        tag_value: str = "",
        state: str = "all",
    ) -> Tuple[List[InstanceRecord], List[str]]:
        params = {
            key: value
            for key, value in {
                "instance_ids": instance_ids,
                "tags": tags,
                "tag_key": tag_key,
                "tag_value": tag_value,
                "state": state,
            }.items()
            if value
        }
        payload = self._request("GET", "/api/instances", params=params)
        records = [InstanceRecord.from_dict(item) for item in payload.get("instances", [])]
        return records, list(payload.get("warnings", []))

    def get_instance(self, instance_id: str) -> InstanceRecord:
        payload = self._request("GET", f"/api/instances/{instance_id}")
        return InstanceRecord.from_dict(payload["instance"])

    def send_action(self, action: str, instance_id: str) -> str:
        payload = self._request("POST", f"/api/instances/{instance_id}/{action}")
        return payload.get("message", "")
