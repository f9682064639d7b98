"""
HTTP client for the explorer backend.
"""
import logging
from typing import Any, Dict, List, Optional, Union
from urllib.parse import quote

import requests

from ..adapters import deployment_from_item, details_from_summary, pod_from_item
from ..oc_types import Deployment, DeploymentDetails, Pod, UsageSample

logger = logging.getLogger(__name__)


class ExplorerApiError(Exception):
    """The backend could not be reached or answered with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None, details: str = ""):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


class ExplorerApi:
    """Thin wrapper over the backend REST API returning typed objects."""

    def __init__(self, base_url: str, timeout: float = 10, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings, base_url: Optional[str] = None) -> "ExplorerApi":
        return cls(base_url or settings.API_BASE_URL, timeout=settings.API_TIMEOUT_SECS)

    def _project_path(self, project: str, *parts: str) -> str:
        segments = [quote(p, safe="") for p in (project, *parts)]
        return "/api/projects/" + "/".join(segments)

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise ExplorerApiError(f"{method} {path} failed: {e}") from e

        if response.status_code >= 400:
            try:
                payload = response.json()
            except ValueError:
                payload = {}
            if not isinstance(payload, dict):
                payload = {}
            raise ExplorerApiError(
                payload.get("error") or f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
                details=str(payload.get("details") or ""),
            )

        try:
            return response.json()
        except ValueError as e:
            raise ExplorerApiError(f"{method} {path} returned invalid JSON") from e

    def health(self) -> bool:
        """True when the backend can talk to the cluster."""
        try:
            return bool(self._request("GET", "/api/health").get("ok"))
        except ExplorerApiError:
            return False

    def namespaces(self) -> List[str]:
        data = self._request("GET", "/api/namespaces")
        return [item["metadata"]["name"] for item in data.get("items") or []]

    def deployments(self, project: str) -> List[Deployment]:
        data = self._request("GET", self._project_path(project, "deployments"))
        return [deployment_from_item(item) for item in data.get("items") or []]

    def deployment_details(self, project: str, name: str) -> DeploymentDetails:
        data = self._request("GET", self._project_path(project, "deployments", name))
        return details_from_summary(data)

    def deployment_pods(self, project: str, name: str) -> List[Pod]:
        data = self._request("GET", self._project_path(project, "deployments", name, "pods"))
        return [pod_from_item(item) for item in data.get("items") or []]

    def pods_usage(self, project: str) -> List[UsageSample]:
        data = self._request("GET", self._project_path(project, "pods-usage"))
        return [UsageSample(name=d["name"], cpu=d.get("cpu", ""), memory=d.get("memory", "")) for d in data]

    def pod_logs(self, project: str, pod: str, lines: Optional[int] = None) -> str:
        params = {"lines": lines} if lines else None
        data = self._request("GET", self._project_path(project, "pods", pod, "logs"), params=params)
        return data.get("logs", "")

    def set_strategy(
        self,
        project: str,
        name: str,
        strategy_type: str,
        max_surge: Optional[Union[int, str]] = None,
        max_unavailable: Optional[Union[int, str]] = None,
    ) -> None:
        body: Dict[str, Any] = {"type": strategy_type}
        if max_surge is not None:
            body["maxSurge"] = max_surge
        if max_unavailable is not None:
            body["maxUnavailable"] = max_unavailable
        self._request("PATCH", self._project_path(project, "deployments", name, "strategy"), json=body)
        logger.info(f"✅ Strategy of {project}/{name} set to {strategy_type}")
