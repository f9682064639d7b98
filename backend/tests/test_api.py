"""Tests for the dashboard's HTTP client."""

from unittest.mock import Mock

import pytest
import requests

from conftest import deployment_item, pod_item
from oc_explorer.dashboard.api import ExplorerApi, ExplorerApiError


def make_response(status_code=200, payload=None):
    response = Mock()
    response.status_code = status_code
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


@pytest.fixture
def api(session):
    return ExplorerApi("http://backend:3001/", timeout=3, session=session)


class TestExplorerApi:
    def test_namespaces(self, api, session):
        session.request.return_value = make_response(payload={"items": [{"metadata": {"name": "demo"}}]})
        assert api.namespaces() == ["demo"]
        session.request.assert_called_once_with("GET", "http://backend:3001/api/namespaces", timeout=3)

    def test_deployments(self, api, session):
        session.request.return_value = make_response(payload={"items": [deployment_item("api", 2, 1)]})
        deployments = api.deployments("demo")
        assert [(d.name, d.desired_replicas, d.available_replicas) for d in deployments] == [("api", 2, 1)]
        assert session.request.call_args.args[1] == "http://backend:3001/api/projects/demo/deployments"

    def test_deployment_details(self, api, session):
        session.request.return_value = make_response(payload={
            "containers": [{"name": "api", "resources": {"limits": {"cpu": "500m"}}}],
            "updateStrategy": {"type": "Recreate"},
        })
        details = api.deployment_details("demo", "api")
        assert details.containers[0].cpu_limit == "500m"
        assert details.update_strategy == {"type": "Recreate"}

    def test_deployment_pods(self, api, session):
        session.request.return_value = make_response(payload={"items": [pod_item("api-1-a", "Pending")]})
        pods = api.deployment_pods("demo", "api")
        assert pods[0].phase == "Pending"
        assert session.request.call_args.args[1].endswith("/api/projects/demo/deployments/api/pods")

    def test_pods_usage(self, api, session):
        session.request.return_value = make_response(payload=[{"name": "api-1-a", "cpu": "3m", "memory": "9Mi"}])
        usage = api.pods_usage("demo")
        assert (usage[0].name, usage[0].cpu, usage[0].memory) == ("api-1-a", "3m", "9Mi")

    def test_pod_logs(self, api, session):
        session.request.return_value = make_response(payload={"logs": "hello\n"})
        assert api.pod_logs("demo", "api-1-a", lines=20) == "hello\n"
        assert session.request.call_args.kwargs["params"] == {"lines": 20}

    def test_set_strategy_omits_unset_bounds(self, api, session):
        session.request.return_value = make_response(payload={"status": "ok"})
        api.set_strategy("demo", "api", "Recreate")
        session.request.assert_called_once_with(
            "PATCH", "http://backend:3001/api/projects/demo/deployments/api/strategy",
            timeout=3, json={"type": "Recreate"},
        )

    def test_error_payload_is_raised(self, api, session):
        session.request.return_value = make_response(500, {"error": "oc command failed", "details": "forbidden"})
        with pytest.raises(ExplorerApiError) as exc_info:
            api.deployments("demo")
        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "oc command failed"
        assert exc_info.value.details == "forbidden"

    def test_non_json_error(self, api, session):
        session.request.return_value = make_response(502, ValueError("no json"))
        with pytest.raises(ExplorerApiError) as exc_info:
            api.namespaces()
        assert exc_info.value.status_code == 502

    def test_connection_error(self, api, session):
        session.request.side_effect = requests.ConnectionError("refused")
        with pytest.raises(ExplorerApiError):
            api.namespaces()

    def test_health(self, api, session):
        session.request.return_value = make_response(payload={"ok": True})
        assert api.health() is True
        session.request.return_value = make_response(500, {"ok": False})
        assert api.health() is False


class TestFromSettings:
    def test_uses_settings_url_and_timeout(self):
        settings = Mock(API_BASE_URL="http://localhost:3001", API_TIMEOUT_SECS=7)
        api = ExplorerApi.from_settings(settings)
        assert (api.base_url, api.timeout) == ("http://localhost:3001", 7)

    def test_explicit_url_wins(self):
        settings = Mock(API_BASE_URL="http://localhost:3001", API_TIMEOUT_SECS=7)
        assert ExplorerApi.from_settings(settings, base_url="http://explorer:8000/").base_url == "http://explorer:8000"
