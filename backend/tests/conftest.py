"""Shared fixtures and configuration for tests."""

import asyncio
import os
import threading
from collections import Counter
from unittest.mock import AsyncMock, Mock, patch

import pytest
from fastapi.testclient import TestClient

# Set test environment variables before importing the app
os.environ.setdefault("LOG_LEVEL", "INFO")
os.environ.setdefault("CORS_ORIGINS", "*")

from oc_explorer import fastapi_app  # noqa: E402
from oc_explorer.oc_types import Container, Deployment, DeploymentDetails, Pod, UsageSample  # noqa: E402


def deployment_item(name, replicas=1, available=1, limits=None, match_labels=None, strategy=None):
    """Build a deployment object shaped like `oc get deployment -o json`."""
    container = {"name": name, "image": f"quay.io/demo/{name}:latest"}
    if limits is not None:
        container["resources"] = {"limits": limits}
    spec = {
        "replicas": replicas,
        "selector": {"matchLabels": match_labels if match_labels is not None else {"app": name}},
        "template": {"spec": {"containers": [container]}},
    }
    if strategy is not None:
        spec["strategy"] = strategy
    return {
        "metadata": {"name": name, "namespace": "demo"},
        "spec": spec,
        "status": {"availableReplicas": available},
    }


def pod_item(name, phase="Running", restarts=(0,)):
    return {
        "metadata": {"name": name},
        "status": {
            "phase": phase,
            "containerStatuses": [{"restartCount": r} for r in restarts],
        },
    }


@pytest.fixture
def mock_oc():
    """Replace the app's OcClient with async mocks."""
    oc = Mock()
    for method in (
        "whoami", "get_projects", "get_deployments", "get_deployment",
        "get_pods", "top_pods", "logs", "patch_deployment",
    ):
        setattr(oc, method, AsyncMock())
    with patch.object(fastapi_app, "oc", oc):
        yield oc


@pytest.fixture
def client(mock_oc):
    """Create a test client."""
    return TestClient(fastapi_app.app)


async def wait_until(predicate, timeout=2.0):
    """Yield to the loop until predicate() holds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.01)


class FakeApi:
    """Stands in for ExplorerApi and counts every fetch."""

    def __init__(self, deployments=("api", "web"), usage_error=None, usage_error_after=0, namespaces=("demo", "prod")):
        self._deployments = list(deployments)
        self._namespaces = list(namespaces)
        self.usage_error = usage_error
        self.usage_error_after = usage_error_after
        self.calls = Counter()
        self.usage_projects = []
        self._lock = threading.Lock()

    def _count(self, key):
        with self._lock:
            self.calls[key] += 1

    def namespaces(self):
        self._count("namespaces")
        return list(self._namespaces)

    def deployments(self, project):
        self._count("deployments")
        return [Deployment(name, 1, 1) for name in self._deployments]

    def deployment_details(self, project, name):
        self._count("details")
        return DeploymentDetails(containers=[Container(name, cpu_limit="1", memory_limit="1Gi")])

    def pods_usage(self, project):
        self._count("usage")
        with self._lock:
            self.usage_projects.append(project)
        if self.usage_error and len(self.usage_projects) > self.usage_error_after:
            raise self.usage_error
        return [UsageSample(f"{name}-7d9f4c-xk2pq", "100m", "128Mi") for name in self._deployments]

    def deployment_pods(self, project, name):
        self._count("pods")
        return [Pod(f"{name}-7d9f4c-xk2pq", "Running", 0)]


class ManualClock:
    """Sleep replacement that only returns when tick() is called."""

    def __init__(self):
        self.delays = []
        self._ticks = asyncio.Semaphore(0)

    async def sleep(self, delay):
        self.delays.append(delay)
        await self._ticks.acquire()

    def tick(self):
        self._ticks.release()

