"""Tests for oc output adapters."""

import pytest

from conftest import deployment_item, pod_item
from oc_explorer.adapters import (
    deployment_from_item,
    deployment_summary,
    details_from_summary,
    label_selector,
    parse_top_output,
    pod_from_item,
    strategy_patch,
)
from oc_explorer.exceptions import OcOutputError


class TestDeploymentSummary:
    def test_containers_and_strategy(self):
        dep = deployment_item("api", limits={"cpu": "500m", "memory": "256Mi"},
                              strategy={"type": "Recreate"})
        assert deployment_summary(dep) == {
            "containers": [{"name": "api", "resources": {"limits": {"cpu": "500m", "memory": "256Mi"}}}],
            "updateStrategy": {"type": "Recreate"},
        }

    def test_defaults(self):
        summary = deployment_summary(deployment_item("api"))
        assert summary["containers"] == [{"name": "api", "resources": {}}]
        assert summary["updateStrategy"] == {"type": "RollingUpdate"}

    def test_missing_template_is_an_output_error(self):
        with pytest.raises(OcOutputError):
            deployment_summary({"spec": {}})


class TestLabelSelector:
    def test_joins_match_labels(self):
        dep = deployment_item("api", match_labels={"app": "api", "tier": "backend"})
        assert label_selector(dep) == "app=api,tier=backend"

    @pytest.mark.parametrize("dep", [
        {"spec": {}},
        {"spec": {"selector": {}}},
        {"spec": {"selector": {"matchLabels": {}}}},
        {},
    ])
    def test_missing_selector_is_rejected(self, dep):
        with pytest.raises(OcOutputError):
            label_selector(dep)


class TestParseTopOutput:
    def test_parses_columns(self):
        out = "api-7d9f4c-xk2pq   12m   80Mi\nweb-5c6d7e-qwert   3m    24Mi\n"
        samples = parse_top_output(out)
        assert [(s.name, s.cpu, s.memory) for s in samples] == [
            ("api-7d9f4c-xk2pq", "12m", "80Mi"),
            ("web-5c6d7e-qwert", "3m", "24Mi"),
        ]

    def test_skips_blank_and_short_lines(self):
        assert parse_top_output("\n\nbroken-line 1m\n") == []


class TestStrategyPatch:
    def test_recreate_omits_rolling_update(self):
        assert strategy_patch("Recreate", max_surge=1, max_unavailable=0) == {
            "spec": {"strategy": {"type": "Recreate"}}
        }

    def test_rolling_update_with_bounds(self):
        assert strategy_patch("RollingUpdate", "25%", 0) == {
            "spec": {"strategy": {"type": "RollingUpdate",
                                  "rollingUpdate": {"maxSurge": "25%", "maxUnavailable": 0}}}
        }

    def test_rolling_update_without_bounds(self):
        assert strategy_patch("RollingUpdate") == {"spec": {"strategy": {"type": "RollingUpdate"}}}


class TestDashboardAdapters:
    def test_deployment_from_item(self):
        dep = deployment_from_item(deployment_item("api", replicas=3, available=1))
        assert (dep.name, dep.desired_replicas, dep.available_replicas) == ("api", 3, 1)

    def test_deployment_without_status(self):
        dep = deployment_from_item({"metadata": {"name": "new"}, "spec": {}})
        assert (dep.desired_replicas, dep.available_replicas) == (0, 0)

    def test_pod_restarts_are_summed(self):
        pod = pod_from_item(pod_item("api-1-a", restarts=(1, 2)))
        assert pod.restarts == 3
        assert pod.phase == "Running"

    def test_pod_without_status(self):
        pod = pod_from_item({"metadata": {"name": "p"}})
        assert (pod.phase, pod.restarts) == ("Unknown", 0)

    def test_details_from_summary(self):
        details = details_from_summary({
            "containers": [{"name": "api", "resources": {"limits": {"cpu": "1", "memory": "1Gi"}}},
                           {"name": "proxy", "resources": {}}],
            "updateStrategy": {"type": "Recreate"},
        })
        assert [(c.name, c.cpu_limit, c.memory_limit) for c in details.containers] == [
            ("api", "1", "1Gi"),
            ("proxy", None, None),
        ]
        assert details.update_strategy == {"type": "Recreate"}
