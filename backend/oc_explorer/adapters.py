"""
Adapters between raw oc output and the shapes the dashboard uses.
"""
from typing import Any, Dict, List, Optional, Union

from .exceptions import OcOutputError
from .oc_types import Container, Deployment, DeploymentDetails, Pod, UsageSample


# -----------------------------------------------------------------------------
# Gateway side
# -----------------------------------------------------------------------------
def deployment_summary(deployment: Dict[str, Any]) -> Dict[str, Any]:
    """Reduce a deployment object to its containers and rollout strategy."""
    try:
        containers = deployment["spec"]["template"]["spec"]["containers"]
        return {
            "containers": [
                {"name": c["name"], "resources": c.get("resources") or {}}
                for c in containers
            ],
            "updateStrategy": deployment["spec"].get("strategy") or {"type": "RollingUpdate"},
        }
    except (KeyError, TypeError) as e:
        raise OcOutputError("Invalid deployment JSON", f"missing {e}") from e


def label_selector(deployment: Dict[str, Any]) -> str:
    """
    Build a `k=v,k2=v2` selector from a deployment's matchLabels.

    An empty selector would list every pod in the project, so it is an error.
    """
    try:
        match_labels = deployment["spec"]["selector"].get("matchLabels") or {}
    except (KeyError, TypeError, AttributeError) as e:
        raise OcOutputError("Invalid selector JSON", "deployment has no selector") from e
    if not match_labels:
        raise OcOutputError("Invalid selector JSON", "deployment selector has no matchLabels")
    return ",".join(f"{k}={v}" for k, v in match_labels.items())


def parse_top_output(stdout: str) -> List[UsageSample]:
    """Parse `oc adm top pods --no-headers` into usage samples."""
    samples = []
    for line in stdout.strip().splitlines():
        parts = line.split()
        if len(parts) < 3:
            continue
        samples.append(UsageSample(name=parts[0], cpu=parts[1], memory=parts[2]))
    return samples


def strategy_patch(
    strategy_type: str,
    max_surge: Optional[Union[int, str]] = None,
    max_unavailable: Optional[Union[int, str]] = None,
) -> Dict[str, Any]:
    """Build the merge patch that sets a deployment's rollout strategy."""
    if strategy_type == "Recreate":
        return {"spec": {"strategy": {"type": "Recreate"}}}

    rolling_update = {}
    if max_surge is not None:
        rolling_update["maxSurge"] = max_surge
    if max_unavailable is not None:
        rolling_update["maxUnavailable"] = max_unavailable
    strategy: Dict[str, Any] = {"type": "RollingUpdate"}
    if rolling_update:
        strategy["rollingUpdate"] = rolling_update
    return {"spec": {"strategy": strategy}}


# -----------------------------------------------------------------------------
# Dashboard side
# -----------------------------------------------------------------------------
def deployment_from_item(item: Dict[str, Any]) -> Deployment:
    spec = item.get("spec") or {}
    status = item.get("status") or {}
    return Deployment(
        name=item["metadata"]["name"],
        desired_replicas=spec.get("replicas") or 0,
        available_replicas=status.get("availableReplicas") or 0,
    )


def pod_from_item(item: Dict[str, Any]) -> Pod:
    status = item.get("status") or {}
    restarts = sum(c.get("restartCount") or 0 for c in status.get("containerStatuses") or [])
    return Pod(
        name=item["metadata"]["name"],
        phase=status.get("phase") or "Unknown",
        restarts=restarts,
    )


def details_from_summary(summary: Dict[str, Any]) -> DeploymentDetails:
    """Turn a gateway deployment summary back into typed details."""
    containers = []
    for c in summary.get("containers") or []:
        limits = (c.get("resources") or {}).get("limits") or {}
        containers.append(Container(
            name=c.get("name", ""),
            cpu_limit=limits.get("cpu"),
            memory_limit=limits.get("memory"),
        ))
    return DeploymentDetails(
        containers=containers,
        update_strategy=summary.get("updateStrategy") or {"type": "RollingUpdate"},
    )
