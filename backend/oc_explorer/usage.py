"""
Usage aggregation: pod samples against deployment limits.
"""
import re
from typing import Dict, Iterable, List, Mapping, Optional

from .oc_types import DeploymentDetails, DeploymentStats, UsageSample

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _leading_int(value: str) -> int:
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else 0


def parse_mem(value: Optional[str]) -> int:
    """Memory quantity in Mi. `Gi` is scaled, anything else is taken as-is."""
    if not value:
        return 0
    if value.endswith("Gi"):
        return _leading_int(value) * 1024
    return _leading_int(value)


def parse_cpu(value: Optional[str]) -> int:
    """CPU quantity in millicores. Unsuffixed values are whole cores."""
    if not value:
        return 0
    if value.endswith("m"):
        return _leading_int(value)
    return _leading_int(value) * 1000


def deployment_for_pod(pod_name: str) -> str:
    """Guess the owning deployment by dropping the replicaset and pod suffixes."""
    return "-".join(pod_name.split("-")[:-2])


def group_usage_by_deployment(samples: Iterable[UsageSample]) -> Dict[str, List[UsageSample]]:
    grouped: Dict[str, List[UsageSample]] = {}
    for sample in samples:
        grouped.setdefault(deployment_for_pod(sample.name), []).append(sample)
    return grouped


def percentage(used: float, limit: float) -> float:
    if limit > 0:
        return used / limit * 100
    return 0.0


def compute_stats(
    deployment_names: Iterable[str],
    usage: Iterable[UsageSample],
    details: Mapping[str, DeploymentDetails],
) -> Dict[str, DeploymentStats]:
    """
    Compute stats for every named deployment.

    Args:
        deployment_names: Deployments currently listed
        usage: Latest usage samples for the project
        details: Container details keyed by deployment name

    Returns:
        DeploymentStats keyed by deployment name
    """
    grouped = group_usage_by_deployment(usage)
    stats = {}
    for name in deployment_names:
        pods = grouped.get(name, [])
        cpu_used = sum(parse_cpu(p.cpu) for p in pods)
        mem_used = sum(parse_mem(p.memory) for p in pods)

        containers = details[name].containers if name in details else []
        cpu_limit = sum(parse_cpu(c.cpu_limit) for c in containers)
        mem_limit = sum(parse_mem(c.memory_limit) for c in containers)

        stats[name] = DeploymentStats(
            cpu_used=cpu_used,
            mem_used=mem_used,
            cpu_limit=cpu_limit,
            mem_limit=mem_limit,
            cpu_pct=percentage(cpu_used, cpu_limit),
            mem_pct=percentage(mem_used, mem_limit),
        )
    return stats
