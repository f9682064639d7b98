"""
Type definitions for objects read from oc.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class Container:
    """Container spec with its resource limits as printed by oc."""
    name: str
    cpu_limit: Optional[str] = None
    memory_limit: Optional[str] = None


@dataclass
class Deployment:
    """Deployment summary used by the dashboard."""
    name: str
    desired_replicas: int = 0
    available_replicas: int = 0


@dataclass
class Pod:
    """Pod summary used by the dashboard."""
    name: str
    phase: str = "Unknown"
    restarts: int = 0


@dataclass
class UsageSample:
    """One line of `oc adm top pods`."""
    name: str
    cpu: str
    memory: str


@dataclass
class DeploymentStats:
    """Usage of a deployment's pods against its container limits."""
    cpu_used: int = 0
    mem_used: int = 0
    cpu_limit: int = 0
    mem_limit: int = 0
    cpu_pct: float = 0.0
    mem_pct: float = 0.0


@dataclass
class DeploymentDetails:
    """Containers and rollout strategy of one deployment."""
    containers: List[Container] = field(default_factory=list)
    update_strategy: Dict = field(default_factory=lambda: {"type": "RollingUpdate"})
