"""
View state of the dashboard and the reducers that update it.

State is never mutated: every action produces a new ViewState. Actions that
carry project data name their project so late results from a previously
selected project are dropped.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from ..oc_types import Deployment, DeploymentDetails, DeploymentStats, Pod, UsageSample
from ..usage import compute_stats


@dataclass(frozen=True)
class ViewState:
    connected: bool = False
    namespaces: Optional[Tuple[str, ...]] = None
    project: Optional[str] = None
    deployments: Optional[Tuple[Deployment, ...]] = None
    details: Mapping[str, DeploymentDetails] = field(default_factory=dict)
    usage: Optional[Tuple[UsageSample, ...]] = None
    last_updated: Optional[datetime] = None
    expanded: Optional[str] = None
    pods: Mapping[str, Tuple[Pod, ...]] = field(default_factory=dict)

    @property
    def stats(self) -> Dict[str, DeploymentStats]:
        """Recomputed on every access from the current inputs."""
        if self.deployments is None:
            return {}
        return compute_stats([d.name for d in self.deployments], self.usage or (), self.details)


# -----------------------------------------------------------------------------
# Actions
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Connected:
    namespaces: Sequence[str]


@dataclass(frozen=True)
class ProjectSelected:
    project: str


@dataclass(frozen=True)
class DeploymentsLoaded:
    project: str
    deployments: Sequence[Deployment]


@dataclass(frozen=True)
class DetailsLoaded:
    project: str
    details: Mapping[str, DeploymentDetails]


@dataclass(frozen=True)
class UsageLoaded:
    project: str
    samples: Sequence[UsageSample]
    at: datetime


@dataclass(frozen=True)
class DeploymentToggled:
    name: str


@dataclass(frozen=True)
class PodsLoaded:
    project: str
    deployment: str
    pods: Sequence[Pod]


# -----------------------------------------------------------------------------
# Reducers
# -----------------------------------------------------------------------------
def _connected(state: ViewState, action: Connected) -> ViewState:
    return replace(state, connected=True, namespaces=tuple(action.namespaces))


def _project_selected(state: ViewState, action: ProjectSelected) -> ViewState:
    return replace(
        state,
        project=action.project,
        deployments=None,
        details={},
        usage=None,
        last_updated=None,
        expanded=None,
        pods={},
    )


def _deployments_loaded(state: ViewState, action: DeploymentsLoaded) -> ViewState:
    return replace(state, deployments=tuple(action.deployments))


def _details_loaded(state: ViewState, action: DetailsLoaded) -> ViewState:
    return replace(state, details={**state.details, **action.details})


def _usage_loaded(state: ViewState, action: UsageLoaded) -> ViewState:
    return replace(state, usage=tuple(action.samples), last_updated=action.at)


def _deployment_toggled(state: ViewState, action: DeploymentToggled) -> ViewState:
    expanded = None if state.expanded == action.name else action.name
    return replace(state, expanded=expanded)


def _pods_loaded(state: ViewState, action: PodsLoaded) -> ViewState:
    return replace(state, pods={**state.pods, action.deployment: tuple(action.pods)})


_REDUCERS: Dict[type, Callable] = {
    Connected: _connected,
    ProjectSelected: _project_selected,
    DeploymentsLoaded: _deployments_loaded,
    DetailsLoaded: _details_loaded,
    UsageLoaded: _usage_loaded,
    DeploymentToggled: _deployment_toggled,
    PodsLoaded: _pods_loaded,
}


def reduce(state: ViewState, action) -> ViewState:
    """Apply one action and return the new state."""
    reducer = _REDUCERS.get(type(action))
    if reducer is None:
        raise TypeError(f"unknown action: {type(action).__name__}")
    project = getattr(action, "project", None)
    if project is not None and not isinstance(action, ProjectSelected) and project != state.project:
        return state
    return reducer(state, action)


class Store:
    """Holds the current ViewState and notifies listeners after each action."""

    def __init__(self, state: Optional[ViewState] = None):
        self.state = state or ViewState()
        self._listeners: List[Callable[[ViewState], None]] = []

    def subscribe(self, listener: Callable[[ViewState], None]) -> None:
        self._listeners.append(listener)

    def dispatch(self, action) -> ViewState:
        self.state = reduce(self.state, action)
        for listener in self._listeners:
            listener(self.state)
        return self.state
