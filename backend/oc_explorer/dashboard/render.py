"""
Rendering of the dashboard state with rich.
"""
from typing import List, Optional, Tuple

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..oc_types import Deployment, DeploymentStats, Pod
from .state import ViewState

HEALTHY = "#16a34a"
WARNING = "#f59e0b"
CRITICAL = "#dc2626"
NEUTRAL = "#2563eb"
TRACK = "#e5e7eb"
MUTED = "#64748b"

BAR_WIDTH = 40


def replica_color(available: int, desired: int) -> str:
    if available == desired:
        return HEALTHY
    if available == 0:
        return CRITICAL
    return WARNING


def status_color(percent: float) -> str:
    """Memory bar colour: green up to 65%, amber up to 85%, red above."""
    if percent > 85:
        return CRITICAL
    if percent > 65:
        return WARNING
    return HEALTHY


def pod_health(pod: Pod) -> Tuple[str, str]:
    """Label and colour for a pod's status line."""
    if pod.phase != "Running":
        return pod.phase, CRITICAL
    if pod.restarts > 0:
        return "Restarting", WARNING
    return "Healthy", HEALTHY


def bar(percent: float, color: str, width: int = BAR_WIDTH) -> Text:
    filled = round(width * min(max(percent, 0), 100) / 100)
    text = Text()
    text.append("█" * filled, style=color)
    text.append("█" * (width - filled), style=TRACK)
    return text


def cpu_label(stats: DeploymentStats) -> str:
    limit = f" / {stats.cpu_limit}m" if stats.cpu_limit else ""
    return f"CPU: {stats.cpu_used}m{limit}"


def mem_label(stats: DeploymentStats) -> str:
    limit = f" / {stats.mem_limit}Mi" if stats.mem_limit else " (Unlimited)"
    return f"RAM: {stats.mem_used}Mi{limit}"


def _pods_table(pods: Optional[Tuple[Pod, ...]]) -> RenderableType:
    if pods is None:
        return Text("Loading pods…", style=MUTED)
    table = Table(title="Pods", box=box.SIMPLE, show_header=False, title_justify="left")
    table.add_column("name", style="bold")
    table.add_column("health")
    for pod in pods:
        label, color = pod_health(pod)
        table.add_row(pod.name, Text(label, style=color))
    return table


def render_deployment(deployment: Deployment, stats: DeploymentStats, state: ViewState) -> Panel:
    available, desired = deployment.available_replicas, deployment.desired_replicas
    header = Text(deployment.name, style="bold")
    header.append("   ")
    header.append(f"Replicas: {available}/{desired}", style=f"bold {replica_color(available, desired)}")

    rows: List[RenderableType] = [
        header,
        Text(cpu_label(stats)),
        bar(stats.cpu_pct, NEUTRAL),
        Text(mem_label(stats)),
        bar(stats.mem_pct, status_color(stats.mem_pct)),
    ]
    if state.expanded == deployment.name:
        rows.append(_pods_table(state.pods.get(deployment.name)))
    return Panel(Group(*rows), box=box.ROUNDED)


def render_dashboard(state: ViewState) -> RenderableType:
    """Whole dashboard for the current state."""
    title = f"OpenShift Explorer · {state.project}" if state.project else "OpenShift Explorer"
    rows: List[RenderableType] = []

    if state.last_updated:
        rows.append(Text(f"Last updated: {state.last_updated.strftime('%H:%M:%S')}", style=MUTED))

    stats = state.stats
    for deployment in state.deployments or ():
        deployment_stats = stats.get(deployment.name)
        if deployment_stats is None:
            continue
        rows.append(render_deployment(deployment, deployment_stats, state))

    if state.deployments == ():
        rows.append(Text("No deployments", style=MUTED))
    elif not rows:
        rows.append(Text("No project selected" if not state.project else "Loading…", style=MUTED))
    return Panel(Group(*rows), title=title, title_align="left", box=box.HEAVY)


def render_commands(state: ViewState) -> Text:
    """Numbered projects and deployments with the keys the live view accepts."""
    text = Text("Projects: ", style=MUTED)
    for i, name in enumerate(state.namespaces or (), 1):
        text.append(f"{i} ", style=MUTED)
        text.append(f"{name}  ", style="bold reverse" if name == state.project else "")
    if state.deployments:
        text.append("\nDeployments: ", style=MUTED)
        for i, deployment in enumerate(state.deployments, 1):
            text.append(f"{i} ", style=MUTED)
            text.append(f"{deployment.name}  ", style="bold reverse" if deployment.name == state.expanded else "")
    text.append("\np <project|n> switch project · d <deployment|n> show/hide pods · q quit", style=MUTED)
    return text
