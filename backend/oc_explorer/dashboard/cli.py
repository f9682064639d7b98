"""
Terminal entry point for the dashboard.
"""
import argparse
import asyncio
import logging
import sys
import threading
from typing import Callable, List, Optional, Sequence

from rich.console import Console, Group
from rich.live import Live
from rich.logging import RichHandler
from rich.prompt import Prompt

from ..config import settings
from .api import ExplorerApi, ExplorerApiError
from .poller import DashboardController
from .render import render_commands, render_dashboard
from .state import Connected, Store

console = Console()
logger = logging.getLogger(__name__)


def resolve_choice(choice: str, names: Sequence[str]) -> Optional[str]:
    """An exact name wins; otherwise a 1-based index into names."""
    if choice in names:
        return choice
    if choice.isdigit() and 1 <= int(choice) <= len(names):
        return names[int(choice) - 1]
    return None


def _pick_project(namespaces: List[str]) -> str:
    for i, name in enumerate(namespaces, 1):
        console.print(f"[bold]{i:>3}[/bold]  {name}")
    choice = Prompt.ask("Project", choices=[*namespaces, *map(str, range(1, len(namespaces) + 1))], show_choices=False)
    return resolve_choice(choice, namespaces)


async def handle_command(controller: DashboardController, line: str) -> bool:
    """
    Run one command typed into the live view.

    Commands:
        p <project|n>     switch to another project
        d <deployment|n>  show or hide a deployment's pods
        q                 leave the live view

    Returns:
        False once the user asked to quit
    """
    parts = line.strip().split(maxsplit=1)
    if not parts:
        return True
    command, arg = parts[0].lower(), parts[1].strip() if len(parts) > 1 else ""
    state = controller.store.state

    if command in ("q", "quit"):
        return False
    if command in ("p", "project"):
        project = resolve_choice(arg, state.namespaces or ())
        if project is None:
            logger.warning(f"⚠️ Unknown project: {arg!r}")
        elif project != state.project:
            await controller.select_project(project)
    elif command in ("d", "deployment"):
        name = resolve_choice(arg, [d.name for d in state.deployments or ()])
        if name is None:
            logger.warning(f"⚠️ Unknown deployment: {arg!r}")
        else:
            await controller.toggle_deployment(name)
    else:
        logger.warning(f"⚠️ Unknown command {command!r}; use p, d or q")
    return True


def _read_lines(read_line: Callable[[], str]) -> "asyncio.Queue[str]":
    """Feed lines from a blocking reader into a queue on the running loop."""
    loop = asyncio.get_running_loop()
    lines: "asyncio.Queue[str]" = asyncio.Queue()

    def pump() -> None:
        while True:
            line = read_line()
            try:
                loop.call_soon_threadsafe(lines.put_nowait, line)
            except RuntimeError:
                return  # loop closed
            if not line:
                return

    threading.Thread(target=pump, name="command-reader", daemon=True).start()
    return lines


async def _command_loop(controller: DashboardController, lines: "asyncio.Queue[str]") -> None:
    while True:
        line = await lines.get()
        if not line:
            # stdin closed; keep the view running until interrupted
            await asyncio.Event().wait()
        if not await handle_command(controller, line):
            return


def _view(state):
    return Group(render_dashboard(state), render_commands(state))


async def _watch(api: ExplorerApi, namespaces: List[str], project: str, expand: Optional[str], interval: float) -> None:
    store = Store()
    controller = DashboardController(api, store, interval=interval)
    store.dispatch(Connected(namespaces))

    with Live(_view(store.state), console=console, refresh_per_second=4) as live:
        store.subscribe(lambda state: live.update(_view(state)))
        try:
            await controller.select_project(project)
            if expand:
                await controller.toggle_deployment(expand)
            await _command_loop(controller, _read_lines(sys.stdin.readline))
        finally:
            await controller.close()



def cmd_watch(api: ExplorerApi, args) -> int:
    if not api.health():
        console.print("[yellow]oc is not logged in on the backend; data may be missing[/yellow]")
    namespaces = api.namespaces()
    if not namespaces:
        console.print("[red]No projects visible[/red]")
        return 1
    project = args.project or _pick_project(namespaces)
    try:
        asyncio.run(_watch(api, namespaces, project, args.expand, args.interval))
    except KeyboardInterrupt:
        pass
    return 0


def cmd_logs(api: ExplorerApi, args) -> int:
    console.print(api.pod_logs(args.project, args.pod, lines=args.lines), markup=False, highlight=False)
    return 0


def cmd_set_strategy(api: ExplorerApi, args) -> int:
    api.set_strategy(args.project, args.deployment, args.type, args.max_surge, args.max_unavailable)
    console.print(f"[green]Strategy of {args.project}/{args.deployment} set to {args.type}[/green]")
    return 0


def _int_or_percent(value: str):
    return value if value.endswith("%") else int(value)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="oc-explorer", description="Inspect OpenShift deployments and pods")
    parser.add_argument("--api", default=settings.API_BASE_URL, help=f"Backend URL (default: {settings.API_BASE_URL})")
    sub = parser.add_subparsers(dest="command", required=True)

    watch = sub.add_parser("watch", help="Live view of a project's deployments")
    watch.add_argument("--project", help="Project to open; prompts when omitted")
    watch.add_argument("--expand", metavar="DEPLOYMENT", help="Show the pods of this deployment")
    watch.add_argument(
        "--interval",
        type=float,
        default=settings.POLL_INTERVAL_SECS,
        help=f"Usage refresh interval in seconds (default: {settings.POLL_INTERVAL_SECS})",
    )
    watch.set_defaults(func=cmd_watch)

    logs = sub.add_parser("logs", help="Print the tail of a pod's log")
    logs.add_argument("project")
    logs.add_argument("pod")
    logs.add_argument("--lines", type=int, default=None, help="Number of lines (backend default when omitted)")
    logs.set_defaults(func=cmd_logs)

    strategy = sub.add_parser("set-strategy", help="Change a deployment's rollout strategy")
    strategy.add_argument("project")
    strategy.add_argument("deployment")
    strategy.add_argument("--type", choices=["RollingUpdate", "Recreate"], required=True)
    strategy.add_argument("--max-surge", type=_int_or_percent)
    strategy.add_argument("--max-unavailable", type=_int_or_percent)
    strategy.set_defaults(func=cmd_set_strategy)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format="%(message)s", handlers=[RichHandler(console=console)])
    api = ExplorerApi.from_settings(settings, base_url=args.api)
    try:
        return args.func(api, args)
    except ExplorerApiError as e:
        console.print(f"[red]{e.message}[/red]")
        if e.details:
            console.print(e.details, style="dim", markup=False)
        return 1


if __name__ == "__main__":
    sys.exit(main())
