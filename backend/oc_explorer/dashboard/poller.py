"""
Usage polling for the selected project.
"""
import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional

from .api import ExplorerApi, ExplorerApiError
from .state import (
    Connected,
    DeploymentsLoaded,
    DeploymentToggled,
    DetailsLoaded,
    PodsLoaded,
    ProjectSelected,
    Store,
    UsageLoaded,
)

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class ProjectPoller:
    """
    Loads one project and keeps its usage samples fresh.

    Deployments and their details are loaded once by start(); afterwards only
    usage is fetched, every `interval` seconds, until stop() is called.
    """

    def __init__(
        self,
        api: ExplorerApi,
        project: str,
        dispatch: Callable,
        interval: float = 5,
        sleep: Sleep = asyncio.sleep,
    ):
        self.api = api
        self.project = project
        self.dispatch = dispatch
        self.interval = interval
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def load_static(self) -> None:
        deployments = await asyncio.to_thread(self.api.deployments, self.project)
        self.dispatch(DeploymentsLoaded(self.project, deployments))

        results = await asyncio.gather(
            *(asyncio.to_thread(self.api.deployment_details, self.project, d.name) for d in deployments),
            return_exceptions=True,
        )
        details = {}
        for deployment, result in zip(deployments, results):
            if isinstance(result, ExplorerApiError):
                logger.error(f"❌ Details of {self.project}/{deployment.name} unavailable: {result.message}")
                continue
            if isinstance(result, BaseException):
                raise result
            details[deployment.name] = result
        self.dispatch(DetailsLoaded(self.project, details))

    async def load_usage(self) -> None:
        samples = await asyncio.to_thread(self.api.pods_usage, self.project)
        self.dispatch(UsageLoaded(self.project, samples, datetime.now()))

    async def start(self) -> None:
        """Run the initial load, then schedule the recurring usage fetch."""
        if self._task is not None:
            raise RuntimeError(f"poller for {self.project} already started")

        results = await asyncio.gather(self.load_static(), self.load_usage(), return_exceptions=True)
        for result in results:
            if isinstance(result, ExplorerApiError):
                logger.error(f"❌ Initial load of {self.project} failed: {result.message}")
            elif isinstance(result, BaseException):
                raise result

        self._task = asyncio.create_task(self._poll(), name=f"usage-poller-{self.project}")
        logger.info(f"📊 Polling usage of {self.project} every {self.interval}s")

    async def _poll(self) -> None:
        while True:
            await self._sleep(self.interval)
            try:
                await self.load_usage()
            except ExplorerApiError as e:
                logger.warning(f"⚠️ Usage poll for {self.project} failed: {e.message}")
            except Exception:
                logger.exception(f"❌ Usage poll for {self.project} raised")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception(f"❌ Usage poller for {self.project} ended with an error")
        logger.info(f"Stopped polling {self.project}")


class DashboardController:
    """Owns the store and at most one active ProjectPoller."""

    def __init__(
        self,
        api: ExplorerApi,
        store: Optional[Store] = None,
        interval: float = 5,
        sleep: Sleep = asyncio.sleep,
    ):
        self.api = api
        self.store = store or Store()
        self.interval = interval
        self._sleep = sleep
        self.poller: Optional[ProjectPoller] = None

    async def connect(self) -> None:
        namespaces = await asyncio.to_thread(self.api.namespaces)
        self.store.dispatch(Connected(namespaces))

    async def select_project(self, project: str) -> None:
        """Switch to a project, cancelling the previous project's polling first."""
        await self.stop()
        self.store.dispatch(ProjectSelected(project))
        self.poller = ProjectPoller(
            self.api, project, self.store.dispatch, interval=self.interval, sleep=self._sleep,
        )
        await self.poller.start()

    async def toggle_deployment(self, name: str) -> None:
        """Expand or collapse a deployment, fetching its pods the first time."""
        self.store.dispatch(DeploymentToggled(name))
        state = self.store.state
        if state.project is None or name in state.pods:
            return
        project = state.project
        try:
            pods = await asyncio.to_thread(self.api.deployment_pods, project, name)
        except ExplorerApiError as e:
            logger.error(f"❌ Pods of {project}/{name} unavailable: {e.message}")
            return
        self.store.dispatch(PodsLoaded(project, name, pods))

    async def stop(self) -> None:
        if self.poller is not None:
            await self.poller.stop()
            self.poller = None

    async def close(self) -> None:
        await self.stop()
