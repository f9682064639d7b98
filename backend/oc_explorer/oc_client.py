"""
Async wrapper around the oc command-line client.
"""
import asyncio
import contextlib
import json
import logging
import os
import tempfile
from typing import Any, Dict, Iterator, List, Optional

from .adapters import parse_top_output
from .exceptions import OcCommandError, OcOutputError
from .oc_types import UsageSample

logger = logging.getLogger(__name__)


class OcClient:
    """Runs oc commands and returns their parsed output."""

    def __init__(
        self,
        binary: str = "oc",
        timeout: float = 8,
        health_timeout: float = 5,
        patch_dir: Optional[str] = None,
    ):
        """
        Initialize the oc client.

        Args:
            binary: oc executable name or path
            timeout: Timeout in seconds for regular commands
            health_timeout: Timeout in seconds for `oc whoami`
            patch_dir: Directory for transient patch files (system temp dir if None)
        """
        self.binary = binary
        self.timeout = timeout
        self.health_timeout = health_timeout
        self.patch_dir = patch_dir

    @classmethod
    def from_settings(cls, settings) -> "OcClient":
        return cls(
            binary=settings.OC_BINARY,
            timeout=settings.OC_TIMEOUT_SECS,
            health_timeout=settings.OC_HEALTH_TIMEOUT_SECS,
            patch_dir=settings.PATCH_DIR,
        )

    async def _run(self, *args: str, timeout: Optional[float] = None) -> str:
        """
        Run oc with the given arguments and return its stdout.

        Raises:
            OcCommandError: on launch failure, non-zero exit or timeout
        """
        command = [self.binary, *args]
        timeout = timeout or self.timeout
        try:
            proc = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise OcCommandError(command, "oc command failed", str(e)) from e

        try:
            out_b, err_b = await asyncio.wait_for(proc.communicate(), timeout)
        except asyncio.TimeoutError as e:
            proc.kill()
            await proc.wait()
            raise OcCommandError(command, "oc command failed", f"timed out after {timeout}s") from e
        except asyncio.CancelledError:
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            raise

        out = out_b.decode("utf-8", errors="replace") if out_b else ""
        err = err_b.decode("utf-8", errors="replace") if err_b else ""
        if proc.returncode != 0:
            raise OcCommandError(command, "oc command failed", err.strip() or out.strip())

        logger.debug(f"oc {' '.join(args)} -> {len(out)} bytes")
        return out

    async def _run_json(self, *args: str) -> Any:
        out = await self._run(*args, "-o", "json")
        try:
            return json.loads(out)
        except json.JSONDecodeError as e:
            raise OcOutputError("Invalid JSON from oc", str(e)) from e

    async def whoami(self) -> str:
        """Return the user oc is logged in as."""
        out = await self._run("whoami", timeout=self.health_timeout)
        return out.strip()

    async def get_projects(self) -> Dict[str, Any]:
        return await self._run_json("get", "projects")

    async def get_deployments(self, project: str) -> Dict[str, Any]:
        return await self._run_json("get", "deployments", "-n", project)

    async def get_deployment(self, project: str, name: str) -> Dict[str, Any]:
        return await self._run_json("get", "deployment", name, "-n", project)

    async def get_pods(self, project: str, selector: str) -> Dict[str, Any]:
        """
        List pods in a project matching a label selector.

        Args:
            project: Project (namespace) name
            selector: Label selector in `k=v,k2=v2` form
        """
        return await self._run_json("get", "pods", "-n", project, "-l", selector)

    async def top_pods(self, project: str) -> List[UsageSample]:
        out = await self._run("adm", "top", "pods", "-n", project, "--no-headers")
        return parse_top_output(out)

    async def logs(self, project: str, pod: str, tail: int = 100) -> str:
        return await self._run("logs", pod, "-n", project, f"--tail={tail}")

    @contextlib.contextmanager
    def _patch_file(self, patch: Dict[str, Any]) -> Iterator[str]:
        fd, path = tempfile.mkstemp(prefix="patch-", suffix=".json", dir=self.patch_dir)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(patch, f, indent=2)
            yield path
        finally:
            with contextlib.suppress(FileNotFoundError):
                os.remove(path)

    async def patch_deployment(self, project: str, name: str, patch: Dict[str, Any]) -> None:
        """
        Apply a merge patch to a deployment.

        The patch goes through a temporary file that is removed once oc returns,
        whether or not the patch succeeded.

        Args:
            project: Project (namespace) name
            name: Deployment name
            patch: Merge patch body
        """
        with self._patch_file(patch) as path:
            await self._run(
                "patch", "deployment", name, "-n", project,
                "--type=merge", "--patch-file", path,
            )
        logger.info(f"✅ Patched deployment {project}/{name}")
