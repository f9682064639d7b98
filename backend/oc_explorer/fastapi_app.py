# fastapi_app.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Literal, Optional, Union

from fastapi import FastAPI, Path, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .adapters import deployment_summary, label_selector, strategy_patch
from .config import settings
from .exceptions import OcError
from .oc_client import OcClient

logging.basicConfig(level=settings.LOG_LEVEL.upper())
logger = logging.getLogger(__name__)

oc = OcClient.from_settings(settings)

# DNS-1123 names; pod names may contain dots
NAME_PATTERN = r"^[a-z0-9]([-a-z0-9.]*[a-z0-9])?$"

# -----------------------------------------------------------------------------
# FastAPI app + CORS
# -----------------------------------------------------------------------------
app = FastAPI(title="OpenShift Explorer Backend", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["GET", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.exception_handler(OcError)
async def oc_error_handler(request: Request, exc: OcError):
    logger.error(f"❌ {request.method} {request.url.path}: {exc.message}: {exc.details}")
    return JSONResponse(status_code=500, content={"error": exc.message, "details": exc.details})

# -----------------------------------------------------------------------------
# Models
# -----------------------------------------------------------------------------
class StrategyBody(BaseModel):
    type: Literal["RollingUpdate", "Recreate"] = Field(default="RollingUpdate")
    maxSurge: Optional[Union[int, str]] = Field(default=None, description="Count or percentage")
    maxUnavailable: Optional[Union[int, str]] = Field(default=None, description="Count or percentage")


def _name(description: str):
    return Path(..., description=description, pattern=NAME_PATTERN, max_length=253)

# -----------------------------------------------------------------------------
# Health
# -----------------------------------------------------------------------------
@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/api/health")
async def api_health():
    """Check that oc is installed and logged in."""
    try:
        user = await oc.whoami()
    except OcError as e:
        logger.warning(f"⚠️ oc whoami failed: {e.details}")
        return JSONResponse(status_code=500, content={"ok": False})
    logger.debug(f"oc logged in as {user}")
    return {"ok": True}

# -----------------------------------------------------------------------------
# Projects & deployments
# -----------------------------------------------------------------------------
@app.get("/api/namespaces")
async def api_namespaces() -> Dict[str, Any]:
    """List the projects visible to the logged in user."""
    return await oc.get_projects()


@app.get("/api/projects/{project}/deployments")
async def api_deployments(project: str = _name("Project name")) -> Dict[str, Any]:
    return await oc.get_deployments(project)


@app.get("/api/projects/{project}/deployments/{deployment}")
async def api_deployment_details(
    project: str = _name("Project name"),
    deployment: str = _name("Deployment name"),
) -> Dict[str, Any]:
    """Containers (with resources) and update strategy of a deployment."""
    dep = await oc.get_deployment(project, deployment)
    return deployment_summary(dep)


@app.get("/api/projects/{project}/deployments/{deployment}/pods")
async def api_deployment_pods(
    project: str = _name("Project name"),
    deployment: str = _name("Deployment name"),
) -> Dict[str, Any]:
    """Pods matched by the deployment's label selector."""
    dep = await oc.get_deployment(project, deployment)
    selector = label_selector(dep)
    logger.debug(f"Listing pods of {project}/{deployment} with selector {selector}")
    return await oc.get_pods(project, selector)


@app.patch("/api/projects/{project}/deployments/{deployment}/strategy")
async def api_update_strategy(
    body: StrategyBody,
    project: str = _name("Project name"),
    deployment: str = _name("Deployment name"),
):
    """Switch a deployment between RollingUpdate and Recreate."""
    patch = strategy_patch(body.type, body.maxSurge, body.maxUnavailable)
    await oc.patch_deployment(project, deployment, patch)
    logger.info(f"🔁 Strategy of {project}/{deployment} set to {body.type}")
    return {"status": "ok"}

# -----------------------------------------------------------------------------
# Pods
# -----------------------------------------------------------------------------
@app.get("/api/projects/{project}/pods-usage")
async def api_pods_usage(project: str = _name("Project name")) -> List[Dict[str, str]]:
    """Current CPU/memory per pod. Empty when metrics are unavailable."""
    try:
        samples = await oc.top_pods(project)
    except OcError as e:
        logger.warning(f"⚠️ oc adm top failed for {project}: {e.details}")
        return []
    return [{"name": s.name, "cpu": s.cpu, "memory": s.memory} for s in samples]


@app.get("/api/projects/{project}/pods/{pod}/logs")
async def api_pod_logs(
    project: str = _name("Project name"),
    pod: str = _name("Pod name"),
    lines: int = Query(settings.LOG_TAIL_LINES, ge=1, le=5000),
) -> Dict[str, str]:
    """Last lines of a pod's log."""
    return {"logs": await oc.logs(project, pod, tail=lines)}


def main():
    import uvicorn
    logger.info(f"✅ Backend running on http://{settings.HTTP_HOST}:{settings.HTTP_PORT}")
    uvicorn.run(app, host=settings.HTTP_HOST, port=settings.HTTP_PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
