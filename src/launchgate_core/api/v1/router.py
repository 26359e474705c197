from __future__ import annotations

from fastapi import APIRouter, Request
from pydantic import BaseModel

from launchgate_core import __version__
from launchgate_core.api.models import ApiResponse, ok
from launchgate_core.api.v1.route import router as route_router

router = APIRouter(prefix="/v1", tags=["v1"])

router.include_router(route_router)


class SystemInfo(BaseModel):
    version: str
    launchgate_home: str
    registration_endpoint: str
    platform: str
    paths: dict[str, str]


@router.get("/system/info", response_model=ApiResponse[SystemInfo])
async def system_info(request: Request) -> ApiResponse[SystemInfo]:
    # Runtime identity and resolved paths only; no secrets.
    home = getattr(request.app.state, "launchgate_home", None)
    paths = getattr(request.app.state, "launchgate_paths", None)
    config = getattr(request.app.state, "launchgate_config", None)

    info = SystemInfo(
        version=__version__,
        launchgate_home=str(home) if home is not None else "",
        registration_endpoint=(
            config.registration.registration_endpoint if config is not None else ""
        ),
        platform=config.client.platform if config is not None else "",
        paths={
            "db_dir": str(paths.db_dir) if paths is not None else "",
            "logs_dir": str(paths.logs_dir) if paths is not None else "",
            "config_dir": str(paths.config_dir) if paths is not None else "",
        },
    )
    return ok(info)
