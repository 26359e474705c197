from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from launchgate_core.decisions import DisplayMode


class ApiError(BaseModel):
    code: str
    message: str
    details: Any | None = None


class ApiResponse[T](BaseModel):
    ok: bool
    data: T | None = None
    error: ApiError | None = None


def ok[T](data: T) -> ApiResponse[T]:
    return ApiResponse(ok=True, data=data)


def fail(*, code: str, message: str, details: Any | None = None) -> ApiResponse[None]:
    return ApiResponse(ok=False, error=ApiError(code=code, message=message, details=details))


class RouteView(BaseModel):
    mode: DisplayMode
    content_location: str | None = None
    launch_screen_delay_s: float


class OutcomeView(BaseModel):
    attempted: bool
    content_location: str | None = None
    mode: DisplayMode | None = None


class ReachabilityRequest(BaseModel):
    location: str


class ReachabilityView(BaseModel):
    location: str
    available: bool
