from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from launchgate_core.api.models import (
    ApiResponse,
    OutcomeView,
    ReachabilityRequest,
    ReachabilityView,
    RouteView,
    ok,
)
from launchgate_core.decisions import RegistrationOutcome
from launchgate_core.services import LaunchGateServices

router = APIRouter(tags=["route"])


def _services(request: Request) -> LaunchGateServices:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=500, detail="Services not initialized")
    return services


def _to_outcome_view(outcome: RegistrationOutcome) -> OutcomeView:
    return OutcomeView(
        attempted=outcome.attempted,
        content_location=outcome.content_location,
        mode=outcome.display_mode if outcome.attempted else None,
    )


@router.get("/route", response_model=ApiResponse[RouteView])
async def route_resolve(request: Request) -> ApiResponse[RouteView]:
    services = _services(request)
    config = request.app.state.launchgate_config

    decision = await services.decider.resolve()
    return ok(
        RouteView(
            mode=decision.mode,
            content_location=decision.content_location,
            launch_screen_delay_s=config.client.launch_screen_delay_s,
        )
    )


@router.get("/route/outcome", response_model=ApiResponse[OutcomeView])
async def route_outcome(request: Request) -> ApiResponse[OutcomeView]:
    # Read-only: never triggers registration.
    services = _services(request)
    return ok(_to_outcome_view(services.decider.outcome()))


@router.post("/route/reset", response_model=ApiResponse[OutcomeView])
async def route_reset(request: Request) -> ApiResponse[OutcomeView]:
    services = _services(request)
    services.decider.reset()
    return ok(_to_outcome_view(services.decider.outcome()))


@router.post("/reachability", response_model=ApiResponse[ReachabilityView])
async def reachability_check(
    request: Request, payload: ReachabilityRequest
) -> ApiResponse[ReachabilityView]:
    services = _services(request)
    location = payload.location.strip()
    available = await services.client.check_reachability(location)
    return ok(ReachabilityView(location=location, available=available))
