from __future__ import annotations

import asyncio
import logging

from launchgate_core.decisions import PersistentDecisionStore, RegistrationOutcome, RouteDecision
from launchgate_core.registration import RegistrationClient

logger = logging.getLogger(__name__)


class RoutingDecider:
    """Chooses between web content and the native interface.

    The stored outcome is consulted first; registration only runs while no
    definitive outcome has been recorded. Calls are serialized so that one
    process never has two registrations in flight.
    """

    def __init__(self, *, store: PersistentDecisionStore, client: RegistrationClient) -> None:
        self._store = store
        self._client = client
        self._lock = asyncio.Lock()

    def outcome(self) -> RegistrationOutcome:
        return self._store.get_outcome()

    async def resolve(self) -> RouteDecision:
        async with self._lock:
            outcome = self._store.get_outcome()

            if outcome.attempted:
                if outcome.has_content_location and outcome.content_location is not None:
                    logger.info(
                        "Registration already completed; showing web content at %s",
                        outcome.content_location,
                    )
                    return RouteDecision.web(outcome.content_location)

                logger.info("Registration answered without content; showing native interface")
                return RouteDecision.native()

            logger.info("No registration outcome recorded; registering (one time only)")
            decision = await self._client.register()
            logger.info(
                "Route determined: %s, content_location=%s",
                decision.mode.value,
                decision.content_location,
            )
            return decision

    def reset(self) -> None:
        self._store.reset()
