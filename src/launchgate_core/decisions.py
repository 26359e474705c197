from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

from launchgate_core.storage.kv import KeyValueStore

logger = logging.getLogger(__name__)

CONTENT_LOCATION_KEY = "cached_content_url"
REGISTRATION_ATTEMPTED_KEY = "registration_attempted"


class DisplayMode(str, Enum):
    WEB_CONTENT = "web_content"
    NATIVE_INTERFACE = "native_interface"


@dataclass(frozen=True)
class RouteDecision:
    """What the caller should present, plus the content location for web mode."""

    mode: DisplayMode
    content_location: str | None = None

    def __iter__(self) -> Iterator[DisplayMode | str | None]:
        yield self.mode
        yield self.content_location

    @classmethod
    def native(cls) -> RouteDecision:
        return cls(mode=DisplayMode.NATIVE_INTERFACE, content_location=None)

    @classmethod
    def web(cls, content_location: str) -> RouteDecision:
        return cls(mode=DisplayMode.WEB_CONTENT, content_location=content_location)


@dataclass(frozen=True)
class RegistrationOutcome:
    attempted: bool = False
    content_location: str | None = None

    @property
    def has_content_location(self) -> bool:
        return bool(self.content_location)

    @property
    def display_mode(self) -> DisplayMode:
        if self.attempted and self.has_content_location:
            return DisplayMode.WEB_CONTENT
        return DisplayMode.NATIVE_INTERFACE


class PersistentDecisionStore:
    """Durable record of the registration outcome.

    Two entries under fixed keys: the "attempted" flag and the optional
    content location. The display mode is always derived, never stored.
    """

    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv

    def get_outcome(self) -> RegistrationOutcome:
        attempted = self._kv.get(REGISTRATION_ATTEMPTED_KEY)
        location = self._kv.get(CONTENT_LOCATION_KEY)
        return RegistrationOutcome(
            attempted=attempted is True,
            content_location=location if isinstance(location, str) else None,
        )

    def record_outcome(self, content_location: str | None) -> None:
        logger.info("Recording registration outcome (content_location=%s)", content_location)
        if content_location is None:
            self._kv.apply(
                set_values={REGISTRATION_ATTEMPTED_KEY: True},
                delete_keys=[CONTENT_LOCATION_KEY],
            )
        else:
            self._kv.apply(
                set_values={
                    CONTENT_LOCATION_KEY: content_location,
                    REGISTRATION_ATTEMPTED_KEY: True,
                }
            )

    def reset(self) -> None:
        logger.info("Clearing persisted registration outcome")
        # The flag goes first so a partial apply can only ever reopen registration.
        self._kv.apply(delete_keys=[REGISTRATION_ATTEMPTED_KEY, CONTENT_LOCATION_KEY])
