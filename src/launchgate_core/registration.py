from __future__ import annotations

import logging

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from launchgate_core.config import CoreConfig
from launchgate_core.decisions import PersistentDecisionStore, RouteDecision
from launchgate_core.errors import (
    ConfigurationFault,
    RegistrationError,
    RegistrationOutcomeKind,
    TransportFailure,
)
from launchgate_core.identity import (
    HeaderAugmenter,
    IdentifierProvider,
    NoHeaderAugmenter,
    build_header_augmenter,
    build_identifier_provider,
)
from launchgate_core.storage.kv import KeyValueStore

logger = logging.getLogger(__name__)


class RegistrationRequest(BaseModel):
    userData: str


class RegistrationResponse(BaseModel):
    model_config = ConfigDict(strict=True)

    success: bool
    data: str | None = None

    @property
    def effective_content_location(self) -> str | None:
        if not self.success or not self.data:
            return None
        return self.data


def is_absolute_http_url(raw: str) -> bool:
    if not isinstance(raw, str) or any(ch.isspace() for ch in raw):
        return False
    try:
        url = httpx.URL(raw)
        port = url.port
    except (httpx.InvalidURL, TypeError, ValueError):
        return False
    if port is not None and not 0 < port <= 65535:
        return False
    return url.scheme in ("http", "https") and bool(url.host)


def build_http_client(
    config: CoreConfig, *, transport: httpx.AsyncBaseTransport | None = None
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(config.registration.timeout_s),
        follow_redirects=True,
        transport=transport,
    )


class RegistrationClient:
    """Performs the one-time registration exchange and classifies its result.

    Only a decoded server answer is persisted, positive or negative. Anything
    that prevented an answer (bad endpoint, unbuildable request, network
    error, rejected status, undecodable body) returns the native interface
    and leaves the store untouched, so the next launch tries again.
    """

    def __init__(
        self,
        *,
        http: httpx.AsyncClient,
        store: PersistentDecisionStore,
        endpoint: str,
        identifiers: IdentifierProvider,
        headers: HeaderAugmenter | None = None,
    ) -> None:
        self._http = http
        self._store = store
        self._endpoint = endpoint
        self._identifiers = identifiers
        self._headers = headers or NoHeaderAugmenter()

    async def register(self) -> RouteDecision:
        try:
            response = await self._exchange()
        except RegistrationError as exc:
            logger.warning(
                "Registration not completed (%s): %s; not persisting, will retry on next launch",
                exc.kind.value,
                exc,
            )
            return RouteDecision.native()

        location = response.effective_content_location
        if location is not None and not is_absolute_http_url(location):
            logger.warning("Registration returned a malformed content location: %r", location)
            location = None

        if location is None:
            logger.info(
                "Registration %s (success=%s); will not retry",
                RegistrationOutcomeKind.DEFINITE_NEGATIVE.value,
                response.success,
            )
            self._store.record_outcome(None)
            return RouteDecision.native()

        logger.info(
            "Registration %s with content location %s",
            RegistrationOutcomeKind.DEFINITE_POSITIVE.value,
            location,
        )
        self._store.record_outcome(location)
        return RouteDecision.web(location)

    async def _exchange(self) -> RegistrationResponse:
        body = self._encode_request()

        if not is_absolute_http_url(self._endpoint):
            raise ConfigurationFault(f"Invalid registration endpoint URL: {self._endpoint!r}")

        headers = self._headers.augment(
            {
                "Content-Type": "application/json",
                "Accept": "application/json",
            }
        )

        logger.info("Starting registration request to %s", self._endpoint)
        try:
            res = await self._http.post(self._endpoint, content=body, headers=headers)
            logger.info("Registration response status %s", res.status_code)
            res.raise_for_status()
        except httpx.InvalidURL as exc:
            raise ConfigurationFault(f"Invalid registration endpoint URL: {exc}") from exc
        except httpx.HTTPError as exc:
            raise TransportFailure(f"Registration request failed: {exc}") from exc

        try:
            return RegistrationResponse.model_validate_json(res.content)
        except ValidationError as exc:
            raise TransportFailure(
                f"Registration response could not be decoded: {res.text[:200]!r}"
            ) from exc

    def _encode_request(self) -> bytes:
        try:
            identifier = self._identifiers.identifier()
            return RegistrationRequest(userData=identifier).model_dump_json().encode("utf-8")
        except Exception as exc:
            raise ConfigurationFault(f"Failed to encode registration request: {exc}") from exc

    async def check_reachability(self, location: str) -> bool:
        """HEAD `location`; available unless 404, a 5xx, or no response at all."""

        if not is_absolute_http_url(location):
            logger.warning("Invalid URL for reachability check: %s", location)
            return False

        try:
            res = await self._http.head(location)
        except httpx.HTTPError as exc:
            logger.warning("No response for reachability check of %s: %s", location, exc)
            return False

        available = res.status_code != 404 and res.status_code < 500
        logger.info(
            "Reachability of %s: status=%s available=%s", location, res.status_code, available
        )
        return available


def build_registration_client(
    config: CoreConfig,
    *,
    http: httpx.AsyncClient,
    store: PersistentDecisionStore,
    kv: KeyValueStore,
) -> RegistrationClient:
    return RegistrationClient(
        http=http,
        store=store,
        endpoint=config.registration.registration_endpoint,
        identifiers=build_identifier_provider(config, kv),
        headers=build_header_augmenter(config),
    )
