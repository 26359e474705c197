from __future__ import annotations

import asyncio

import httpx

from launchgate_core.decisions import (
    DisplayMode,
    PersistentDecisionStore,
    RegistrationOutcome,
    RouteDecision,
)
from launchgate_core.identity import StaticIdentifierProvider
from launchgate_core.registration import RegistrationClient
from launchgate_core.routing import RoutingDecider
from launchgate_core.storage.kv import InMemoryKeyValueStore

ENDPOINT = "https://register.example.test/api/v1/register"


class FakeRegistrationServer:
    """Scripted responses; the last one repeats once the script runs out."""

    def __init__(self, *responses) -> None:
        self._responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        item = self._responses[0] if len(self._responses) == 1 else self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        if isinstance(item, httpx.Response):
            return item
        return httpx.Response(200, json=item)


def _decider(
    server: FakeRegistrationServer,
    *,
    endpoint: str = ENDPOINT,
    store: PersistentDecisionStore | None = None,
) -> tuple[RoutingDecider, PersistentDecisionStore]:
    store = store or PersistentDecisionStore(InMemoryKeyValueStore())
    client = RegistrationClient(
        http=httpx.AsyncClient(transport=httpx.MockTransport(server)),
        store=store,
        endpoint=endpoint,
        identifiers=StaticIdentifierProvider("INSTALL-1"),
    )
    return RoutingDecider(store=store, client=client), store


def _resolve(decider: RoutingDecider) -> RouteDecision:
    return asyncio.run(decider.resolve())


def test_scenario_positive_first_launch() -> None:
    server = FakeRegistrationServer({"success": True, "data": "https://example.com/page"})
    decider, store = _decider(server)

    assert tuple(_resolve(decider)) == (DisplayMode.WEB_CONTENT, "https://example.com/page")
    assert store.get_outcome() == RegistrationOutcome(
        attempted=True, content_location="https://example.com/page"
    )


def test_scenario_negative_first_launch() -> None:
    server = FakeRegistrationServer({"success": False, "data": None})
    decider, store = _decider(server)

    assert tuple(_resolve(decider)) == (DisplayMode.NATIVE_INTERFACE, None)
    assert store.get_outcome() == RegistrationOutcome(attempted=True, content_location=None)


def test_scenario_timeout_leaves_store_unchanged() -> None:
    server = FakeRegistrationServer(httpx.ConnectTimeout("timed out"))
    decider, store = _decider(server)

    assert tuple(_resolve(decider)) == (DisplayMode.NATIVE_INTERFACE, None)
    assert store.get_outcome() == RegistrationOutcome()


def test_scenario_decided_native_makes_no_call() -> None:
    server = FakeRegistrationServer({"success": True, "data": "https://example.com/page"})
    store = PersistentDecisionStore(InMemoryKeyValueStore())
    store.record_outcome(None)
    decider, _ = _decider(server, store=store)

    assert tuple(_resolve(decider)) == (DisplayMode.NATIVE_INTERFACE, None)
    assert server.requests == []


def test_decided_state_is_idempotent_and_offline() -> None:
    server = FakeRegistrationServer({"success": True, "data": "https://x/y"})
    decider, _ = _decider(server)

    results = [_resolve(decider) for _ in range(5)]

    assert all(r == RouteDecision.web("https://x/y") for r in results)
    assert len(server.requests) == 1


def test_transient_failure_is_retried_on_next_resolve() -> None:
    server = FakeRegistrationServer(
        httpx.ConnectError("offline"),
        httpx.Response(503),
        {"success": True, "data": "https://x/y"},
    )
    decider, store = _decider(server)

    assert _resolve(decider) == RouteDecision.native()
    assert store.get_outcome().attempted is False

    assert _resolve(decider) == RouteDecision.native()
    assert store.get_outcome().attempted is False

    assert _resolve(decider) == RouteDecision.web("https://x/y")
    assert _resolve(decider) == RouteDecision.web("https://x/y")
    assert len(server.requests) == 3


def test_definite_negative_is_sticky() -> None:
    for payload in ({"success": True, "data": ""}, {"success": False, "data": "anything"}):
        server = FakeRegistrationServer(payload, {"success": True, "data": "https://x/y"})
        decider, store = _decider(server)

        assert _resolve(decider) == RouteDecision.native()
        assert store.get_outcome() == RegistrationOutcome(attempted=True, content_location=None)

        for _ in range(3):
            assert _resolve(decider) == RouteDecision.native()
        assert len(server.requests) == 1


def test_definite_positive_is_sticky_even_if_server_changes_its_mind() -> None:
    server = FakeRegistrationServer(
        {"success": True, "data": "https://x/y"},
        {"success": False, "data": None},
    )
    decider, _ = _decider(server)

    assert _resolve(decider) == RouteDecision.web("https://x/y")
    assert _resolve(decider) == RouteDecision.web("https://x/y")
    assert len(server.requests) == 1


def test_malformed_endpoint_never_persists() -> None:
    server = FakeRegistrationServer({"success": True, "data": "https://x/y"})
    decider, store = _decider(server, endpoint="not a url")

    for _ in range(3):
        assert _resolve(decider) == RouteDecision.native()
        assert store.get_outcome().attempted is False
    assert server.requests == []


def test_reset_restores_first_launch_behaviour() -> None:
    server = FakeRegistrationServer(
        {"success": False, "data": None},
        {"success": True, "data": "https://x/y"},
    )
    decider, store = _decider(server)

    assert _resolve(decider) == RouteDecision.native()
    assert store.get_outcome().attempted is True

    decider.reset()
    assert decider.outcome() == RegistrationOutcome()

    assert _resolve(decider) == RouteDecision.web("https://x/y")
    assert len(server.requests) == 2


def test_concurrent_resolves_register_once() -> None:
    server = FakeRegistrationServer({"success": True, "data": "https://x/y"})
    decider, _ = _decider(server)

    async def _both():
        return await asyncio.gather(decider.resolve(), decider.resolve(), decider.resolve())

    results = asyncio.run(_both())

    assert results == [RouteDecision.web("https://x/y")] * 3
    assert len(server.requests) == 1
