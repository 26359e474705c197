from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import httpx

from launchgate_core.config import CoreConfig
from launchgate_core.db.schema import ensure_kv_schema
from launchgate_core.decisions import PersistentDecisionStore
from launchgate_core.registration import (
    RegistrationClient,
    build_http_client,
    build_registration_client,
)
from launchgate_core.routing import RoutingDecider
from launchgate_core.storage.kv import SqliteKeyValueStore


@dataclass(frozen=True)
class LaunchGateServices:
    """Process-wide collaborators, built once at startup and passed around."""

    db_path: Path
    store: PersistentDecisionStore
    http: httpx.AsyncClient
    client: RegistrationClient
    decider: RoutingDecider

    async def aclose(self) -> None:
        await self.http.aclose()


def build_services(
    *,
    db_path: Path,
    config: CoreConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> LaunchGateServices:
    ensure_kv_schema(db_path)

    kv = SqliteKeyValueStore(db_path)
    store = PersistentDecisionStore(kv)
    http = build_http_client(config, transport=transport)
    client = build_registration_client(config, http=http, store=store, kv=kv)

    return LaunchGateServices(
        db_path=db_path,
        store=store,
        http=http,
        client=client,
        decider=RoutingDecider(store=store, client=client),
    )

