from __future__ import annotations

import logging
import uuid
from typing import Protocol

from launchgate_core.config import CoreConfig
from launchgate_core.storage.kv import KeyValueStore

logger = logging.getLogger(__name__)

INSTALL_ID_KEY = "install_identifier"


class IdentifierProvider(Protocol):
    def identifier(self) -> str: ...


class HeaderAugmenter(Protocol):
    def augment(self, headers: dict[str, str]) -> dict[str, str]: ...


def _new_identifier() -> str:
    return str(uuid.uuid4()).upper()


class StaticIdentifierProvider:
    """Always returns the same configured value."""

    def __init__(self, value: str) -> None:
        self._value = value

    def identifier(self) -> str:
        return self._value


class RandomIdentifierProvider:
    """Desktop behaviour: a fresh UUID for every attempt."""

    def identifier(self) -> str:
        return _new_identifier()


class InstallIdentifierProvider:
    """Mobile behaviour: one UUID per installation, kept in the key/value store.

    Generated lazily on first use and reused until the store is wiped.
    """

    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv

    def identifier(self) -> str:
        existing = self._kv.get(INSTALL_ID_KEY)
        if isinstance(existing, str) and existing:
            return existing

        value = _new_identifier()
        self._kv.set(INSTALL_ID_KEY, value)
        logger.info("Generated installation identifier")
        return value


class NoHeaderAugmenter:
    def augment(self, headers: dict[str, str]) -> dict[str, str]:
        return dict(headers)


class UserAgentHeaderAugmenter:
    def __init__(self, user_agent: str) -> None:
        self._user_agent = user_agent

    def augment(self, headers: dict[str, str]) -> dict[str, str]:
        out = dict(headers)
        out["User-Agent"] = self._user_agent
        return out


def build_identifier_provider(config: CoreConfig, kv: KeyValueStore) -> IdentifierProvider:
    fixed = (config.client.install_id or "").strip()
    if fixed:
        return StaticIdentifierProvider(fixed)
    if config.client.platform == "mobile":
        return InstallIdentifierProvider(kv)
    return RandomIdentifierProvider()


def build_header_augmenter(config: CoreConfig) -> HeaderAugmenter:
    if config.client.platform == "mobile":
        return UserAgentHeaderAugmenter(config.client.user_agent)
    return NoHeaderAugmenter()
