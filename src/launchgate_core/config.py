from __future__ import annotations

import json
import secrets
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

from launchgate_core.home import LaunchGatePaths

MOBILE_SAFARI_USER_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 16_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/16.0 Mobile/15E148 Safari/604.1"
)


class RegistrationConfig(BaseModel):
    """Where and how the one-time registration call is made."""

    server_base_url: str = Field(default="https://domain.com")
    registration_path: str = Field(default="/api/v1/register")
    timeout_s: float = Field(
        default=30.0,
        gt=0,
        description="Applied to connect, read, write and pool phases of every request.",
    )

    @property
    def registration_endpoint(self) -> str:
        return f"{self.server_base_url}{self.registration_path}"


class ClientConfig(BaseModel):
    platform: Literal["mobile", "desktop"] = Field(
        default="mobile",
        description=(
            "'mobile' sends a mobile browser User-Agent and keeps a stable install id; "
            "'desktop' sends no User-Agent override and a fresh id per attempt."
        ),
    )
    user_agent: str = Field(default=MOBILE_SAFARI_USER_AGENT)
    install_id: str | None = Field(
        default=None,
        description="Optional fixed installation identifier; overrides the platform provider.",
    )
    launch_screen_delay_s: float = Field(default=2.0, ge=0)


class NetworkConfig(BaseModel):
    bind_host: str = Field(default="127.0.0.1")
    core_port: int = Field(default=8790, ge=1, le=65535)


class PathOverrides(BaseModel):
    db_dir: str | None = None
    logs_dir: str | None = None


class AuthConfig(BaseModel):
    install_token: str | None = Field(default=None)


class LoggingConfig(BaseModel):
    max_size_mb: int = Field(
        default=10, ge=1, description="Max size of a log file in MB before rolling."
    )
    backup_count: int = Field(default=5, ge=1, description="Number of log archives to keep.")


class CoreConfig(BaseModel):
    version: str = Field(default="1")
    registration: RegistrationConfig = Field(default_factory=RegistrationConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)
    network: NetworkConfig = Field(default_factory=NetworkConfig)
    paths: PathOverrides = Field(default_factory=PathOverrides)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _read_json(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_core_config(paths: LaunchGatePaths) -> CoreConfig:
    """Load config from ${LAUNCHGATE_HOME}/config/core.json.

    - If missing: returns defaults.
    - Validation is performed by Pydantic.
    """

    config_path = paths.core_config_path
    if not config_path.exists():
        return CoreConfig()

    raw = _read_json(config_path)
    return CoreConfig.model_validate(raw)


def write_core_config(paths: LaunchGatePaths, config: CoreConfig) -> None:
    """Persist config to ${LAUNCHGATE_HOME}/config/core.json."""

    payload = config.model_dump(mode="json", exclude_none=True)
    paths.config_dir.mkdir(parents=True, exist_ok=True)
    paths.core_config_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


def ensure_install_token(paths: LaunchGatePaths, config: CoreConfig) -> CoreConfig:
    """Ensure the local API token exists and is stored in config.

    If missing, generate a new token and persist it to core.json.
    """

    raw = (config.auth.install_token or "").strip()
    if raw:
        return config

    token = secrets.token_urlsafe(32)
    updated_auth = config.auth.model_copy(update={"install_token": token})
    updated = config.model_copy(update={"auth": updated_auth})
    write_core_config(paths, updated)
    return updated


def resolve_configured_paths(paths: LaunchGatePaths, config: CoreConfig) -> LaunchGatePaths:
    """Apply user-configurable path overrides from config.

    config/ is not configurable.
    """

    def _resolve_dir(raw: str | None, default: Path) -> Path:
        if raw is None or not str(raw).strip():
            return default
        candidate = Path(raw).expanduser()
        if not candidate.is_absolute():
            candidate = (paths.home / candidate).resolve()
        else:
            candidate = candidate.resolve()
        return candidate

    db_dir = _resolve_dir(config.paths.db_dir, paths.db_dir)
    logs_dir = _resolve_dir(config.paths.logs_dir, paths.logs_dir)

    for p in (db_dir, logs_dir):
        p.mkdir(parents=True, exist_ok=True)

    return LaunchGatePaths(
        home=paths.home,
        db_dir=db_dir,
        logs_dir=logs_dir,
        config_dir=paths.config_dir,
    )
