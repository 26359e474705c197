from __future__ import annotations

import argparse
import asyncio
import os
from pathlib import Path

import uvicorn

from launchgate_core.app import create_app
from launchgate_core.config import (
    CoreConfig,
    ensure_install_token,
    load_core_config,
    resolve_configured_paths,
)
from launchgate_core.db import resolve_db_path
from launchgate_core.home import LaunchGatePaths, ensure_launchgate_layout, resolve_launchgate_home
from launchgate_core.logs import configure_cli_logging
from launchgate_core.services import LaunchGateServices, build_services


def _load(home_arg: str | None) -> tuple[LaunchGatePaths, CoreConfig]:
    if home_arg:
        home = Path(home_arg).expanduser().resolve()
    else:
        home = resolve_launchgate_home()

    paths = ensure_launchgate_layout(home)
    config = load_core_config(paths)
    paths = resolve_configured_paths(paths, config)
    return paths, config


async def _with_services(paths: LaunchGatePaths, config: CoreConfig, fn):
    services = build_services(db_path=resolve_db_path(paths), config=config)
    try:
        return await fn(services)
    finally:
        await services.aclose()


def _cmd_resolve(paths: LaunchGatePaths, config: CoreConfig, args: argparse.Namespace) -> int:
    async def _run(services: LaunchGateServices):
        return await services.decider.resolve()

    decision = asyncio.run(_with_services(paths, config, _run))
    print(f"mode={decision.mode.value}")
    print(f"content_location={decision.content_location or ''}")
    return 0


def _cmd_show(paths: LaunchGatePaths, config: CoreConfig, args: argparse.Namespace) -> int:
    async def _run(services: LaunchGateServices):
        return services.decider.outcome()

    outcome = asyncio.run(_with_services(paths, config, _run))
    print(f"attempted={str(outcome.attempted).lower()}")
    print(f"content_location={outcome.content_location or ''}")
    print(f"mode={outcome.display_mode.value if outcome.attempted else 'undecided'}")
    return 0


def _cmd_reset(paths: LaunchGatePaths, config: CoreConfig, args: argparse.Namespace) -> int:
    async def _run(services: LaunchGateServices):
        services.decider.reset()

    asyncio.run(_with_services(paths, config, _run))
    print("reset=true")
    return 0


def _cmd_check_url(paths: LaunchGatePaths, config: CoreConfig, args: argparse.Namespace) -> int:
    async def _run(services: LaunchGateServices):
        return await services.client.check_reachability(args.url)

    available = asyncio.run(_with_services(paths, config, _run))
    print(f"available={str(available).lower()}")
    return 0 if available else 1


def _cmd_serve(paths: LaunchGatePaths, config: CoreConfig, args: argparse.Namespace) -> int:
    ensure_install_token(paths, config)
    # The app lifespan resolves its own home from the environment.
    os.environ["LAUNCHGATE_HOME"] = str(paths.home)

    host = os.environ.get("LAUNCHGATE_BIND") or config.network.bind_host
    env_port = os.environ.get("LAUNCHGATE_PORT")
    port = int(env_port) if env_port else config.network.core_port

    uvicorn.run(create_app(), host=host, port=port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="launchgate",
        description="Decide once per install whether to show web content or the native UI",
    )
    p.add_argument("--home", default=None, help="LAUNCHGATE_HOME path")

    sub = p.add_subparsers(dest="command")
    sub.add_parser("serve", help="Run the local HTTP API (default)")
    sub.add_parser("resolve", help="Resolve the display mode, registering if undecided")
    sub.add_parser("show", help="Print the persisted registration outcome")
    sub.add_parser("reset", help="Clear the persisted outcome (next resolve registers again)")
    check = sub.add_parser("check-url", help="HEAD a content location and report availability")
    check.add_argument("url")
    return p


_COMMANDS = {
    "serve": _cmd_serve,
    "resolve": _cmd_resolve,
    "show": _cmd_show,
    "reset": _cmd_reset,
    "check-url": _cmd_check_url,
}


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    paths, config = _load(args.home)
    configure_cli_logging(paths, config)

    command = args.command or "serve"
    return _COMMANDS[command](paths, config, args)


if __name__ == "__main__":
    raise SystemExit(main())
