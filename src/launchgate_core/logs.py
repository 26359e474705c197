from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from launchgate_core.config import CoreConfig
from launchgate_core.home import LaunchGatePaths

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILENAME = "core.log"


def build_file_handler(paths: LaunchGatePaths, config: CoreConfig) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        paths.logs_dir / LOG_FILENAME,
        maxBytes=config.logging.max_size_mb * 1024 * 1024,
        backupCount=config.logging.backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def attach_file_logging(paths: LaunchGatePaths, config: CoreConfig) -> None:
    """Route all module logs to ${logs_dir}/core.log on the root logger."""

    root = logging.getLogger()
    root.setLevel(logging.INFO)
    # Avoid adding duplicate handlers if reloaded
    if not any(isinstance(h, RotatingFileHandler) for h in root.handlers):
        root.addHandler(build_file_handler(paths, config))


def configure_cli_logging(paths: LaunchGatePaths, config: CoreConfig) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format=LOG_FORMAT,
        handlers=[
            build_file_handler(paths, config),
            logging.StreamHandler(),
        ],
    )
