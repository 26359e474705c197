from launchgate_core.config import CoreConfig, load_core_config
from launchgate_core.decisions import (
    DisplayMode,
    PersistentDecisionStore,
    RegistrationOutcome,
    RouteDecision,
)
from launchgate_core.home import LaunchGatePaths, ensure_launchgate_layout, resolve_launchgate_home

__version__ = "0.1.0"

__all__ = [
    "CoreConfig",
    "DisplayMode",
    "LaunchGatePaths",
    "PersistentDecisionStore",
    "RegistrationOutcome",
    "RouteDecision",
    "__version__",
    "ensure_launchgate_layout",
    "load_core_config",
    "resolve_launchgate_home",
]
