from __future__ import annotations

from enum import Enum


class RegistrationOutcomeKind(str, Enum):
    CONFIGURATION_FAULT = "configuration_fault"
    TRANSPORT_FAILURE = "transport_failure"
    DEFINITE_NEGATIVE = "definite_negative"
    DEFINITE_POSITIVE = "definite_positive"


class RegistrationError(Exception):
    """An attempt that produced no server answer. Never persisted."""

    kind: RegistrationOutcomeKind


class ConfigurationFault(RegistrationError):
    """Malformed endpoint, or the request could not be built."""

    kind = RegistrationOutcomeKind.CONFIGURATION_FAULT


class TransportFailure(RegistrationError):
    """Network error, rejected status, or an undecodable response."""

    kind = RegistrationOutcomeKind.TRANSPORT_FAILURE
