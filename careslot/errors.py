"""
Error taxonomy for the scheduling engine and the interaction coordinator.

Validation and schedule configuration problems never reach the network
layer. Remote call failures are raised by the API clients as
RemoteCallError subclasses and classified into a FailureKind plus a
user-facing message by classify_failure().
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CareslotError(Exception):
    """Base class for all errors raised by careslot."""


class ValidationError(CareslotError):
    """A booking selection is incomplete at submission time."""

    def __init__(self, message: str, missing: Optional[list[str]] = None) -> None:
        super().__init__(message)
        self.missing = missing or []


class ScheduleConfigError(CareslotError):
    """An enabled working-hours entry cannot produce slots."""


class RemoteCallError(CareslotError):
    """A collaborator API call failed."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthError(RemoteCallError):
    """The call was rejected as unauthenticated (HTTP 401)."""


class PermissionDeniedError(RemoteCallError):
    """The call was forbidden for the signed-in user (HTTP 403)."""


class NetworkOrServerError(RemoteCallError):
    """Timeout, transport failure, or a 5xx response."""


class RequestRejectedError(RemoteCallError):
    """Any other 4xx response; carries the server's message."""


class FailureKind(str, Enum):
    AUTH = "auth"
    PERMISSION = "permission"
    NETWORK_OR_SERVER = "network_or_server"
    REJECTED = "rejected"


@dataclass(frozen=True)
class ClassifiedFailure:
    """A remote failure reduced to what the UI needs to show."""

    kind: FailureKind
    message: str


SIGN_IN_MESSAGE = "Please sign in to continue."
PERMISSION_MESSAGE = "You don't have permission to do that."
RETRY_LATER_MESSAGE = "Something went wrong. Please try again later."


def classify_failure(exc: BaseException) -> ClassifiedFailure:
    """Map an exception raised by a remote call to a failure kind and message."""
    if isinstance(exc, AuthError):
        return ClassifiedFailure(FailureKind.AUTH, SIGN_IN_MESSAGE)
    if isinstance(exc, PermissionDeniedError):
        return ClassifiedFailure(FailureKind.PERMISSION, PERMISSION_MESSAGE)
    if isinstance(exc, RequestRejectedError):
        return ClassifiedFailure(FailureKind.REJECTED, str(exc) or RETRY_LATER_MESSAGE)
    # Timeouts, transport errors, 5xx and anything unexpected.
    return ClassifiedFailure(FailureKind.NETWORK_OR_SERVER, RETRY_LATER_MESSAGE)
