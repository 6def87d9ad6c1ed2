"""Cancellation tokens passed into every remote call.

A view creates one token for its lifetime and cancels it when it is
discarded. Work that has not been dispatched yet is skipped, and results
that arrive afterwards are not applied to shared state.
"""

import logging
from typing import Optional

from careslot.errors import CareslotError

logger = logging.getLogger(__name__)


class OperationCancelled(CareslotError):
    """Raised when work is attempted under an already-cancelled token."""


class CancellationToken:
    def __init__(self, reason: Optional[str] = None) -> None:
        self._cancelled = False
        self.reason = reason

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self, reason: Optional[str] = None) -> None:
        if not self._cancelled:
            self._cancelled = True
            self.reason = reason or self.reason
            logger.debug("Cancellation requested: %s", self.reason or "no reason given")

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise OperationCancelled(self.reason or "operation cancelled")


def is_cancelled(token: Optional[CancellationToken]) -> bool:
    return token is not None and token.cancelled
