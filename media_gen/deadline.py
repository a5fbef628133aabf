"""Overall deadlines and cancellation checks for orchestrated operations."""

import math
import threading
import time
from typing import Callable, Optional

from .exceptions import OperationCancelledError, OperationTimeoutError


class Deadline:
    """
    A fixed point in time by which an operation must finish.

    ``Deadline(None)`` never expires.
    """

    def __init__(self, seconds: Optional[float], clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._expires_at = None if seconds is None else clock() + seconds

    def remaining(self) -> float:
        if self._expires_at is None:
            return math.inf
        return max(0.0, self._expires_at - self._clock())

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0

    def ensure(self, step: str, step_timeout: float) -> float:
        """
        Refuse to start a step whose timeout does not fit the remaining budget.

        Args:
            step: Step name, used in the error message
            step_timeout: The step's own timeout in seconds

        Returns:
            The step timeout to use

        Raises:
            OperationTimeoutError: If the step could outlive the deadline
        """
        remaining = self.remaining()
        if step_timeout > remaining:
            raise OperationTimeoutError(
                f"Not starting {step}: needs up to {step_timeout:.0f}s but only {remaining:.0f}s remain"
            )
        return step_timeout


def check_cancelled(cancel_event: Optional[threading.Event], step: str = "operation") -> None:
    """Raise OperationCancelledError if the caller has set ``cancel_event``."""
    if cancel_event is not None and cancel_event.is_set():
        raise OperationCancelledError(f"{step} cancelled")
