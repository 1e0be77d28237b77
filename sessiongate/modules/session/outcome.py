"""Outcomes of a session start attempt."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ...errors import SessionStartError, SessionStartTimeoutError


class FailureReason(str, Enum):
    """Why a start attempt failed."""

    TIMEOUT = "timeout"
    START_ERROR = "start_error"


@dataclass(frozen=True)
class Connected:
    """The session is paired; no QR code is needed."""


@dataclass(frozen=True)
class QRIssued:
    """The engine produced a pairing QR payload."""

    payload: str


@dataclass(frozen=True)
class Failed:
    """Neither signal arrived in time, or the engine rejected the start."""

    reason: FailureReason
    message: str
    error: Optional[BaseException] = None


SessionOutcome = Union[Connected, QRIssued, Failed]


def raise_for_failure(outcome: SessionOutcome, session_id: str) -> None:
    """
    Turn a Failed outcome into the matching error.

    Raises:
        SessionStartTimeoutError: If the start timed out
        SessionStartError: If the engine rejected the start
    """
    if not isinstance(outcome, Failed):
        return

    message = f"Failed to start session: {outcome.message}"
    if outcome.reason is FailureReason.TIMEOUT:
        raise SessionStartTimeoutError(message, session_id)
    raise SessionStartError(message, session_id)
