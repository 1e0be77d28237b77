"""
Session Module - Black Box Interface

Purpose: Coordinate the session lifecycle around the external engine
Interface: SessionCoordinator.start_or_attach(), SessionCoordinator.logout(),
           SessionReclaimer.force_reset()
Hidden: Per-session locking, the start race, teardown sequencing

The engine owns the session state machine; this module only decides when to
tear down, when to start and which start signal wins.
"""

from .coordinator import SessionCoordinator
from .latch import OutcomeLatch
from .locks import KeyedLock
from .outcome import (
    Connected,
    Failed,
    FailureReason,
    QRIssued,
    SessionOutcome,
    raise_for_failure,
)
from .reclaimer import SessionReclaimer

__all__ = [
    "Connected",
    "Failed",
    "FailureReason",
    "KeyedLock",
    "OutcomeLatch",
    "QRIssued",
    "SessionCoordinator",
    "SessionOutcome",
    "SessionReclaimer",
    "raise_for_failure",
]
