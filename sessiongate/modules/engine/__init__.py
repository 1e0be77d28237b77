"""
Engine Module - Black Box Interface

Purpose: Talk to the external multi-session messaging engine
Interface: list_sessions(), get_session(), start_session(), delete_session(),
           disconnect_session()
Hidden: Transport, event stream parsing, listener bookkeeping

Any engine that satisfies SessionEngine can be dropped in.
"""

from .interfaces import (
    DisconnectingEngine,
    SessionCallbacks,
    SessionEngine,
    SessionHandle,
    SessionSummary,
)
from .remote import RemoteSessionEngine

__all__ = [
    "DisconnectingEngine",
    "RemoteSessionEngine",
    "SessionCallbacks",
    "SessionEngine",
    "SessionHandle",
    "SessionSummary",
]
