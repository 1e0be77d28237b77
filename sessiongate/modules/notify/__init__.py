"""
Notify Module - Black Box Interface

Purpose: Side channels for issued QR codes
Interface: NotifySink.on_qr_issued(), build_stores()
Hidden: Storage backend, image rendering, webhook delivery

Replaces process-wide QR and webhook maps with explicit, injectable stores.
"""

from .sink import NotifySink, WebhookNotifySink
from .stores import KeyedStore, MemoryKeyedStore, RedisKeyedStore, build_stores

__all__ = [
    "KeyedStore",
    "MemoryKeyedStore",
    "NotifySink",
    "RedisKeyedStore",
    "WebhookNotifySink",
    "build_stores",
]
