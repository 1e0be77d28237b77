"""
Sessiongate - HTTP control surface for a multi-session messaging engine

Starts messaging sessions, hands out pairing QR codes and logs sessions out.
The messaging protocol itself lives in an external session engine.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- All communication through defined interfaces

Modules:
- auth: API key authentication
- engine: Port to the external session engine
- session: Session lifecycle coordination and reclaim
- notify: QR cache, webhook registry and QR notifications
- qr: QR image encoding
- api: REST API interface
"""

__version__ = "1.0.0"
