"""
QR Module - Black Box Interface

Purpose: Render QR payloads as images
Interface: qr_to_data_url(), qr_to_png()
Hidden: Image library, error correction and sizing choices
"""

from .render import qr_to_data_url, qr_to_png

__all__ = ["qr_to_data_url", "qr_to_png"]
