"""Render pairing payloads as PNG QR codes."""

import base64
import io
from functools import lru_cache

import qrcode


def qr_to_png(payload: str) -> bytes:
    """
    Render a QR payload as PNG bytes.

    Raises:
        ValueError: If the payload is empty
    """
    if not payload:
        raise ValueError("QR payload must not be empty")

    qr = qrcode.QRCode(
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(payload)
    qr.make(fit=True)
    img = qr.make_image(fill_color="#000000", back_color="#FFFFFF").convert("RGB")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@lru_cache(maxsize=64)
def qr_to_data_url(payload: str) -> str:
    """
    Render a QR payload as a ``data:image/png;base64,...`` URL.

    Memoized: the notify sink and the HTTP response render the same payload.
    """
    encoded = base64.b64encode(qr_to_png(payload)).decode("ascii")
    return f"data:image/png;base64,{encoded}"
