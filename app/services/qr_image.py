# app/services/qr_image.py
"""
PNG rendering of stored QR codes.
Dot/corner styles and logos are client-side presentation and are not drawn here.
"""
import io

import qrcode
from PIL import Image
from qrcode.constants import ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q, ERROR_CORRECT_H

ERROR_LEVELS = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}


def make_qr_png(
    payload: str,
    size: int = 256,
    error_correction: str = "M",
    foreground_color: str = "#000000",
    background_color: str = "#ffffff"
) -> bytes:
    """Return QR PNG bytes for ``payload``, scaled to ``size`` pixels square."""
    qr = qrcode.QRCode(
        error_correction=ERROR_LEVELS.get(error_correction, ERROR_CORRECT_M),
        box_size=10,
        border=1,
    )
    qr.add_data(payload)
    qr.make(fit=True)

    img = qr.make_image(fill_color=foreground_color, back_color=background_color).get_image()
    img = img.resize((size, size), Image.NEAREST)

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
