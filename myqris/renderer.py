"""QR image renderer for QRIS payloads."""
from __future__ import annotations

import base64
import io
import logging
from typing import Any

import qrcode
from PIL import Image, ImageDraw, ImageFont

from .config import settings
from .services.errors import DefaultError

logger = logging.getLogger("myqris.renderer")

_ERROR_CORRECTION = {
    "L": qrcode.constants.ERROR_CORRECT_L,
    "M": qrcode.constants.ERROR_CORRECT_M,
    "Q": qrcode.constants.ERROR_CORRECT_Q,
    "H": qrcode.constants.ERROR_CORRECT_H,
}


def _build_qr(data: str) -> qrcode.QRCode:
    qr = qrcode.QRCode(
        version=None,
        error_correction=_ERROR_CORRECTION[settings.render.error_correction],
        box_size=settings.render.box_size,
        border=settings.render.border,
    )
    qr.add_data(data)
    qr.make(fit=True)
    return qr


def _add_label(qr_img: Image.Image, title: str) -> Image.Image:
    width, height = qr_img.size

    label_height = 40
    canvas = Image.new("RGBA", (width, height + label_height), color="#FFFFFF")
    canvas.paste(qr_img, (0, 0))

    draw = ImageDraw.Draw(canvas)
    font = ImageFont.load_default()
    text = title.upper()
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    text_x = (width - (right - left)) // 2
    text_y = height + (label_height - (bottom - top)) // 2
    draw.text((text_x, text_y), text, fill="#1F2937", font=font)
    return canvas


def generate_qr_image(data: str, title: str | None = None) -> Image.Image:
    """Generate a QR image, optionally with a merchant label underneath."""

    try:
        qr_img = _build_qr(data).make_image(fill_color="black", back_color="white").convert("RGBA")
    except Exception as exc:
        raise DefaultError(f"Failed to generate QR Code: {exc}") from exc
    if title:
        return _add_label(qr_img, title)
    return qr_img


def qr_image_to_png_bytes(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def png_data_url(png_bytes: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")


def render_data_url(payload: str) -> str:
    """Render payload into a PNG data URL."""

    return png_data_url(qr_image_to_png_bytes(generate_qr_image(payload)))


def render_terminal(payload: str, invert: bool = True) -> str:
    """Render payload as terminal glyphs."""

    buffer = io.StringIO()
    try:
        _build_qr(payload).print_ascii(out=buffer, invert=invert)
    except Exception as exc:
        raise DefaultError(f"Failed to generate QR Code: {exc}") from exc
    return buffer.getvalue()


def render_qr_payload(payload: str, title: str | None = None) -> dict[str, Any]:
    """Render payload into PNG bytes, base64 string and data URL."""

    image = generate_qr_image(payload, title=title)
    png_bytes = qr_image_to_png_bytes(image)
    logger.debug("qr rendered", extra={"png_size": len(png_bytes), "labelled": bool(title)})
    return {
        "png_bytes": png_bytes,
        "png_base64": base64.b64encode(png_bytes).decode("ascii"),
        "data_url": png_data_url(png_bytes),
    }
