"""Decode QRIS payload text from QR code images."""
from __future__ import annotations

import io
import logging
from pathlib import Path

import requests
from PIL import Image, ImageOps, UnidentifiedImageError

from ..config import settings
from .errors import DefaultError

logger = logging.getLogger("myqris.reader")


def _decode_image(image: Image.Image) -> str:
    # pyzbar loads libzbar when imported; keep the API importable without it.
    from pyzbar.pyzbar import decode as pyzbar_decode

    grayscale = ImageOps.grayscale(image)
    for candidate in (image, grayscale, ImageOps.autocontrast(grayscale)):
        decoded = pyzbar_decode(candidate)
        if decoded:
            return decoded[0].data.decode("utf-8")
    raise DefaultError("Failed to read image: no QR code found")


def read_qr_from_bytes(data: bytes) -> str:
    """Decode the first QR symbol found in raw image bytes."""

    if len(data) > settings.max_image_bytes:
        raise DefaultError("Failed to read image: image exceeds size limit")
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise DefaultError(f"Failed to read image: {exc}") from exc
    payload = _decode_image(image.convert("RGB"))
    logger.debug("qr decoded", extra={"payload_length": len(payload)})
    return payload


def read_qr_from_file(path: str | Path) -> str:
    """Decode the first QR symbol found in an image file."""

    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise DefaultError(f"Failed to read image: {exc}") from exc
    return read_qr_from_bytes(data)


def read_qr_from_url(url: str) -> str:
    """Fetch an image over HTTP and decode the first QR symbol in it."""

    limit = settings.max_image_bytes
    try:
        with requests.get(url, timeout=settings.image_fetch_timeout, stream=True) as response:
            response.raise_for_status()
            declared = response.headers.get("Content-Length")
            if declared and declared.isdigit() and int(declared) > limit:
                raise DefaultError("Failed to read image from URL: image exceeds size limit")
            data = bytearray()
            for chunk in response.iter_content(chunk_size=65536):
                data.extend(chunk)
                if len(data) > limit:
                    raise DefaultError("Failed to read image from URL: image exceeds size limit")
    except requests.RequestException as exc:
        logger.warning("image fetch failed", extra={"url": url, "error": str(exc)})
        raise DefaultError(f"Failed to read image from URL: {exc}") from exc
    return read_qr_from_bytes(bytes(data))
