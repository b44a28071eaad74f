"""
Image codec and renderer collaborators of the editor.

The editing core only sees :class:`~layerstag.pixel_buffer.PixelBuffer` objects.
Turning uploaded bytes into pixels, pixels into downloadable bytes and layers
into something the user can look at is delegated to objects implementing the
protocols below. :class:`PillowCodec` and :class:`DataUrlRenderer` are the
default implementations.
"""

from __future__ import annotations

import base64
import io
import logging
from dataclasses import replace
from typing import Any, Protocol, runtime_checkable

import PIL.Image
import filetype
import numpy as np

from .config import settings
from .exceptions import DecodeError, EncodeError
from .history import Layer
from .pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)

PIL_FORMATS = {
    "png": "PNG",
    "jpeg": "JPEG",
    "gif": "GIF",
    "bmp": "BMP",
    "webp": "WEBP",
}
"MIME subtype to Pillow format name"

SUPPORTED_MIME_TYPES = {f"image/{subtype}" for subtype in PIL_FORMATS}
"MIME types which can be decoded and encoded"

_OPAQUE_FORMATS = {"JPEG", "BMP"}

_MIME_ALIASES = {
    "image/jpg": "image/jpeg",
    "image/pjpeg": "image/jpeg",
    "image/x-png": "image/png",
    "image/x-ms-bmp": "image/bmp",
}


def normalize_mime_type(mime_type: str) -> str:
    """Lower-cases a MIME type, strips parameters and resolves common aliases."""
    mime_type = mime_type.split(";")[0].strip().lower()
    return _MIME_ALIASES.get(mime_type, mime_type)


@runtime_checkable
class ImageDecoder(Protocol):
    def decode(self, data: bytes, mime_type: str) -> PixelBuffer:
        """Decodes uploaded bytes, raises DecodeError on failure."""
        ...


@runtime_checkable
class ImageEncoder(Protocol):
    def encode(self, layer: Layer) -> bytes:
        """Encodes a layer in the format of its format tag."""
        ...


@runtime_checkable
class Renderer(Protocol):
    def __call__(self, layer: Layer) -> Any:
        """Presents the given layer to the user."""
        ...


class PillowCodec:
    """Decoder and encoder backed by Pillow."""

    def __init__(self, max_pixels: int | None = None, jpeg_quality: int | None = None):
        """
        :param max_pixels: Largest accepted width * height.
            Defaults to ``settings.MAX_IMAGE_PIXELS``.
        :param jpeg_quality: JPEG quality (0-100). Defaults to ``settings.JPEG_QUALITY``.
        """
        self.max_pixels = settings.MAX_IMAGE_PIXELS if max_pixels is None else max_pixels
        self.jpeg_quality = settings.JPEG_QUALITY if jpeg_quality is None else jpeg_quality

    @staticmethod
    def detect_mime_type(data: bytes) -> str | None:
        """Detects the MIME type from the file's magic bytes."""
        mime = filetype.guess_mime(data)
        return normalize_mime_type(mime) if mime else None

    def decode(self, data: bytes, mime_type: str) -> PixelBuffer:
        """
        Decodes image bytes into an RGBA8 buffer.

        Animated images are reduced to their first frame.

        :param data: The uploaded file content
        :param mime_type: The declared MIME type
        :return: The decoded pixels
        :raises DecodeError: for empty, malformed, oversized or unsupported data
        """
        if not data:
            raise DecodeError("Empty image data")
        mime_type = normalize_mime_type(mime_type)
        if mime_type not in SUPPORTED_MIME_TYPES:
            raise DecodeError(f"Unsupported image type: {mime_type}")
        detected = self.detect_mime_type(data)
        if detected is not None and detected != mime_type:
            logger.warning(f"Declared type {mime_type} but content looks like {detected}")

        try:
            with PIL.Image.open(io.BytesIO(data)) as pil_img:
                width, height = pil_img.size
                if width * height > self.max_pixels:
                    raise DecodeError(
                        f"Image of {width}x{height} exceeds the limit of {self.max_pixels} pixels"
                    )
                pixels = np.asarray(pil_img.convert("RGBA"), dtype=np.uint8)
        except (PIL.Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
            raise DecodeError(f"Could not decode {mime_type} image: {e}") from e
        return PixelBuffer(pixels)

    def encode(self, layer: Layer) -> bytes:
        """
        Encodes a layer in the format named by its format tag.

        Formats without transparency get the image composited onto a white
        background.

        :param layer: The layer to encode
        :return: The encoded file content
        :raises EncodeError: if the format is not supported
        """
        pil_format = PIL_FORMATS.get(normalize_mime_type(layer.format_tag).split("/")[-1])
        if pil_format is None:
            raise EncodeError(f"Unsupported export format: {layer.format_tag}")

        pil_img = PIL.Image.fromarray(layer.buffer.to_rgba8().writable_copy())
        parameters = {}
        if pil_format in _OPAQUE_FORMATS:
            background = PIL.Image.new("RGB", pil_img.size, (255, 255, 255))
            background.paste(pil_img, (0, 0), pil_img)
            pil_img = background
        if pil_format == "JPEG":
            parameters["quality"] = self.jpeg_quality

        output_stream = io.BytesIO()
        try:
            pil_img.save(output_stream, format=pil_format, **parameters)
        except (OSError, ValueError) as e:
            raise EncodeError(f"Could not encode {layer.format_tag}: {e}") from e
        return output_stream.getvalue()


class DataUrlRenderer:
    """Renders layers to ``data:`` URLs, e.g. for a browser preview.

    Layers whose format tag can not be encoded are rendered as PNG, the way a
    browser canvas falls back for unknown types.
    """

    FALLBACK_FORMAT = "image/png"

    def __init__(self, encoder: ImageEncoder | None = None):
        self.encoder = encoder if encoder is not None else PillowCodec()
        self.last_url: str | None = None

    def __call__(self, layer: Layer) -> str:
        format_tag = normalize_mime_type(layer.format_tag)
        if format_tag not in SUPPORTED_MIME_TYPES:
            logger.debug(f"Rendering {layer.format_tag} layer as {self.FALLBACK_FORMAT}")
            format_tag = self.FALLBACK_FORMAT
            layer = replace(layer, format_tag=format_tag)
        data = self.encoder.encode(layer)
        encoded = base64.b64encode(data).decode("ascii")
        self.last_url = f"data:{format_tag};base64,{encoded}"
        return self.last_url


__all__ = [
    'ImageDecoder', 'ImageEncoder', 'Renderer',
    'PillowCodec', 'DataUrlRenderer',
    'PIL_FORMATS', 'SUPPORTED_MIME_TYPES', 'normalize_mime_type',
]
