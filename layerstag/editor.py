"""
Editing session controller.

:class:`ImageEditor` connects the collaborators (decoder, encoder, renderer)
with a :class:`~layerstag.history.LayerHistory`. A user interface forwards its
button clicks to :meth:`ImageEditor.apply`, :meth:`ImageEditor.undo` and
:meth:`ImageEditor.redo`, uploads to :meth:`ImageEditor.load` and the
download button to :meth:`ImageEditor.export`.
"""

from __future__ import annotations

import logging
from typing import Union

from .codec import ImageDecoder, ImageEncoder, PillowCodec, Renderer, normalize_mime_type
from .config import settings
from .exceptions import DecodeError
from .filters import BaseFilter, FilterKind, create_filter
from .history import Layer, LayerHistory
from .pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)

FilterAction = Union[FilterKind, str, BaseFilter]
"An editor action: a FilterKind, its string value or a filter instance"


class ImageEditor:
    """One editing session: an uploaded image and its filter history."""

    def __init__(
        self,
        decoder: ImageDecoder | None = None,
        encoder: ImageEncoder | None = None,
        renderer: Renderer | None = None,
        history: LayerHistory | None = None,
    ):
        """
        :param decoder: Turns uploaded bytes into pixels. Defaults to PillowCodec.
        :param encoder: Turns the current layer into file bytes. Defaults to
            the decoder if it can encode, otherwise PillowCodec.
        :param renderer: Called with the visible layer whenever it changes,
            after the history was updated. Errors raised by the renderer
            propagate and do not roll the history back.
        :param history: The history to operate on, a new one by default
        """
        self.decoder = decoder if decoder is not None else PillowCodec()
        if encoder is None:
            encoder = self.decoder if isinstance(self.decoder, ImageEncoder) else PillowCodec()
        self.encoder = encoder
        self.renderer = renderer
        self.history = history if history is not None else LayerHistory()

    @property
    def current(self) -> Layer | None:
        """The visible layer, None before the first upload."""
        if self.history.is_empty:
            return None
        return self.history.top()

    def top(self) -> Layer:
        """The visible layer, raises EmptyHistoryError before the first upload."""
        return self.history.top()

    def load(self, data: bytes, mime_type: str | None = None) -> Layer:
        """
        Decodes an upload and starts a new history with it.

        :param data: The uploaded file content
        :param mime_type: Declared MIME type, detected from the content if omitted
        :return: The new original layer
        :raises DecodeError: if the data can not be decoded. The history is
            left untouched.
        """
        if mime_type is None:
            mime_type = PillowCodec.detect_mime_type(data) if data else None
            if mime_type is None:
                raise DecodeError("Could not detect the image type")
        mime_type = normalize_mime_type(mime_type)
        try:
            buffer = self.decoder.decode(data, mime_type)
        except DecodeError as e:
            logger.warning(f"Rejected upload: {e}")
            raise
        layer = self.load_buffer(buffer, mime_type)
        logger.info(f"Loaded {buffer.width}x{buffer.height} {mime_type} image")
        return layer

    def load_buffer(self, buffer: PixelBuffer, format_tag: str | None = None) -> Layer:
        """Starts a new history with already decoded pixels."""
        layer = Layer(buffer, format_tag or settings.DEFAULT_FORMAT)
        self.history.reset(layer)
        self._render()
        return layer

    def apply(self, kind: FilterAction) -> Layer | None:
        """
        Applies a filter to the visible layer.

        :param kind: FilterKind, kind string (e.g. "flip_v") or filter instance
        :return: The new layer, None if no image is loaded
        """
        image_filter = kind if isinstance(kind, BaseFilter) else create_filter(kind)
        layer = self.history.apply_filter(image_filter)
        if layer is not None:
            self._render()
        return layer

    def undo(self) -> bool:
        """Reverts the last filter. Returns True if the visible layer changed."""
        changed = self.history.undo()
        if changed:
            self._render()
        return changed

    def redo(self) -> bool:
        """Re-applies the last undone filter. Returns True if the visible layer changed."""
        changed = self.history.redo()
        if changed:
            self._render()
        return changed

    def export(self) -> tuple[str, bytes]:
        """
        Encodes the visible layer for download.

        :return: (filename, data) where filename is ``result.<subtype>``
        :raises EmptyHistoryError: if no image was loaded
        """
        layer = self.history.top()
        data = self.encoder.encode(layer)
        logger.info(f"Exported {layer.export_filename} ({len(data)} bytes)")
        return layer.export_filename, data

    def _render(self) -> None:
        if self.renderer is not None:
            self.renderer(self.history.top())
