"""
Linear undo/redo history of image layers.

The history owns two stacks of :class:`Layer`:

- ``undo_stack``: bottom = the uploaded original, top = the visible state
- ``redo_stack``: top = the most recently undone state

The original layer is never undone. Operations on an empty history are silent
no-ops, only :meth:`LayerHistory.top` raises :class:`EmptyHistoryError`.
Every operation either commits all of its stack changes or none.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable

from .config import settings
from .exceptions import EmptyHistoryError
from .pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)

ORIGINAL_LABEL = "original"
"Label of a freshly uploaded layer"


@dataclass(frozen=True)
class Layer:
    """One snapshot of the edited image."""

    buffer: PixelBuffer
    format_tag: str  # MIME type of the upload, e.g. "image/png"
    label: str = ORIGINAL_LABEL  # Operation that produced this layer

    @property
    def width(self) -> int:
        return self.buffer.width

    @property
    def height(self) -> int:
        return self.buffer.height

    @property
    def subtype(self) -> str:
        """Part of the format tag after the slash, e.g. "png"."""
        return self.format_tag.split("/")[-1]

    @property
    def export_filename(self) -> str:
        return f"result.{self.subtype}"

    def derive(self, buffer: PixelBuffer, label: str) -> Layer:
        """Returns a new layer with the same format tag."""
        return replace(self, buffer=buffer, label=label)


class LayerHistory:
    """Undo/redo stacks of layers for one editing session.

    Not safe for concurrent mutation.
    """

    def __init__(self, clear_redo_on_apply: bool | None = None):
        """
        :param clear_redo_on_apply: If True, applying a filter discards all
            redo entries. Defaults to ``settings.CLEAR_REDO_ON_APPLY``.
        """
        self._undo: list[Layer] = []
        self._redo: list[Layer] = []
        if clear_redo_on_apply is None:
            clear_redo_on_apply = settings.CLEAR_REDO_ON_APPLY
        self.clear_redo_on_apply = clear_redo_on_apply

    # ---- state ----

    @property
    def is_empty(self) -> bool:
        """True until the first :meth:`reset`."""
        return not self._undo

    @property
    def can_undo(self) -> bool:
        return len(self._undo) > 1

    @property
    def can_redo(self) -> bool:
        return len(self._redo) > 0

    @property
    def undo_stack(self) -> tuple[Layer, ...]:
        """Snapshot of the undo stack, bottom first."""
        return tuple(self._undo)

    @property
    def redo_stack(self) -> tuple[Layer, ...]:
        """Snapshot of the redo stack, bottom first."""
        return tuple(self._redo)

    @property
    def original(self) -> Layer:
        """The uploaded layer at the bottom of the undo stack."""
        if not self._undo:
            raise EmptyHistoryError("No image loaded")
        return self._undo[0]

    def __len__(self) -> int:
        return len(self._undo)

    def top(self) -> Layer:
        """
        Returns the currently visible layer.

        :raises EmptyHistoryError: if no image was loaded yet
        """
        if not self._undo:
            raise EmptyHistoryError("No image loaded")
        return self._undo[-1]

    # ---- transitions ----

    def reset(self, layer: Layer) -> None:
        """Discards both stacks and starts over with ``layer``."""
        self._undo = [layer]
        self._redo = []
        logger.debug(f"History reset with {layer.width}x{layer.height} {layer.format_tag} layer")

    def push(self, layer: Layer) -> None:
        """Pushes a layer on top of the undo stack.

        No-op on an empty history.
        """
        if not self._undo:
            return
        self._undo.append(layer)
        if self.clear_redo_on_apply:
            self._redo.clear()

    def apply_filter(self, image_filter: Callable[[PixelBuffer], PixelBuffer]) -> Layer | None:
        """
        Applies a filter to the top layer and pushes the result.

        The filter runs before any stack is touched, so a failing filter leaves
        the history unchanged.

        :param image_filter: A :class:`~layerstag.filters.BaseFilter` or any
            callable mapping a PixelBuffer to a new PixelBuffer
        :return: The new top layer, None if the history is empty
        """
        if not self._undo:
            return None
        current = self._undo[-1]
        buffer = image_filter(current.buffer)
        label = getattr(image_filter, "filter_type", None) or getattr(
            image_filter, "__name__", "filter"
        )
        layer = current.derive(buffer, label)
        self.push(layer)
        logger.debug(f"Applied {label}, {len(self._undo)} layers, {len(self._redo)} redoable")
        return layer

    def undo(self) -> bool:
        """
        Moves the top layer to the redo stack.

        :return: True if the visible layer changed, False if there was nothing
            to undo
        """
        if len(self._undo) <= 1:
            return False
        self._redo.append(self._undo.pop())
        logger.debug(f"Undo, {len(self._undo)} layers, {len(self._redo)} redoable")
        return True

    def redo(self) -> bool:
        """
        Moves the most recently undone layer back onto the undo stack.

        :return: True if the visible layer changed, False if there was nothing
            to redo
        """
        if not self._redo:
            return False
        self._undo.append(self._redo.pop())
        logger.debug(f"Redo, {len(self._undo)} layers, {len(self._redo)} redoable")
        return True

    def __repr__(self) -> str:
        return f"LayerHistory(undo={len(self._undo)}, redo={len(self._redo)})"
