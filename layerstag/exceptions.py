"""Exception classes for the editing core."""


class LayerstagError(Exception):
    """Base exception for layerstag errors."""

    pass


class EmptyHistoryError(LayerstagError):
    """Raised when the current layer is requested before any image was loaded."""

    pass


class DecodeError(LayerstagError):
    """Raised for malformed or unsupported uploaded image data."""

    pass


class EncodeError(LayerstagError):
    """Raised when a layer cannot be encoded in its format."""

    pass


class InvalidFilterInputError(LayerstagError):
    """Raised when a filter is invoked on a zero-dimension buffer."""

    pass
