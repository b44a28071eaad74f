"""
layerstag - Layer history and pixel filter core of a raster image editor
"""

from .exceptions import (
    LayerstagError,
    EmptyHistoryError,
    DecodeError,
    EncodeError,
    InvalidFilterInputError,
)
from .config import Settings, settings
from .pixel_buffer import PixelBuffer, PixelFormat
from .convolution import ConvolutionKernel, convolve, SOBEL_HORIZONTAL, SOBEL_VERTICAL
from .filters import (
    BaseFilter,
    FilterKind,
    FlipAxis,
    create_filter,
    grayscale,
    flip,
    blur,
    edges,
)
from .history import Layer, LayerHistory
from .codec import ImageDecoder, ImageEncoder, Renderer, PillowCodec, DataUrlRenderer
from .editor import ImageEditor

__all__ = [
    # Errors
    "LayerstagError",
    "EmptyHistoryError",
    "DecodeError",
    "EncodeError",
    "InvalidFilterInputError",
    # Configuration
    "Settings",
    "settings",
    # Pixels
    "PixelBuffer",
    "PixelFormat",
    "ConvolutionKernel",
    "convolve",
    "SOBEL_HORIZONTAL",
    "SOBEL_VERTICAL",
    # Filters
    "BaseFilter",
    "FilterKind",
    "FlipAxis",
    "create_filter",
    "grayscale",
    "flip",
    "blur",
    "edges",
    # History
    "Layer",
    "LayerHistory",
    # Collaborators
    "ImageDecoder",
    "ImageEncoder",
    "Renderer",
    "PillowCodec",
    "DataUrlRenderer",
    # Controller
    "ImageEditor",
]

__version__ = "0.1.0"
