"""
Filters package.

Every filter exists twice: as a pure function over a PixelBuffer
(``grayscale``, ``flip``, ``blur``, ``edges``) and as a registered Pydantic
filter class that the layer history can apply.
"""

from .base import BaseFilter
from .registry import (
    FilterKind,
    create_filter,
    filter_registry,
    load_builtin_filters,
    register_filter,
)
from .color import GrayscaleFilter, grayscale
from .geometric import FlipAxis, FlipFilter, flip
from .blur import BlurFilter, BlurMode, blur, blur_offsets, blur_weights
from .edge import SobelEdgeFilter, edges

__all__ = [
    # Base
    'BaseFilter',
    'filter_registry',
    'register_filter',
    'load_builtin_filters',
    'FilterKind',
    'create_filter',
    # Color
    'GrayscaleFilter',
    'grayscale',
    # Geometric
    'FlipAxis',
    'FlipFilter',
    'flip',
    # Blur
    'BlurFilter',
    'BlurMode',
    'blur',
    'blur_offsets',
    'blur_weights',
    # Edge
    'SobelEdgeFilter',
    'edges',
]
