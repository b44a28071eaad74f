"""Filter registry."""

from enum import Enum
from typing import Type, Union

from .base import BaseFilter

# Global filter registry
filter_registry: dict[str, Type[BaseFilter]] = {}


def register_filter(filter_id: str):
    """Decorator to register a filter class.

    Sets filter_type on the class and registers in both the module-level
    filter_registry and BaseFilter._registry.
    """

    def decorator(cls: Type[BaseFilter]):
        cls.filter_type = filter_id  # type: ignore[attr-defined]
        filter_registry[filter_id] = cls
        BaseFilter._registry[filter_id] = cls
        return cls

    return decorator


def load_builtin_filters():
    """Import all built-in filter modules to trigger registration."""
    from . import blur, color, edge, geometric  # noqa: F401


class FilterKind(str, Enum):
    """The filter actions offered by the editor."""
    GRAYSCALE = "grayscale"
    FLIP_H = "flip_h"
    FLIP_V = "flip_v"
    BLUR = "blur"
    EDGES = "edges"


def create_filter(kind: Union[FilterKind, str]) -> BaseFilter:
    """Create the filter instance for an editor action.

    Args:
        kind: A FilterKind or its string value (e.g. "flip_h")

    Returns:
        A new filter instance with default parameters

    Raises:
        ValueError: if the kind is unknown
    """
    from .geometric import FlipAxis

    try:
        kind = FilterKind(kind)
    except ValueError:
        raise ValueError(f"Unknown filter kind: {kind}") from None

    load_builtin_filters()
    if kind is FilterKind.FLIP_H:
        return filter_registry["flip"](axis=FlipAxis.HORIZONTAL)
    if kind is FilterKind.FLIP_V:
        return filter_registry["flip"](axis=FlipAxis.VERTICAL)
    return filter_registry[kind.value]()
