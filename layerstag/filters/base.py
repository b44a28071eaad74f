"""Base filter class using Pydantic BaseModel."""

import logging
import time
import uuid
from abc import ABC, abstractmethod
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

from layerstag.exceptions import InvalidFilterInputError
from layerstag.pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)


def require_non_empty(buffer: PixelBuffer, name: str = "filter") -> None:
    """Raise InvalidFilterInputError for a buffer with zero width or height."""
    if buffer.is_empty:
        raise InvalidFilterInputError(
            f"{name} cannot be applied to a {buffer.width}x{buffer.height} buffer"
        )


class BaseFilter(BaseModel, ABC):
    """Base class for all image filters.

    Uses Pydantic BaseModel for serialization and validation of the filter
    parameters. Filters are pure: ``apply`` never modifies its input and
    always returns a new RGBA8 buffer of the same size.

    Each filter has a VERSION class attribute for serialization migration.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        validate_assignment=False,
        extra='ignore',
    )

    # ClassVar metadata (not serialized as fields)
    filter_type: ClassVar[str] = "base"
    name: ClassVar[str] = "Base Filter"
    description: ClassVar[str] = "Base filter description"
    category: ClassVar[str] = "uncategorized"
    VERSION: ClassVar[int] = 1

    # Registry of filter classes by filter_type
    _registry: ClassVar[dict[str, type['BaseFilter']]] = {}

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    enabled: bool = Field(default=True)

    def __init_subclass__(cls, **kwargs):
        """Register filter subclass in registry."""
        super().__init_subclass__(**kwargs)
        if hasattr(cls, 'filter_type') and cls.filter_type != "base":
            BaseFilter._registry[cls.filter_type] = cls

    @abstractmethod
    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        """Apply the filter to a buffer.

        Params are instance attributes, not **kwargs.

        Args:
            buffer: RGBA8 buffer with non-zero width and height

        Returns:
            Filtered RGBA8 buffer of the same size
        """
        pass

    def __call__(self, buffer: PixelBuffer) -> PixelBuffer:
        """Validate the input, then apply the filter.

        Disabled filters return the input unchanged.

        Raises:
            InvalidFilterInputError: if the buffer has a zero width or height
        """
        require_non_empty(buffer, self.name)
        if not self.enabled:
            return buffer
        start = time.perf_counter()
        result = self.apply(buffer.to_rgba8())
        logger.debug(
            f"{self.filter_type} on {buffer.width}x{buffer.height} took "
            f"{(time.perf_counter() - start) * 1000:.1f} ms"
        )
        return result

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    # Fields that are base infrastructure, not algorithm params
    _BASE_FIELDS: ClassVar[frozenset[str]] = frozenset({'id', 'enabled'})

    @property
    def params(self) -> dict[str, Any]:
        """Algorithm parameters of this filter instance."""
        return {
            field_name: getattr(self, field_name)
            for field_name in type(self).model_fields
            if field_name not in self._BASE_FIELDS
        }

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dictionary."""
        return {
            'id': self.id,
            'filterId': self.filter_type,
            'name': self.name,
            'enabled': self.enabled,
            'params': self.model_dump(mode='json', include=set(self.params)),
            '_version': self.VERSION,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'BaseFilter':
        """Deserialize from the :meth:`to_dict` format."""
        filter_type = data.get('filterId') or data.get('type', 'base')
        filter_cls = cls._registry.get(filter_type)
        if filter_cls is None:
            raise ValueError(f"Unknown filter type: {filter_type}")
        params = data.get('params', {})
        return filter_cls(
            id=data.get('id', str(uuid.uuid4())),
            enabled=data.get('enabled', True),
            **params,
        )
