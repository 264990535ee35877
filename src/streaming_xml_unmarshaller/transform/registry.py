"""Registry mapping result types to their unmarshallers.

Unmarshallers carry no per-call state, so one instance per result type is
enough. The registry builds it on first request and hands the same instance
out afterwards. Two threads racing on the first request may both build one;
``dict.setdefault`` keeps a single winner and the loser's copy is equivalent.
"""

import dataclasses
import functools
from typing import Any, Callable, Dict, List, Optional

from streaming_xml_unmarshaller.shared.errors import UnknownResultTypeError

from .base import Unmarshaller
from .struct import StructUnmarshaller

UnmarshallerFactory = Callable[[], Unmarshaller[Any]]


class UnmarshallerRegistry:
    """Lazily built, memoised unmarshallers keyed by result type."""

    def __init__(self) -> None:
        self._factories: Dict[type, UnmarshallerFactory] = {}
        self._instances: Dict[type, Unmarshaller[Any]] = {}
        self._types_by_name: Dict[str, type] = {}

    def __contains__(self, result_type: object) -> bool:
        return result_type in self._factories or result_type in self._instances

    def __len__(self) -> int:
        return len(self._types_by_name)

    def register(
        self,
        result_type: type,
        factory: Optional[UnmarshallerFactory] = None,
        name: Optional[str] = None,
    ) -> None:
        """Register a result type.

        Args:
            result_type: Type produced by the unmarshaller
            factory: Builds the unmarshaller; dataclasses declared with
                ``xml_field`` need none
            name: Lookup name for :meth:`lookup`, defaults to the class name
        """
        if factory is None and not dataclasses.is_dataclass(result_type):
            raise TypeError(f"{result_type!r} needs an explicit factory")
        if factory is not None:
            self._factories[result_type] = factory
        self._instances.pop(result_type, None)
        self._types_by_name[name or result_type.__name__] = result_type

    def get(self, result_type: type) -> Unmarshaller[Any]:
        """Return the shared unmarshaller for ``result_type``, building it once."""
        instance = self._instances.get(result_type)
        if instance is None:
            instance = self._instances.setdefault(result_type, self._build(result_type))
        return instance

    def lookup(self, name: str) -> type:
        """Return the result type registered under ``name``."""
        try:
            return self._types_by_name[name]
        except KeyError:
            raise UnknownResultTypeError(name) from None

    def names(self) -> List[str]:
        return sorted(self._types_by_name)

    def _build(self, result_type: type) -> Unmarshaller[Any]:
        factory = self._factories.get(result_type)
        if factory is not None:
            return factory()
        if dataclasses.is_dataclass(result_type):
            return StructUnmarshaller.for_dataclass(result_type, resolve=self.get)
        raise UnknownResultTypeError(getattr(result_type, "__name__", repr(result_type)))


@functools.lru_cache(maxsize=None)
def default_registry() -> UnmarshallerRegistry:
    """Registry pre-loaded with the bundled response models."""
    from streaming_xml_unmarshaller.models import register_models

    registry = UnmarshallerRegistry()
    register_models(registry)
    return registry
