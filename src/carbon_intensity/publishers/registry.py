from __future__ import annotations

from typing import Any, Callable, ClassVar, Dict, Type

from carbon_intensity.core.registry import VariantRegistry, registration_decorator


class PublisherRegistry(VariantRegistry):
    role: ClassVar[str] = "data-publisher"
    _registry: ClassVar[Dict[str, Type[Any]]] = {}


def register_publisher(name: str, *, overwrite: bool = False) -> Callable[[Type[Any]], Type[Any]]:
    return registration_decorator(PublisherRegistry, name, overwrite)
