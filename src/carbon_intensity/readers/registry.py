from __future__ import annotations

from typing import Any, Callable, ClassVar, Dict, Type

from carbon_intensity.core.registry import VariantRegistry, registration_decorator


class ReaderRegistry(VariantRegistry):
    role: ClassVar[str] = "reader"
    _registry: ClassVar[Dict[str, Type[Any]]] = {}


def register_reader(name: str, *, overwrite: bool = False) -> Callable[[Type[Any]], Type[Any]]:
    return registration_decorator(ReaderRegistry, name, overwrite)
