from __future__ import annotations

from typing import Any, Callable, ClassVar, Dict, Type

from carbon_intensity.core.registry import VariantRegistry, registration_decorator


class DataSourceRegistry(VariantRegistry):
    role: ClassVar[str] = "data-source"
    _registry: ClassVar[Dict[str, Type[Any]]] = {}


def register_data_source(name: str, *, overwrite: bool = False) -> Callable[[Type[Any]], Type[Any]]:
    return registration_decorator(DataSourceRegistry, name, overwrite)
