from __future__ import annotations

from typing import Any, Callable, ClassVar, Dict, List, Optional, Type

from carbon_intensity.core.exceptions import DuplicateVariantError, UnknownVariantError


class VariantRegistry:
    """Name → implementation class, one registry per role.

    Subclasses set ``role`` (the configuration key the variant is selected by)
    and their own ``_registry`` dict so roles never share entries.
    """

    role: ClassVar[str] = "variant"
    _registry: ClassVar[Dict[str, Type[Any]]]

    @classmethod
    def register(cls, *, name: str, variant_class: Type[Any], overwrite: bool = False) -> None:
        if not overwrite and name in cls._registry:
            existing = cls._registry[name]
            raise DuplicateVariantError(f"{cls.role} already registered for name={name!r}: {existing}")
        cls._registry[name] = variant_class

    @classmethod
    def get(cls, name: str) -> Type[Any]:
        try:
            return cls._registry[name]
        except KeyError:
            raise UnknownVariantError(cls.role, name, cls.names()) from None

    @classmethod
    def try_get(cls, name: str) -> Optional[Type[Any]]:
        return cls._registry.get(name)

    @classmethod
    def names(cls) -> List[str]:
        return sorted(cls._registry)

    @classmethod
    def clear(cls) -> None:
        cls._registry.clear()


def registration_decorator(
    registry: Type[VariantRegistry],
    name: str,
    overwrite: bool = False,
) -> Callable[[Type[Any]], Type[Any]]:
    def decorator(variant_class: Type[Any]) -> Type[Any]:
        registry.register(name=name, variant_class=variant_class, overwrite=overwrite)
        return variant_class

    return decorator
