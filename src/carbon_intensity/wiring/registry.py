from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Dict, Tuple

from carbon_intensity.core.exceptions import DuplicateVariantError, UnknownVariantError


WiringKey = Tuple[str, str]


@dataclass(frozen=True)
class BuiltArgs:
    args: Tuple[Any, ...] = ()
    kwargs: Dict[str, Any] = field(default_factory=dict)


BuilderFn = Callable[..., BuiltArgs]


class WiringRegistry:
    """(role, variant name) → builder turning AppConfig into constructor arguments."""

    _registry: ClassVar[Dict[WiringKey, BuilderFn]] = {}

    @classmethod
    def register(cls, *, role: str, name: str, builder: BuilderFn, overwrite: bool = False) -> None:
        key = (role, name)
        if not overwrite and key in cls._registry:
            raise DuplicateVariantError(f"Wiring already registered for role={role!r}, name={name!r}")
        cls._registry[key] = builder

    @classmethod
    def get(cls, role: str, name: str) -> BuilderFn:
        try:
            return cls._registry[(role, name)]
        except KeyError:
            options = [n for (r, n) in cls._registry if r == role]
            raise UnknownVariantError(role, name, options) from None

    @classmethod
    def clear(cls) -> None:
        cls._registry.clear()


def register_wiring(*, role: str, name: str, overwrite: bool = False) -> Callable[[BuilderFn], BuilderFn]:
    def decorator(builder: BuilderFn) -> BuilderFn:
        WiringRegistry.register(role=role, name=name, builder=builder, overwrite=overwrite)
        return builder

    return decorator
