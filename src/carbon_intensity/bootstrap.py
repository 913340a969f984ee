from __future__ import annotations

import importlib
import sys
from typing import Iterable


BUILTIN_PLUGIN_MODULES: tuple[str, ...] = (
    # Data sources
    "carbon_intensity.data_sources.co2_signal",
    "carbon_intensity.data_sources.simulator",
    "carbon_intensity.wiring.data_source_wiring",

    # Readers
    "carbon_intensity.readers.one_shot",
    "carbon_intensity.readers.timer",
    "carbon_intensity.wiring.reader_wiring",

    # Publishers
    "carbon_intensity.publishers.console",
    "carbon_intensity.publishers.kafka",
    "carbon_intensity.wiring.publisher_wiring",
)


_LOADED = False


def clear_registries() -> None:
    from carbon_intensity.data_sources.registry import DataSourceRegistry
    from carbon_intensity.publishers.registry import PublisherRegistry
    from carbon_intensity.readers.registry import ReaderRegistry
    from carbon_intensity.wiring.registry import WiringRegistry

    DataSourceRegistry.clear()
    ReaderRegistry.clear()
    PublisherRegistry.clear()
    WiringRegistry.clear()


def load_builtin_plugins(*, reload: bool = False, modules: Iterable[str] = BUILTIN_PLUGIN_MODULES) -> None:
    """Import built-in variant + wiring modules so their decorators register them.

    In production, call with reload=False (default) so imports are cheap.
    In tests, call with reload=True to clear the registries and re-run decorators.
    """

    global _LOADED

    if _LOADED and not reload:
        return

    if reload:
        clear_registries()

    for module_name in modules:
        if reload:
            sys.modules.pop(module_name, None)
        importlib.import_module(module_name)

    _LOADED = True
