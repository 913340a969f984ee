from __future__ import annotations

from carbon_intensity.data_sources.registry import DataSourceRegistry
from carbon_intensity.data_sources.types import CO2SignalConnection, SimulatorOptions
from carbon_intensity.models.app_config import AppConfig
from carbon_intensity.wiring.registry import BuiltArgs, register_wiring

ROLE = DataSourceRegistry.role


def build_co2_signal_connection(config: AppConfig) -> CO2SignalConnection:
    # This wiring module is the only layer allowed to read Pydantic config.
    cfg = config.co2_signal
    return CO2SignalConnection(
        base_url=cfg.base_url,
        api_version=cfg.api_version.strip("/"),
        zones_url=cfg.zones_url,
        api_key_env=cfg.api_key_env,
        timeout_seconds=float(cfg.timeout_seconds),
        discover_zones=cfg.discover_zones,
        zones=tuple(cfg.zones) if cfg.zones else None,
    )


@register_wiring(role=ROLE, name="co2-signal")
def build_co2_signal_args(*, config: AppConfig) -> BuiltArgs:
    # Let the data source construct its own HTTP client (base_url + timeout).
    return BuiltArgs(args=(build_co2_signal_connection(config),))


@register_wiring(role=ROLE, name="simulator")
def build_simulator_args(*, config: AppConfig) -> BuiltArgs:
    cfg = config.simulator
    return BuiltArgs(args=(SimulatorOptions(zones=tuple(cfg.zones), seed=cfg.seed),))
