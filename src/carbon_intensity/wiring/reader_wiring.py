from __future__ import annotations

from carbon_intensity.core.exceptions import ZoneFailurePolicy
from carbon_intensity.models.app_config import AppConfig
from carbon_intensity.readers.registry import ReaderRegistry
from carbon_intensity.readers.types import ReaderOptions
from carbon_intensity.wiring.registry import BuiltArgs, register_wiring

ROLE = ReaderRegistry.role


def build_reader_options(config: AppConfig) -> ReaderOptions:
    cfg = config.reader_settings
    return ReaderOptions(
        rate_limit_seconds=float(cfg.rate_limit_seconds),
        send_poll_seconds=float(cfg.send_poll_seconds),
        zone_failure_policy=ZoneFailurePolicy(cfg.zone_failure_policy),
        period_seconds=float(cfg.period_seconds),
        max_sweeps=cfg.max_sweeps,
    )


@register_wiring(role=ROLE, name="one-shot")
def build_one_shot_args(*, config: AppConfig) -> BuiltArgs:
    return BuiltArgs(args=(build_reader_options(config),))


@register_wiring(role=ROLE, name="time-reader")
def build_time_reader_args(*, config: AppConfig) -> BuiltArgs:
    return BuiltArgs(args=(build_reader_options(config),))
