from __future__ import annotations

from carbon_intensity.models.app_config import AppConfig
from carbon_intensity.publishers.registry import PublisherRegistry
from carbon_intensity.publishers.types import KafkaConnection
from carbon_intensity.wiring.registry import BuiltArgs, register_wiring

ROLE = PublisherRegistry.role


def build_kafka_connection(config: AppConfig) -> KafkaConnection:
    cfg = config.kafka
    return KafkaConnection(
        bootstrap_servers=cfg.bootstrap_servers,
        topic=cfg.topic,
        client_id=cfg.client_id,
        producer_options=dict(cfg.producer_options),
        connect_timeout_seconds=float(cfg.connect_timeout_seconds),
        flush_timeout_seconds=float(cfg.flush_timeout_seconds),
        max_consecutive_failures=cfg.max_consecutive_failures,
    )


@register_wiring(role=ROLE, name="kafka-publisher")
def build_kafka_publisher_args(*, config: AppConfig) -> BuiltArgs:
    return BuiltArgs(args=(build_kafka_connection(config),))


@register_wiring(role=ROLE, name="console-publisher")
def build_console_publisher_args(*, config: AppConfig) -> BuiltArgs:
    return BuiltArgs(kwargs={"separator": config.console.separator})
