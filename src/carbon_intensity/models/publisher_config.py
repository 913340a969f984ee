from __future__ import annotations

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, PositiveInt


class KafkaSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    bootstrap_servers: str = "localhost:9092"
    topic: str = "carbon-intensity"
    client_id: Optional[str] = "carbon-intensity"

    # Passed verbatim to librdkafka, e.g. {"security.protocol": "SASL_SSL"}
    producer_options: Dict[str, str] = Field(default_factory=dict)

    connect_timeout_seconds: PositiveFloat = 10.0
    flush_timeout_seconds: PositiveFloat = 10.0

    # Consecutive full-queue drops or failed deliveries before the broker is treated as lost.
    max_consecutive_failures: PositiveInt = 10


class ConsoleSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    separator: str = " | "
