from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass(frozen=True)
class KafkaConnection:
    bootstrap_servers: str
    topic: str
    client_id: Optional[str] = None
    producer_options: Dict[str, str] = field(default_factory=dict)
    connect_timeout_seconds: float = 10.0
    flush_timeout_seconds: float = 10.0
    max_consecutive_failures: int = 10

    def producer_config(self) -> Dict[str, str]:
        config = {"bootstrap.servers": self.bootstrap_servers}
        if self.client_id:
            config["client.id"] = self.client_id
        config.update(self.producer_options)
        return config
