from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Optional, Sequence, Tuple


@dataclass(frozen=True)
class CO2SignalConnection:
    base_url: str
    api_version: str
    zones_url: str
    api_key_env: str
    timeout_seconds: float
    discover_zones: bool = False
    zones: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class SimulatorOptions:
    zones: Sequence[str]
    seed: Optional[int] = None


@dataclass(frozen=True)
class CarbonIntensityRecord:
    """Normalised carbon-intensity reading; serialized as the published payload."""
    key: str
    country_code: str
    status: str
    datetime: str
    carbon_intensity: float
    fossil_fuel_percentage: float
    unit_name: str
    unit_value: str
    country_name: str = ""
    zone_name: str = ""

    def to_json(self) -> str:
        return json.dumps(asdict(self), separators=(",", ":"))
