from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Dict, List

from carbon_intensity.core.contracts import DataSourceDetails
from carbon_intensity.data_sources.base import BaseDataSource
from carbon_intensity.data_sources.registry import register_data_source
from carbon_intensity.data_sources.types import CarbonIntensityRecord, SimulatorOptions

# Rough gCO2eq/kWh baselines; unknown zones use DEFAULT_BASELINE.
BASELINES: Dict[str, float] = {
    "DE": 380.0,
    "FR": 60.0,
    "GB": 200.0,
    "NO": 30.0,
    "PL": 700.0,
    "US-CAL-CISO": 230.0,
}
DEFAULT_BASELINE = 400.0


@register_data_source("simulator")
class SimulatorDataSource(BaseDataSource):
    """Offline data source producing one synthetic reading per zone.

    Useful for demonstrations and dry runs without an API key. Readings jitter
    around a per-zone baseline; pass a seed for reproducible output.
    """

    def __init__(self, options: SimulatorOptions):
        super().__init__()
        self.options = options
        self._rng = random.Random(options.seed)

    def available_zones(self) -> List[str]:
        return list(self.options.zones)

    def readings(self, zone: str) -> List[DataSourceDetails]:
        baseline = BASELINES.get(zone, DEFAULT_BASELINE)
        intensity = round(max(0.0, baseline * (1 + self._rng.uniform(-0.1, 0.1))), 2)
        fossil = round(min(100.0, intensity / 8.0), 2)

        record = CarbonIntensityRecord(
            key=zone,
            country_code=zone,
            status="ok",
            datetime=datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.000Z"),
            carbon_intensity=intensity,
            fossil_fuel_percentage=fossil,
            unit_name="carbonIntensity",
            unit_value="gCO2eq/kWh",
            zone_name="simulated",
        )
        return [DataSourceDetails(zone_key=record.key, payload=record.to_json())]
