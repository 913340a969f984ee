from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, field_validator


class CO2SignalSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    base_url: str = "https://api.co2signal.com"
    api_version: str = "v1/latest"
    zones_url: str = "https://api.electricitymap.org/v3/zones"

    # Name of the environment variable holding the API key (never the key itself).
    api_key_env: str = "CO2SIGNAL_API_KEY"
    timeout_seconds: PositiveFloat = 10.0

    # The free API tier cannot serve every zone, so discovery is opt-in and the
    # built-in zone list is used otherwise.
    discover_zones: bool = False
    zones: Optional[List[str]] = None

    @field_validator("zones", mode="before")
    @classmethod
    def _split_zone_string(cls, value):
        # .properties files carry lists as comma-separated strings
        if isinstance(value, str):
            return [z.strip() for z in value.split(",") if z.strip()]
        return value


class SimulatorSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    zones: List[str] = Field(default_factory=lambda: ["DE", "FR", "GB", "US-CAL-CISO"])
    seed: Optional[int] = None

    @field_validator("zones", mode="before")
    @classmethod
    def _split_zone_string(cls, value):
        if isinstance(value, str):
            return [z.strip() for z in value.split(",") if z.strip()]
        return value
