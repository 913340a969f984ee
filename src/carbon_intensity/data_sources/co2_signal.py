from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

import httpx

from carbon_intensity.core.contracts import DataSourceDetails
from carbon_intensity.core.exceptions import ConfigError, DataSourceError
from carbon_intensity.data_sources.base import BaseDataSource
from carbon_intensity.data_sources.registry import register_data_source
from carbon_intensity.data_sources.types import CarbonIntensityRecord, CO2SignalConnection

AUTH_HEADER = "auth-token"

# Zones served when discovery is disabled or fails. The free CO2 Signal tier
# only answers for a subset of zones, so this list is the practical default.
DEFAULT_ZONES: tuple[str, ...] = (
    "US-AK", "US-CAL-BANC", "US-CAL-CISO", "US-CAL-IID", "US-CAL-LDWP",
    "US-CAR-CPLW", "US-CAR-DUK", "US-CAR-SC", "US-CAR-SCEG", "US-CAR-YAD",
    "US-CENT-SPA", "US-CENT-SWPP", "US-FLA-FMPP", "US-FLA-FPC", "US-FLA-FPL",
    "US-FLA-GVL", "US-FLA-SEC", "US-FLA-TAL", "US-FLA-TEC", "US-MIDA-PJM",
    "US-MIDW-AECI", "US-MIDW-GLHB", "US-MIDW-LGEE", "US-MIDW-MISO", "US-NE-ISNE",
    "US-NW-AVA", "US-NW-GCPD", "US-NW-GRID", "US-NW-GWA", "US-NW-IPCO",
)


def _get_path(body: Any, *path: str) -> Any:
    node = body
    for part in path:
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def parse_response(body: Any) -> Optional[CarbonIntensityRecord]:
    """Extract a reading from a CO2 Signal ``/v1/latest`` response.

    Returns None unless every required field is present with the expected type.
    The record key is the response's country code.
    """
    country_code = _get_path(body, "countryCode")
    status = _get_path(body, "status")
    dt = _get_path(body, "data", "datetime")
    intensity = _as_number(_get_path(body, "data", "carbonIntensity"))
    fossil = _as_number(_get_path(body, "data", "fossilFuelPercentage"))
    units = _get_path(body, "units")

    if not isinstance(country_code, str) or not country_code:
        return None
    if not isinstance(status, str) or not isinstance(dt, str):
        return None
    if intensity is None or fossil is None:
        return None
    if not isinstance(units, dict) or not units:
        return None

    unit_name = sorted(units)[0]
    unit_value = units.get("carbonIntensity")
    if not isinstance(unit_value, str):
        return None

    return CarbonIntensityRecord(
        key=country_code,
        country_code=country_code,
        status=status,
        datetime=dt,
        carbon_intensity=intensity,
        fossil_fuel_percentage=fossil,
        unit_name=unit_name,
        unit_value=unit_value,
    )


@register_data_source("co2-signal")
class CO2SignalDataSource(BaseDataSource):
    """Carbon intensity of electricity generation from co2signal.com.

    GET ``<base_url>/<api_version>?countryCode=<zone>`` with the API key in the
    ``auth-token`` header. One request per zone; the reader owns rate limiting.
    """

    def __init__(
        self,
        connection: CO2SignalConnection,
        *,
        client: Optional[httpx.Client] = None,
    ):
        super().__init__()
        self.connection = connection
        self._api_key: Optional[str] = None
        self._client = client or httpx.Client(
            base_url=connection.base_url,
            timeout=connection.timeout_seconds,
        )

    def initialise(self) -> None:
        value = os.environ.get(self.connection.api_key_env, "")
        if not value:
            raise ConfigError(
                f"API-key environment variable ({self.connection.api_key_env}) not set"
            )
        self._api_key = value

    def available_zones(self) -> List[str]:
        if self.connection.zones:
            return list(self.connection.zones)

        if self.connection.discover_zones:
            try:
                zones = self._discover_zones()
            except DataSourceError as exc:
                self.log.warning(f"Zone discovery failed, using built-in zone list: {exc}")
            else:
                if zones:
                    self.log.info(f"Discovered {len(zones)} zones")
                    return zones
                self.log.warning("Zone discovery returned no zones, using built-in zone list")

        return list(DEFAULT_ZONES)

    def _discover_zones(self) -> List[str]:
        body = self._get_json(self.connection.zones_url)
        if not isinstance(body, dict):
            raise DataSourceError(f"Unexpected zones response type: {type(body).__name__}")
        return [str(k) for k in body.keys()]

    def readings(self, zone: str) -> List[DataSourceDetails]:
        if self._api_key is None:
            raise ConfigError("CO2SignalDataSource.initialise() must be called before readings()")

        self.log.debug(f"Requesting carbon intensity for zone={zone}")
        body = self._get_json(
            f"/{self.connection.api_version}",
            params={"countryCode": zone},
            headers={AUTH_HEADER: self._api_key},
            zone=zone,
        )

        record = parse_response(body)
        if record is None:
            self.log.warning(f"No usable reading in response for zone={zone}")
            return []

        self.log.debug(f"Parsed reading: {record.key}")
        return [DataSourceDetails(zone_key=record.key, payload=record.to_json())]

    def _get_json(
        self,
        url: str,
        *,
        params: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
        zone: Optional[str] = None,
    ) -> Any:
        try:
            resp = self._client.get(url, params=params, headers=headers)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise DataSourceError(
                f"HTTP {exc.response.status_code} from {url}", zone=zone
            ) from exc
        except httpx.HTTPError as exc:
            raise DataSourceError(f"Request to {url} failed: {exc}", zone=zone) from exc

        try:
            return resp.json()
        except ValueError as exc:
            content_type = resp.headers.get("content-type", "unknown")
            raise DataSourceError(
                f"Failed to parse response as JSON. Content-Type: {content_type}. "
                f"Response preview: {resp.text[:200]}",
                zone=zone,
            ) from exc

    def close(self) -> None:
        self._client.close()
