import json

from carbon_intensity.data_sources.simulator import BASELINES, SimulatorDataSource
from carbon_intensity.data_sources.types import SimulatorOptions


def test_simulator_returns_one_keyed_reading_per_zone():
    ds = SimulatorDataSource(SimulatorOptions(zones=("DE", "XX"), seed=1))

    assert ds.available_zones() == ["DE", "XX"]

    details = ds.readings("DE")
    assert len(details) == 1
    assert details[0].zone_key == "DE"

    payload = json.loads(details[0].payload)
    assert payload["status"] == "ok"
    assert payload["unit_value"] == "gCO2eq/kWh"
    assert abs(payload["carbon_intensity"] - BASELINES["DE"]) <= BASELINES["DE"] * 0.1 + 0.01


def test_simulator_is_reproducible_with_seed():
    first = SimulatorDataSource(SimulatorOptions(zones=("FR",), seed=7))
    second = SimulatorDataSource(SimulatorOptions(zones=("FR",), seed=7))

    a = json.loads(first.readings("FR")[0].payload)
    b = json.loads(second.readings("FR")[0].payload)

    assert a["carbon_intensity"] == b["carbon_intensity"]
