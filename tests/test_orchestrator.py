import threading

import pytest

from carbon_intensity.bootstrap import load_builtin_plugins
from carbon_intensity.core.contracts import DataSourceDetails
from carbon_intensity.core.exceptions import (
    ConfigError,
    DataSourceError,
    PublisherConnectionError,
    PublisherError,
    UnknownVariantError,
)
from carbon_intensity.data_sources.base import BaseDataSource
from carbon_intensity.data_sources.registry import DataSourceRegistry
from carbon_intensity.models.app_config import AppConfig
from carbon_intensity.orchestrator import Orchestrator
from carbon_intensity.publishers.base import BasePublisher
from carbon_intensity.publishers.registry import PublisherRegistry
from carbon_intensity.readers.base import BaseReader
from carbon_intensity.readers.registry import ReaderRegistry
from carbon_intensity.wiring.registry import BuiltArgs, WiringRegistry


class FakeDataSource(BaseDataSource):
    def __init__(self, responses, failing=(), fail_init=False):
        super().__init__()
        self.responses = responses
        self.failing = set(failing)
        self.fail_init = fail_init
        self.closed = False

    def initialise(self):
        if self.fail_init:
            raise ConfigError("API-key environment variable (FAKE_KEY) not set")

    def available_zones(self):
        return list(self.responses)

    def readings(self, zone):
        if zone in self.failing:
            raise DataSourceError("upstream unavailable", zone=zone)
        return [DataSourceDetails(k, p) for k, p in self.responses[zone]]

    def close(self):
        self.closed = True


class FakePublisher(BasePublisher):
    def __init__(self, sink, behaviour=None, fail_init=False):
        super().__init__()
        self.sink = sink
        self.behaviour = behaviour or {}
        self.fail_init = fail_init
        self.closed = False

    def initialise(self):
        if self.fail_init:
            raise PublisherConnectionError("broker unreachable")

    def publish(self, key, payload):
        hook = self.behaviour.get(key)
        if hook is not None:
            hook(key, payload)
        self.sink.append((key, payload))

    def close(self):
        self.closed = True


class RawLineReader(BaseReader):
    """Sends wire-format strings, including malformed ones."""

    def _run(self, zones):
        for line in ("no separator here", "", "Z,p3"):
            if not self._send(line):
                return


STATE: dict = {}


def setup_function() -> None:
    load_builtin_plugins(reload=True)
    STATE.clear()
    STATE.update(
        responses={},
        failing=(),
        fail_init=False,
        publisher_fail_init=False,
        published=[],
        behaviour={},
    )

    DataSourceRegistry.register(name="fake-source", variant_class=FakeDataSource)
    PublisherRegistry.register(name="fake-publisher", variant_class=FakePublisher)
    ReaderRegistry.register(name="raw-reader", variant_class=RawLineReader)

    def _source_args(*, config):
        return BuiltArgs(
            args=(STATE["responses"],),
            kwargs={"failing": STATE["failing"], "fail_init": STATE["fail_init"]},
        )

    def _publisher_args(*, config):
        return BuiltArgs(
            args=(STATE["published"],),
            kwargs={"behaviour": STATE["behaviour"], "fail_init": STATE["publisher_fail_init"]},
        )

    WiringRegistry.register(role="data-source", name="fake-source", builder=_source_args)
    WiringRegistry.register(role="data-publisher", name="fake-publisher", builder=_publisher_args)
    WiringRegistry.register(
        role="reader",
        name="raw-reader",
        builder=WiringRegistry.get("reader", "one-shot"),
    )


def _config(**overrides) -> AppConfig:
    raw = {
        "data-source": "fake-source",
        "reader": "one-shot",
        "data-publisher": "fake-publisher",
        "shutdown-timeout-seconds": 5,
        "reader-settings": {"rate_limit_seconds": 0, "send_poll_seconds": 0.01},
    }
    raw.update(overrides)
    return AppConfig.from_dict(raw)


def test_one_shot_run_publishes_each_reading_in_order():
    STATE["responses"] = {"X": [("X", "p1")], "Y": [("Y", "p2")]}
    orchestrator = Orchestrator(_config(), run_id="run-1")

    stats = orchestrator.run()

    assert STATE["published"] == [("X", "p1"), ("Y", "p2")]
    assert (stats.published, stats.discarded, stats.failed) == (2, 0, 0)
    assert orchestrator.publisher.closed
    assert orchestrator.data_source.closed
    assert not orchestrator._thread.is_alive()


def test_readings_without_key_are_not_published():
    STATE["responses"] = {"X": [("", "p1")], "Y": [("Y", "p2")]}

    stats = Orchestrator(_config()).run()

    assert STATE["published"] == [("Y", "p2")]
    assert stats.published == 1


@pytest.mark.parametrize(
    "role_key, role, expected",
    [
        ("data-source", "data-source", ["co2-signal", "fake-source", "simulator"]),
        ("reader", "reader", ["one-shot", "raw-reader", "time-reader"]),
        ("data-publisher", "data-publisher", ["console-publisher", "fake-publisher", "kafka-publisher"]),
    ],
)
def test_unknown_variant_name_fails_before_anything_starts(role_key, role, expected):
    STATE["responses"] = {"X": [("X", "p1")]}
    orchestrator = Orchestrator(_config(**{role_key: "does-not-exist"}))

    with pytest.raises(UnknownVariantError) as exc:
        orchestrator.run()

    assert exc.value.role == role
    assert exc.value.options == expected
    for name in expected:
        assert name in str(exc.value)
    assert orchestrator._thread is None
    assert STATE["published"] == []


def test_data_source_initialise_failure_is_fatal():
    STATE["fail_init"] = True
    orchestrator = Orchestrator(_config())

    with pytest.raises(ConfigError, match="FAKE_KEY"):
        orchestrator.run()

    assert orchestrator._thread is None
    assert orchestrator.data_source.closed
    assert orchestrator.publisher.closed


def test_publisher_initialise_failure_still_closes_the_data_source():
    STATE["responses"] = {"X": [("X", "p1")]}
    STATE["publisher_fail_init"] = True
    orchestrator = Orchestrator(_config())

    with pytest.raises(PublisherConnectionError, match="unreachable"):
        orchestrator.run()

    assert orchestrator._thread is None
    assert orchestrator.data_source.closed
    assert STATE["published"] == []


def test_malformed_messages_are_discarded_and_dispatch_continues():
    STATE["responses"] = {"X": []}

    stats = Orchestrator(_config(reader="raw-reader")).run()

    assert STATE["published"] == [("Z", "p3")]
    assert stats.discarded == 1
    assert stats.published == 1


def test_transient_publish_failure_is_counted_and_skipped():
    def fail(key, payload):
        raise PublisherError("broker busy")

    STATE["responses"] = {"X": [("X", "p1")], "Y": [("Y", "p2")]}
    STATE["behaviour"] = {"X": fail}

    stats = Orchestrator(_config()).run()

    assert STATE["published"] == [("Y", "p2")]
    assert stats.failed == 1
    assert stats.published == 1


def test_lost_publisher_connection_stops_the_service():
    def lost(key, payload):
        raise PublisherConnectionError("broker gone")

    STATE["responses"] = {zone: [(zone, f"p-{zone}")] for zone in ("X", "Y", "Z")}
    STATE["behaviour"] = {"X": lost}
    orchestrator = Orchestrator(_config())

    with pytest.raises(PublisherConnectionError):
        orchestrator.run()

    assert STATE["published"] == []
    assert not orchestrator._thread.is_alive()
    assert orchestrator.publisher.closed
    assert orchestrator.data_source.closed


def test_abort_policy_surfaces_the_data_source_error():
    STATE["responses"] = {"X": [("X", "p1")], "Y": [], "Z": [("Z", "p3")]}
    STATE["failing"] = ("Y",)
    cfg = _config(**{"reader-settings": {"rate_limit_seconds": 0, "zone_failure_policy": "abort"}})

    with pytest.raises(DataSourceError) as exc:
        Orchestrator(cfg).run()

    assert exc.value.zone == "Y"
    assert STATE["published"] == [("X", "p1")]


def test_skip_policy_keeps_going_after_a_failed_zone():
    STATE["responses"] = {"X": [("X", "p1")], "Y": [], "Z": [("Z", "p3")]}
    STATE["failing"] = ("Y",)

    stats = Orchestrator(_config()).run()

    assert STATE["published"] == [("X", "p1"), ("Z", "p3")]
    assert stats.published == 2


def test_shutdown_request_stops_a_timed_reader():
    holder = {}

    def stop(key, payload):
        holder["orchestrator"].request_shutdown(15)

    STATE["responses"] = {"X": [("X", "p1")], "Y": [("Y", "p2")]}
    STATE["behaviour"] = {"X": stop}
    cfg = _config(reader="time-reader", **{"reader-settings": {"rate_limit_seconds": 0, "period_seconds": 60}})
    orchestrator = Orchestrator(cfg)
    holder["orchestrator"] = orchestrator

    result = {}
    thread = threading.Thread(target=lambda: result.setdefault("stats", orchestrator.run()))
    thread.start()
    thread.join(timeout=10)

    assert not thread.is_alive()
    assert STATE["published"][0] == ("X", "p1")
    assert len(STATE["published"]) <= 2
    assert orchestrator.reader.sweeps_completed <= 1
    assert orchestrator.publisher.closed


def test_dry_run_replaces_publisher_with_console(capsys):
    STATE["responses"] = {"X": [("X", "p1")]}
    orchestrator = Orchestrator(_config(**{"dry-run": True}))

    assert orchestrator.config.data_publisher == "console-publisher"

    orchestrator.run()

    assert STATE["published"] == []
    assert "X | p1" in capsys.readouterr().out
