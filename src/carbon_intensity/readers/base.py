from __future__ import annotations

import queue
from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional, Sequence

from carbon_intensity.core.cancellation import CancellationToken
from carbon_intensity.core.exceptions import DataSourceError, ReaderError, ZoneFailureHandler
from carbon_intensity.core.logger import get_logger
from carbon_intensity.core.messages import DONE, ChannelMessage, Reading
from carbon_intensity.data_sources.base import BaseDataSource
from carbon_intensity.readers.types import ReaderOptions


class ReaderState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    FINISHED = "finished"


class BaseReader(ABC):
    """
    Drives the polling cadence for a data source.

    A reader runs on its own thread. It is the only writer of the outbound
    queue and the only observer of the cancellation token. Lifecycle:

        reader.initialise(outbound, token)
        reader.set_data_source(data_source)
        reader.run(zones)     # blocks until finished; always ends with DONE

    Cancellation is observed at every suspension point: the queue send, the
    rate-limit delay between zones and (for timed readers) the wait between
    sweeps. The data source call itself is bounded by its own timeout.
    """

    def __init__(self, options: Optional[ReaderOptions] = None):
        self.options = options or ReaderOptions()
        self.log = get_logger(f"carbon_intensity.readers.{self.__class__.__name__}")
        self._outbound: Optional["queue.Queue[ChannelMessage]"] = None
        self._cancel: Optional[CancellationToken] = None
        self._data_source: Optional[BaseDataSource] = None
        self._state = ReaderState.IDLE
        self._failures = ZoneFailureHandler(self.options.zone_failure_policy, logger=self.log)

        # Set when the run stopped because of an error rather than completion or
        # cancellation; the orchestrator re-raises it after shutdown.
        self.error: Optional[Exception] = None
        self.skipped_zones: List[str] = []

    @property
    def state(self) -> ReaderState:
        return self._state

    def initialise(self, outbound: "queue.Queue[ChannelMessage]", cancel: CancellationToken) -> None:
        self._outbound = outbound
        self._cancel = cancel

    def set_data_source(self, data_source: BaseDataSource) -> None:
        if self._outbound is None or self._cancel is None:
            raise ReaderError(f"{self.__class__.__name__}.initialise() must be called before set_data_source()")
        self._data_source = data_source

    def run(self, zones: Sequence[str]) -> None:
        if self._outbound is None or self._cancel is None:
            raise ReaderError(f"{self.__class__.__name__}.run(): channels not initialised")
        if self._data_source is None:
            raise ReaderError(f"{self.__class__.__name__}.run(): data source not set")
        if self._state is not ReaderState.IDLE:
            raise ReaderError(f"{self.__class__.__name__}.run(): reader already {self._state.value}")

        self._state = ReaderState.RUNNING
        self.log.info(f"Reader started for {len(zones)} zone(s)")
        try:
            self._run(list(zones))
        except Exception as exc:
            self.error = exc
            self.log.error(f"Reader failed: {exc}", exc_info=True)
        finally:
            self._outbound.put(DONE)
            self._state = ReaderState.FINISHED
            self.log.info("Reader finished")

    @abstractmethod
    def _run(self, zones: List[str]) -> None:
        raise NotImplementedError

    def _sweep(self, zones: List[str]) -> bool:
        """One pass over ``zones``. Returns False if the run must stop (cancelled or aborted)."""
        assert self._data_source is not None and self._cancel is not None

        for index, zone in enumerate(zones):
            if self._cancel.cancelled:
                return False

            try:
                details = self._data_source.readings(zone)
            except DataSourceError as exc:
                if not self._failures.handle(exc):
                    self.error = exc
                    return False
                self.skipped_zones.append(zone)
                details = []

            for entry in details:
                if not entry.is_valid:
                    self.log.debug(f"Discarding reading without key for zone={zone}")
                    continue
                if not self._send(Reading.from_details(entry)):
                    self.log.info(f"Received quit signal at zone={zone}")
                    return False

            # The upstream service is rate limited; no delay is owed after the last zone.
            if index < len(zones) - 1 and self._cancel.wait(self.options.rate_limit_seconds):
                self.log.info(f"Received quit signal after zone={zone}")
                return False

        return True

    def _send(self, message: ChannelMessage) -> bool:
        """Put ``message`` on the outbound queue unless cancellation wins the race."""
        assert self._outbound is not None and self._cancel is not None

        while not self._cancel.cancelled:
            try:
                self._outbound.put(message, timeout=self.options.send_poll_seconds)
                return True
            except queue.Full:
                continue
        return False
