from __future__ import annotations

import contextvars
import queue
import threading
import time
import uuid
from typing import Any, List, Optional

from carbon_intensity.bootstrap import load_builtin_plugins
from carbon_intensity.core.cancellation import CancellationToken
from carbon_intensity.core.contracts import DispatchStats
from carbon_intensity.core.exceptions import MalformedMessageError, PublisherConnectionError, PublisherError
from carbon_intensity.core.logger import get_logger, push_run_id, reset_run_id
from carbon_intensity.core.messages import ChannelMessage, Done, decode_message
from carbon_intensity.core.registry import VariantRegistry
from carbon_intensity.data_sources.base import BaseDataSource
from carbon_intensity.data_sources.registry import DataSourceRegistry
from carbon_intensity.models.app_config import AppConfig
from carbon_intensity.publishers.base import BasePublisher
from carbon_intensity.publishers.registry import PublisherRegistry
from carbon_intensity.readers.base import BaseReader
from carbon_intensity.readers.registry import ReaderRegistry
from carbon_intensity.wiring.registry import WiringRegistry


def build_variant(registry: type[VariantRegistry], name: str, config: AppConfig) -> Any:
    """Resolve ``name`` for the registry's role and construct it from config.

    Raises UnknownVariantError (listing the registered options) when either the
    implementation or its wiring is missing.
    """
    variant_cls = registry.get(name)
    builder = WiringRegistry.get(registry.role, name)
    built = builder(config=config)
    return variant_cls(*built.args, **built.kwargs)


class Orchestrator:
    """
    Runtime loop of the service: wires data source → reader → publisher.

    Two threads are involved. The reader sweeps zones on a worker thread and is
    the only writer of the outbound queue; the calling thread runs the dispatch
    loop and is the only caller of the publisher. Shutdown is cooperative:
    ``request_shutdown`` (safe to call from a signal handler) cancels the
    reader's token, the reader answers with DONE, and the dispatch loop ends.
    Queue and token are released only after DONE has been received and the
    reader thread joined.

    Example:
        >>> config = load_app_config("config/app-config.properties")
        >>> stats = Orchestrator(config).run()
        >>> print(stats.published)
    """

    def __init__(self, config: AppConfig, *, run_id: Optional[str] = None):
        self.config = config.effective()
        self.run_id = run_id or str(uuid.uuid4())
        self.log = get_logger(__name__)

        self.data_source: Optional[BaseDataSource] = None
        self.reader: Optional[BaseReader] = None
        self.publisher: Optional[BasePublisher] = None
        self.zones: List[str] = []

        self._outbound: Optional["queue.Queue[ChannelMessage]"] = None
        self._cancel = CancellationToken()
        self._thread: Optional[threading.Thread] = None
        self._done_received = False

        self._published = 0
        self._discarded = 0
        self._failed = 0

    @property
    def stats(self) -> DispatchStats:
        return DispatchStats(published=self._published, discarded=self._discarded, failed=self._failed)

    def request_shutdown(self, signum: Optional[int] = None) -> None:
        if signum is not None:
            self.log.info(f"Caught signal {signum}: terminating")
        else:
            self.log.info("Shutdown requested")
        self._cancel.cancel(reason=f"signal {signum}" if signum is not None else "requested")

    def run(self) -> DispatchStats:
        token = push_run_id(self.run_id)
        try:
            self.log.info(
                f"Starting: data-source={self.config.data_source}, reader={self.config.reader}, "
                f"data-publisher={self.config.data_publisher}, dry_run={self.config.dry_run}"
            )
            try:
                self._setup()
                self._start_reader()
                self._dispatch()
            finally:
                self._shutdown()

            if self.reader is not None and self.reader.error is not None:
                raise self.reader.error

            stats = self.stats
            self.log.info(
                f"Exiting: published={stats.published}, discarded={stats.discarded}, failed={stats.failed}"
            )
            return stats
        finally:
            reset_run_id(token)

    # --- startup ---

    def _setup(self) -> None:
        load_builtin_plugins()

        # Resolve all three before initialising anything so a bad key fails fast.
        # Each is held as soon as it exists so _shutdown closes it if a later step fails.
        data_source = self.data_source = build_variant(DataSourceRegistry, self.config.data_source, self.config)
        reader = build_variant(ReaderRegistry, self.config.reader, self.config)
        publisher = self.publisher = build_variant(PublisherRegistry, self.config.data_publisher, self.config)

        data_source.initialise()

        self._outbound = queue.Queue(maxsize=1)
        reader.initialise(self._outbound, self._cancel)
        reader.set_data_source(data_source)
        self.reader = reader

        publisher.initialise()

        self.zones = list(data_source.available_zones())
        self.log.info(f"Loaded {len(self.zones)} zone(s) from {data_source.__class__.__name__}")

    def _start_reader(self) -> None:
        assert self.reader is not None
        # Copy the context so reader-thread log records carry this run id.
        ctx = contextvars.copy_context()
        self._thread = threading.Thread(
            target=ctx.run,
            args=(self.reader.run, self.zones),
            name="carbon_intensity_reader",
            daemon=True,
        )
        self._thread.start()

    # --- dispatch ---

    def _dispatch(self) -> None:
        assert self._outbound is not None
        while True:
            message = self._outbound.get()
            if self._handle(message):
                return

    def _handle(self, message: ChannelMessage) -> bool:
        """Forward one message. Returns True when the reader signalled completion."""
        try:
            decoded = decode_message(message)
        except MalformedMessageError as exc:
            self._discarded += 1
            self.log.warning(f"Discarding message: {exc}")
            return False

        if decoded is None:
            return False
        if isinstance(decoded, Done):
            self._done_received = True
            return True

        self._publish(decoded.key, decoded.payload)
        return False

    def _publish(self, key: str, payload: str) -> None:
        assert self.publisher is not None
        try:
            self.publisher.publish(key, payload)
        except PublisherConnectionError:
            raise
        except PublisherError as exc:
            self._failed += 1
            self.log.error(f"Publish failed for key={key}: {exc}")
            return
        self._published += 1
        self.log.debug(f"Published key={key}")

    # --- shutdown ---

    def _shutdown(self) -> None:
        timeout = self.config.shutdown_timeout_seconds

        if not self._done_received and self._thread is not None:
            # Dispatch ended early (publisher escalated); stop the reader and
            # keep draining so its DONE is never put on a queue nobody reads.
            self._cancel.cancel(reason="dispatch stopped")
            self._drain_until_done(timeout)

        if self._thread is not None:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                self.log.warning(f"Reader thread did not stop within {timeout:.1f}s")

        try:
            if self.publisher is not None:
                self.publisher.close()
        finally:
            if self.data_source is not None:
                self.data_source.close()

    def _drain_until_done(self, timeout: float) -> None:
        assert self._outbound is not None
        deadline = time.monotonic() + timeout
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                self.log.warning("Reader did not acknowledge shutdown before the timeout")
                return
            try:
                message = self._outbound.get(timeout=remaining)
            except queue.Empty:
                continue
            if isinstance(message, Done) or message == "done":
                self._done_received = True
                return
            self.log.debug("Dropping reading received after dispatch stopped")
