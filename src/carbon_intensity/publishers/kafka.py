from __future__ import annotations

from typing import Any, Optional

from confluent_kafka import KafkaError, KafkaException, Producer

from carbon_intensity.core.exceptions import PublisherConnectionError, PublisherError
from carbon_intensity.publishers.base import BasePublisher
from carbon_intensity.publishers.registry import register_publisher
from carbon_intensity.publishers.types import KafkaConnection


def _error_code(err: Any) -> Optional[int]:
    code = getattr(err, "code", None)
    return code() if callable(code) else None


def _is_fatal_error(err: Any) -> bool:
    fatal = getattr(err, "fatal", None)
    return bool(fatal()) if callable(fatal) else False


def _is_fatal(exc: KafkaException) -> bool:
    return _is_fatal_error(exc.args[0] if exc.args else None)


def _is_connection_loss(err: Any) -> bool:
    return _error_code(err) == KafkaError._ALL_BROKERS_DOWN or _is_fatal_error(err)


@register_publisher("kafka-publisher")
class KafkaPublisher(BasePublisher):
    """
    Publish readings to a Kafka topic, keyed by zone.

    Delivery is asynchronous: ``publish`` enqueues into librdkafka and serves
    delivery callbacks with ``poll(0)``; ``close`` flushes what is left.
    A full local queue is retried once after a blocking poll, then reported as
    a transient PublisherError.

    The connection counts as lost, and every later ``publish`` raises
    PublisherConnectionError, when librdkafka reports all brokers down or a
    fatal error (through ``error_cb`` or a delivery report), or after
    ``max_consecutive_failures`` drops/failed deliveries in a row.
    """

    def __init__(self, connection: KafkaConnection, *, producer: Optional[Any] = None):
        super().__init__()
        self.connection = connection
        self._producer = producer
        self.delivered = 0
        self.delivery_failures = 0
        self._consecutive_failures = 0
        self._connection_error: Optional[str] = None

    @property
    def connection_lost(self) -> bool:
        return self._connection_error is not None

    def initialise(self) -> None:
        if self._producer is None:
            config = dict(self.connection.producer_config())
            config["error_cb"] = self._on_error
            try:
                self._producer = Producer(config)
            except KafkaException as exc:
                raise PublisherConnectionError(f"Invalid Kafka producer configuration: {exc}") from exc

        try:
            self._producer.list_topics(timeout=self.connection.connect_timeout_seconds)
        except KafkaException as exc:
            raise PublisherConnectionError(
                f"Kafka not reachable at {self.connection.bootstrap_servers}: {exc}"
            ) from exc
        self.log.info(
            f"Connected to Kafka at {self.connection.bootstrap_servers}, topic={self.connection.topic}"
        )

    def _mark_lost(self, reason: str) -> None:
        if self._connection_error is None:
            self.log.error(f"Kafka connection lost: {reason}")
            self._connection_error = reason

    def _record_failure(self, reason: str) -> None:
        self._consecutive_failures += 1
        if self._consecutive_failures >= self.connection.max_consecutive_failures:
            self._mark_lost(f"{self._consecutive_failures} consecutive failures, last: {reason}")

    def _on_error(self, err: Any) -> None:
        # librdkafka retries transient errors on its own; only these end the session.
        if _is_connection_loss(err):
            self._mark_lost(str(err))
        else:
            self.log.warning(f"Kafka client error: {err}")

    def _on_delivery(self, err: Any, msg: Any) -> None:
        if err is None:
            self.delivered += 1
            self._consecutive_failures = 0
            return

        self.delivery_failures += 1
        self.log.error(f"Delivery failed for key={self._msg_key(msg)}: {err}")
        if _is_connection_loss(err):
            self._mark_lost(str(err))
        else:
            self._record_failure(str(err))

    @staticmethod
    def _msg_key(msg: Any) -> str:
        try:
            key = msg.key()
        except Exception:
            return "?"
        return key.decode("utf-8", "replace") if isinstance(key, bytes) else str(key)

    def _produce(self, key: str, payload: str) -> None:
        self._producer.produce(
            self.connection.topic,
            key=key.encode("utf-8"),
            value=payload.encode("utf-8"),
            on_delivery=self._on_delivery,
        )

    def _raise_if_lost(self) -> None:
        if self._connection_error is not None:
            raise PublisherConnectionError(f"Kafka connection lost: {self._connection_error}")

    def publish(self, key: str, payload: str) -> None:
        if self._producer is None:
            raise PublisherConnectionError("KafkaPublisher.initialise() must be called before publish()")
        self._raise_if_lost()

        try:
            try:
                self._produce(key, payload)
            except BufferError:
                # Local queue full: serve delivery reports to make room, then retry once
                self._producer.poll(1)
                self._raise_if_lost()
                try:
                    self._produce(key, payload)
                except BufferError as exc:
                    self._record_failure("local producer queue full")
                    self._raise_if_lost()
                    raise PublisherError(f"Kafka producer queue full, dropped key={key}") from exc
        except KafkaException as exc:
            if _is_fatal(exc):
                self._mark_lost(str(exc))
                raise PublisherConnectionError(f"Fatal Kafka error: {exc}") from exc
            raise PublisherError(f"Kafka produce failed for key={key}: {exc}") from exc

        self._producer.poll(0)
        self._raise_if_lost()

    def close(self) -> None:
        if self._producer is None:
            return
        remaining = self._producer.flush(self.connection.flush_timeout_seconds)
        if remaining:
            self.log.warning(f"{remaining} message(s) still undelivered after flush")
        self.log.info(f"Kafka publisher closed: delivered={self.delivered}, failed={self.delivery_failures}")
