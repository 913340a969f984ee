from __future__ import annotations

from abc import ABC, abstractmethod

from carbon_intensity.core.logger import get_logger


class BasePublisher(ABC):
    """Emits (key, payload) pairs to a sink.

    Only the orchestrator's dispatch loop calls ``publish``, always from the
    main thread, so implementations need no locking.
    """

    def __init__(self) -> None:
        self.log = get_logger(f"carbon_intensity.publishers.{self.__class__.__name__}")

    # --- Required method ---
    @abstractmethod
    def publish(self, key: str, payload: str) -> None:
        """Emit one message.

        Raises PublisherError for a per-message failure the loop can survive,
        PublisherConnectionError when the sink connection is gone.
        """
        raise NotImplementedError

    # --- Optional lifecycle hooks ---
    def initialise(self) -> None:
        """Open the sink connection. Raise PublisherConnectionError if unreachable."""

    def close(self) -> None:
        """Flush and release the sink connection."""
