from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from carbon_intensity.core.contracts import DataSourceDetails
from carbon_intensity.core.logger import get_logger


class BaseDataSource(ABC):
    """A provider of carbon-intensity readings for named zones.

    Called from the reader thread only; implementations need no locking.
    """

    def __init__(self) -> None:
        self.log = get_logger(f"carbon_intensity.data_sources.{self.__class__.__name__}")

    def initialise(self) -> None:
        """One-time setup. Raise ConfigError when a required setting or credential is absent."""

    @abstractmethod
    def available_zones(self) -> List[str]:
        raise NotImplementedError

    @abstractmethod
    def readings(self, zone: str) -> List[DataSourceDetails]:
        """Fetch readings for one zone.

        Returns an empty list when no valid reading could be parsed. Raises
        DataSourceError on transport or decoding failures.
        """
        raise NotImplementedError

    def close(self) -> None:
        """Release network resources. Called once by the orchestrator at shutdown."""
