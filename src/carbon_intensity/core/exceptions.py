"""
Custom exception classes for the carbon_intensity service.

Provides structured error handling with domain-specific exceptions
for the data source, reader, publisher and configuration layers.
"""

from enum import Enum
from typing import Any, Optional, Sequence


class CarbonIntensityException(Exception):
    """Base exception class for all carbon_intensity exceptions."""

    pass


class ConfigError(CarbonIntensityException):
    """Raised when configuration is missing or invalid (including credentials)."""

    pass


class UnknownVariantError(ConfigError):
    """
    Raised when a configured variant name is not registered for its role.

    The message always lists every registered option so the operator can fix
    the configuration without reading the code.

    Example:
        >>> raise UnknownVariantError("reader", "hourly", ["one-shot", "time-reader"])
        UnknownVariantError: Specified reader ('hourly') does not exist. Options are: one-shot, time-reader
    """

    def __init__(self, role: str, name: str, options: Sequence[str]):
        self.role = role
        self.name = name
        self.options = sorted(options)
        listed = ", ".join(self.options) if self.options else "<none registered>"
        super().__init__(f"Specified {role} ({name!r}) does not exist. Options are: {listed}")


class DuplicateVariantError(CarbonIntensityException):
    """Raised when a variant name is registered twice for the same role."""

    pass


class DataSourceError(CarbonIntensityException):
    """Raised when a data source fails to fetch or decode a zone's readings."""

    def __init__(self, message: str, zone: Optional[str] = None):
        self.zone = zone
        if zone is not None:
            message = f"{message} (zone={zone})"
        super().__init__(message)


class PublisherError(CarbonIntensityException):
    """Raised when a single message could not be published. Transient."""

    pass


class PublisherConnectionError(PublisherError):
    """Raised when the publisher lost (or never had) its sink connection."""

    pass


class ReaderError(CarbonIntensityException):
    """Raised when a reader is used out of lifecycle order."""

    pass


class MalformedMessageError(CarbonIntensityException):
    """Raised when a wire message has no key/payload separator."""

    pass


class ZoneFailurePolicy(Enum):
    """Policy for handling a single zone's fetch failure during a sweep."""

    SKIP = "skip"              # Log a warning and continue with the next zone (default)
    ABORT = "abort"            # Stop the whole run and surface the error


class ZoneFailureHandler:
    """
    Applies a ZoneFailurePolicy to a DataSourceError.

    Usage:
        >>> handler = ZoneFailureHandler(policy=ZoneFailurePolicy.SKIP, logger=log)
        >>> handler.handle(exc)
        True   # keep sweeping

        >>> handler = ZoneFailureHandler(policy=ZoneFailurePolicy.ABORT)
        >>> handler.handle(exc)
        False  # stop the run
    """

    def __init__(self, policy: ZoneFailurePolicy = ZoneFailurePolicy.SKIP, logger: Optional[Any] = None):
        self.policy = policy
        self.logger = logger

    def handle(self, exc: DataSourceError) -> bool:
        """
        Returns:
            True if the sweep should continue with the next zone, False if it should stop.
        """
        if self.policy == ZoneFailurePolicy.ABORT:
            if self.logger:
                self.logger.error(f"Zone fetch failed, aborting run: {exc}")
            return False

        if self.logger:
            self.logger.warning(f"Zone fetch failed, skipping zone: {exc}")
        return True
