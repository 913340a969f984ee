"""carbon_intensity.

Carbon-intensity collector: periodically reads carbon-intensity figures for a
set of electricity zones from a data provider (CO2 Signal or the offline
simulator) and forwards each reading to a publisher (console or Kafka).

Public API for running the service programmatically.
"""

from carbon_intensity.cli import main
from carbon_intensity.models.app_config import AppConfig, load_app_config
from carbon_intensity.orchestrator import Orchestrator

__version__ = "0.1.0"

__all__ = [
    "AppConfig",
    "Orchestrator",
    "load_app_config",
    "main",
]
