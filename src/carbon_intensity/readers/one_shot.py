from __future__ import annotations

from typing import List

from carbon_intensity.readers.base import BaseReader
from carbon_intensity.readers.registry import register_reader


@register_reader("one-shot")
class OneShotReader(BaseReader):
    """Sweep the zone list once, then finish."""

    def _run(self, zones: List[str]) -> None:
        if self._sweep(zones):
            self.log.info("Sweep completed")
        else:
            self.log.info("Sweep stopped before completion")
