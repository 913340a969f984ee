from __future__ import annotations

import time
from typing import List

from carbon_intensity.readers.base import BaseReader
from carbon_intensity.readers.registry import register_reader


@register_reader("time-reader")
class TimerReader(BaseReader):
    """
    Re-sweep the zone list every ``period_seconds`` until cancelled.

    The first sweep starts immediately; the period is measured start to start.
    Sweeps run one after another on the reader thread, so they never overlap:
    a sweep that overruns the period delays the next one, which then starts
    straight away. ``max_sweeps`` bounds the run when set.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.sweeps_completed = 0

    def _run(self, zones: List[str]) -> None:
        assert self._cancel is not None
        period = self.options.period_seconds
        max_sweeps = self.options.max_sweeps

        while True:
            started = time.monotonic()
            self.log.info(f"Starting sweep {self.sweeps_completed + 1} over {len(zones)} zone(s)")
            if not self._sweep(zones):
                return
            self.sweeps_completed += 1

            if max_sweeps is not None and self.sweeps_completed >= max_sweeps:
                self.log.info(f"Completed {self.sweeps_completed} sweep(s)")
                return

            elapsed = time.monotonic() - started
            delay = period - elapsed
            if delay <= 0:
                self.log.warning(
                    f"Sweep took {elapsed:.1f}s, longer than the {period:.1f}s period; starting next sweep now"
                )
                delay = 0

            if self._cancel.wait(delay):
                self.log.info("Received quit signal between sweeps")
                return
