from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from carbon_intensity.core.exceptions import ZoneFailurePolicy


@dataclass(frozen=True)
class ReaderOptions:
    rate_limit_seconds: float = 1.0
    send_poll_seconds: float = 0.1
    zone_failure_policy: ZoneFailurePolicy = ZoneFailurePolicy.SKIP

    # time-reader only
    period_seconds: float = 120.0
    max_sweeps: Optional[int] = None
