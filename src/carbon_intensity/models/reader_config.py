from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, NonNegativeFloat, PositiveFloat, PositiveInt


class ReaderSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Courtesy delay between zones; the CO2 Signal free tier allows one request per second.
    rate_limit_seconds: NonNegativeFloat = 1.0

    # time-reader only: start-to-start interval between sweeps.
    period_seconds: PositiveFloat = 120.0
    max_sweeps: Optional[PositiveInt] = None

    zone_failure_policy: Literal["skip", "abort"] = "skip"

    # How often a blocked queue send re-checks the cancellation token.
    send_poll_seconds: PositiveFloat = 0.1
