from __future__ import annotations

import threading
from typing import Optional


class CancellationToken:
    """Cooperative cancellation shared between the orchestrator and a reader.

    The orchestrator is the only caller of ``cancel``; the reader observes the
    token at each of its suspension points (queue send, rate-limit delay,
    timer wait) through ``wait``.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def wait(self, timeout: Optional[float]) -> bool:
        """Sleep up to ``timeout`` seconds; return True as soon as cancelled."""
        if timeout is not None and timeout <= 0:
            return self._event.is_set()
        return self._event.wait(timeout)
