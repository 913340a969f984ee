from __future__ import annotations

import sys
from typing import Optional, TextIO

from carbon_intensity.publishers.base import BasePublisher
from carbon_intensity.publishers.registry import register_publisher


@register_publisher("console-publisher")
class ConsolePublisher(BasePublisher):
    """Print each reading as ``<key><separator><payload>``; used for --dry-run."""

    def __init__(self, separator: str = " | ", *, stream: Optional[TextIO] = None):
        super().__init__()
        self.separator = separator
        self._stream = stream

    def publish(self, key: str, payload: str) -> None:
        # Resolve sys.stdout lazily so pytest's capsys sees the output
        stream = self._stream or sys.stdout
        print(f"{key}{self.separator}{payload}", file=stream, flush=True)
