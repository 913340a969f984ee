"""Messages carried on the reader → orchestrator queue.

Readers put typed messages on the queue: a ``Reading`` per forwarded data
source entry and exactly one ``DONE`` at the end of a run. The legacy string
wire form ``"<key>,<payload>"`` (with ``"done"`` as completion marker) is
still accepted by ``decode_message`` so pre-encoded lines can share the queue.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from carbon_intensity.core.contracts import DataSourceDetails
from carbon_intensity.core.exceptions import MalformedMessageError

WIRE_SEPARATOR = ","
WIRE_DONE = "done"


@dataclass(frozen=True)
class Reading:
    key: str
    payload: str

    @classmethod
    def from_details(cls, details: DataSourceDetails) -> "Reading":
        return cls(key=details.zone_key, payload=details.payload)

    def to_wire(self) -> str:
        return f"{self.key}{WIRE_SEPARATOR}{self.payload}"


class Done:
    """Completion marker: the reader has finished and will send nothing more."""

    _instance: Optional["Done"] = None

    def __new__(cls) -> "Done":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "DONE"

    def to_wire(self) -> str:
        return WIRE_DONE


DONE = Done()

ChannelMessage = Union[Reading, Done, str]


def split_message(line: str) -> Tuple[str, str]:
    """Split a wire line on its first separator; the payload may contain commas.

    >>> split_message("A,B,C")
    ('A', 'B,C')
    """
    parts = line.split(WIRE_SEPARATOR, 1)
    if len(parts) != 2:
        raise MalformedMessageError(f"Badly formatted message, no comma separator: {line!r}")
    return parts[0], parts[1]


def decode_message(message: ChannelMessage) -> Optional[Union[Reading, Done]]:
    """Normalise a queue message to a typed message.

    Returns None for an empty string (nothing to do). Raises
    MalformedMessageError for a non-empty string without a separator.
    """
    if isinstance(message, (Reading, Done)):
        return message
    if message == "":
        return None
    if message == WIRE_DONE:
        return DONE
    key, payload = split_message(message)
    return Reading(key=key, payload=payload)
