from dataclasses import dataclass


@dataclass(frozen=True)
class DataSourceDetails:
    """One reading produced by a data source, payload already serialized.

    An empty zone_key is the data source's way of saying "no usable reading";
    such entries are never forwarded to a publisher.
    """
    zone_key: str
    payload: str

    @property
    def is_valid(self) -> bool:
        return bool(self.zone_key)


@dataclass(frozen=True)
class DispatchStats:
    """Counters collected by the orchestrator's dispatch loop."""
    published: int = 0          # Messages accepted by the publisher
    discarded: int = 0          # Malformed messages dropped before publishing
    failed: int = 0             # Transient publisher failures (logged, loop continued)
