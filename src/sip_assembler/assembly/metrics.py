"""Metrics collected while assembling a SIP.

Counters are written by the thread that assembles the SIP and may be read
by other threads for monitoring. Each counter update holds a lock for a
single dict operation, and readers get a snapshot copy rather than a live
view.
"""

import threading
from collections.abc import Iterator, Mapping
from enum import Enum
from types import MappingProxyType


class SipMetric(str, Enum):
    """Names of the SIP assembly metrics."""

    NUM_AIUS = "nr.aius"
    NUM_DIGITAL_OBJECTS = "nr.dos"
    SIZE_DIGITAL_OBJECTS = "size.dos"
    SIZE_PDI = "size.pdi"
    SIZE_SIP = "size.sip"
    ASSEMBLY_TIME = "time.assembly"


def _key(name: "SipMetric | str") -> str:
    return name.value if isinstance(name, SipMetric) else name


class Counters:
    """Named integer counters, safe to snapshot from another thread."""

    def __init__(self) -> None:
        self._values: dict[str, int] = {}
        self._lock = threading.Lock()

    def reset(self) -> None:
        with self._lock:
            self._values.clear()

    def set(self, name: SipMetric | str, value: int) -> None:
        with self._lock:
            self._values[_key(name)] = value

    def set_all(self, values: Mapping[SipMetric | str, int]) -> None:
        """Set several counters in one update, so readers see all or none."""
        with self._lock:
            for name, value in values.items():
                self._values[_key(name)] = value

    def inc(self, name: SipMetric | str, delta: int = 1) -> None:
        with self._lock:
            key = _key(name)
            self._values[key] = self._values.get(key, 0) + delta

    def get(self, name: SipMetric | str) -> int:
        with self._lock:
            return self._values.get(_key(name), 0)

    def for_reading(self) -> dict[str, int]:
        """Return a copy of all counters."""
        with self._lock:
            return dict(self._values)


class SipMetrics(Mapping[str, int]):
    """Read-only snapshot of SIP assembly metrics.

    Always contains every SipMetric; counters that were never set read as 0.
    Keys may be given as SipMetric members or as their string values.
    """

    def __init__(self, values: Mapping[str, int] | None = None):
        values = values or {}
        self._values = MappingProxyType(
            {metric.value: int(values.get(metric.value, 0)) for metric in SipMetric}
        )

    def __getitem__(self, key: SipMetric | str) -> int:
        return self._values[_key(key)]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"SipMetrics({dict(self._values)})"

    @property
    def num_aius(self) -> int:
        return self[SipMetric.NUM_AIUS]

    @property
    def num_digital_objects(self) -> int:
        return self[SipMetric.NUM_DIGITAL_OBJECTS]

    @property
    def size_digital_objects(self) -> int:
        return self[SipMetric.SIZE_DIGITAL_OBJECTS]

    @property
    def size_pdi(self) -> int:
        return self[SipMetric.SIZE_PDI]

    @property
    def size_sip(self) -> int:
        return self[SipMetric.SIZE_SIP]

    @property
    def assembly_time(self) -> int:
        """Milliseconds spent assembling the SIP (0 until the SIP is finished)."""
        return self[SipMetric.ASSEMBLY_TIME]
