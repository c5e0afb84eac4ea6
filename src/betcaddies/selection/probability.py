"""Win probability estimators used to score candidates."""

from __future__ import annotations

from typing import Protocol

from betcaddies.selection.types import TourEvent

_INT32_MASK = 0xFFFFFFFF


class ProbabilityModel(Protocol):
    def __call__(self, tour_event: TourEvent, selection_name: str) -> float:
        ...


def name_hash(name: str) -> int:
    """Signed 32-bit ``h = 31 * h + unit`` hash over the UTF-16 code units of ``name``."""

    data = name.encode("utf-16-le")
    value = 0
    for idx in range(0, len(data), 2):
        unit = int.from_bytes(data[idx : idx + 2], "little")
        value = (value * 31 + unit) & _INT32_MASK
    if value >= 2**31:
        value -= 2**32
    return value


def hash_probability(tour_event: TourEvent, selection_name: str) -> float:
    """Placeholder model: a stable pseudo-probability in [0.01, 0.30].

    The event is ignored; any real forecasting model with the same call
    signature can be passed to the candidate builder instead.
    """

    return abs(name_hash(selection_name)) % 30 / 100 + 0.01
