"""A bounded list of the stations nearest to a point."""

from __future__ import annotations

import bisect
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from .xtutil import Coordinates, distance_earth

__all__ = ["Node", "NearStations"]


@dataclass
class Node:
    """A station together with its distance, in kilometres, from the origin."""

    distance: float
    ref: Any


class NearStations:
    """Keeps at most ``max_stations`` stations, ordered nearest first.

    Stations are objects with a ``coordinates`` attribute. Among stations at
    equal distance, the one checked first stays ahead.
    """

    def __init__(self, lat: float, lng: float, max_stations: int) -> None:
        if max_stations < 0:
            raise ValueError("max_stations must not be negative")
        self.origin = Coordinates(lat, lng)
        self.max_stations = max_stations
        self._nodes: list[Node] = []
        self._distances: list[float] = []

    def check(self, ref: Any) -> None:
        """Add ``ref`` if it is among the nearest stations seen so far."""
        dist = distance_earth(self.origin, ref.coordinates)
        pos = bisect.bisect_right(self._distances, dist)
        if pos >= self.max_stations:
            return
        self._distances.insert(pos, dist)
        self._nodes.insert(pos, Node(dist, ref))
        del self._distances[self.max_stations:]
        del self._nodes[self.max_stations:]

    def __getitem__(self, pos: int) -> Node:
        if not 0 <= pos < len(self._nodes):
            raise IndexError(f"no station at position {pos}")
        return self._nodes[pos]

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(list(self._nodes))

    def station_count(self) -> int:
        """Number of stations currently held."""
        return len(self._nodes)