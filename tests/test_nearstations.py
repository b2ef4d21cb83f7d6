from dataclasses import dataclass

import pytest

from xtwsd.nearstations import NearStations, Node
from xtwsd.xtutil import Coordinates, distance_earth


@dataclass
class StationRef:
    name: str
    coordinates: Coordinates


ORIGIN = (26.2567, -80.08)

STATIONS = [
    StationRef("a", Coordinates(26.71, -78.99666667)),
    StationRef("b", Coordinates(25.76, -80.13)),
    StationRef("c", Coordinates(40.70, -74.01)),
    StationRef("d", Coordinates(26.10, -80.11)),
    StationRef("e", Coordinates(-33.86, 151.21)),
    StationRef("f", Coordinates(27.0, -82.0)),
    StationRef("g", Coordinates(26.25, -80.08)),
]


def _filled(count):
    near = NearStations(*ORIGIN, count)
    for ref in STATIONS:
        near.check(ref)
    return near


def test_keeps_at_most_max_stations():
    near = _filled(3)
    assert len(near) == 3
    assert near.station_count() == 3


def test_fewer_stations_than_max():
    near = _filled(20)
    assert near.station_count() == len(STATIONS)


def test_sorted_nearest_first():
    distances = [node.distance for node in _filled(5)]
    assert distances == sorted(distances)


def test_matches_brute_force_selection():
    origin = Coordinates(*ORIGIN)
    expected = sorted(STATIONS, key=lambda r: distance_earth(origin, r.coordinates))[:4]
    near = _filled(4)
    assert [node.ref.name for node in near] == [r.name for r in expected]


def test_node_distance_matches_station():
    origin = Coordinates(*ORIGIN)
    for node in _filled(5):
        assert node.distance == pytest.approx(distance_earth(origin, node.ref.coordinates))


def test_ties_keep_first_checked_ahead():
    near = NearStations(0.0, 0.0, 3)
    first = StationRef("first", Coordinates(1.0, 0.0))
    second = StationRef("second", Coordinates(1.0, 0.0))
    near.check(first)
    near.check(second)
    assert [node.ref for node in near] == [first, second]


def test_tie_at_full_list_is_rejected():
    near = NearStations(0.0, 0.0, 1)
    first = StationRef("first", Coordinates(1.0, 0.0))
    near.check(first)
    near.check(StationRef("second", Coordinates(1.0, 0.0)))
    assert near[0].ref is first
    assert len(near) == 1


def test_zero_capacity_stays_empty():
    near = _filled(0)
    assert len(near) == 0
    assert list(near) == []


def test_getitem_returns_node():
    near = _filled(2)
    assert isinstance(near[0], Node)
    assert near[0].ref.name == "g"


@pytest.mark.parametrize("pos", [-1, 2, 10])
def test_getitem_out_of_range(pos):
    near = _filled(2)
    with pytest.raises(IndexError):
        _ = near[pos]
    assert len(near) == 2
    assert [node.ref.name for node in near] == ["g", "d"]


def test_negative_capacity_rejected():
    with pytest.raises(ValueError):
        NearStations(0.0, 0.0, -1)