"""Geographic and string helpers used by the tide web service."""

from __future__ import annotations

import math
from dataclasses import dataclass

__all__ = [
    "UTC",
    "EARTH_RADIUS_KM",
    "Coordinates",
    "deg2rad",
    "rad2deg",
    "distance_earth",
    "utf8_check_is_valid",
    "url_encode",
]

UTC = ":UTC"
EARTH_RADIUS_KM = 6371.0

_URL_SAFE = frozenset(
    b"abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-_.~"
)


@dataclass(frozen=True)
class Coordinates:
    """A position in signed decimal degrees."""

    lat: float
    lng: float


def deg2rad(deg: float) -> float:
    """Convert degrees to radians."""
    return deg * math.pi / 180


def rad2deg(rad: float) -> float:
    """Convert radians to degrees."""
    return rad * 180 / math.pi


def distance_earth(c1: Coordinates, c2: Coordinates) -> float:
    """Great-circle distance in kilometres between two points (haversine)."""
    lat1 = deg2rad(c1.lat)
    lon1 = deg2rad(c1.lng)
    lat2 = deg2rad(c2.lat)
    lon2 = deg2rad(c2.lng)
    u = math.sin((lat2 - lat1) / 2)
    v = math.sin((lon2 - lon1) / 2)
    h = min(1.0, u * u + math.cos(lat1) * math.cos(lat2) * v * v)
    return 2.0 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))


def _as_bytes(data: str | bytes | bytearray) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8", "surrogatepass")
    return bytes(data)


def utf8_check_is_valid(data: str | bytes | bytearray) -> bool:
    """Tell whether ``data`` is well-formed UTF-8 (surrogates are rejected)."""
    stream = iter(_as_bytes(data))
    for lead in stream:
        if lead < 0x80:
            continue
        if lead & 0xE0 == 0xC0:
            follow = 1
        elif lead & 0xF0 == 0xE0:
            follow = 2
        elif lead & 0xF8 == 0xF0:
            follow = 3
        else:
            return False
        for position in range(follow):
            byte = next(stream, None)
            if byte is None or byte & 0xC0 != 0x80:
                return False
            # 0xED followed by 0xA0..0xBF encodes U+D800..U+DFFF
            if position == 0 and lead == 0xED and byte & 0xA0 == 0xA0:
                return False
    return True


def url_encode(value: str | bytes | bytearray) -> str:
    """Percent-encode every byte except ASCII letters, digits and ``-_.~``."""
    return "".join(
        chr(byte) if byte in _URL_SAFE else f"%{byte:02X}"
        for byte in _as_bytes(value)
    )