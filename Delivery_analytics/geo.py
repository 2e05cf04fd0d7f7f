"""Resolve free-text UAE area names to map coordinates.

Resolution is a fixed cascade; the first stage that matches wins:

1. exact key match against :data:`AREA_COORDINATES`
2. match after normalising both sides (lower case, punctuation removed, spaces collapsed)
3. prefix match in either direction ("Al Barsha 1" -> "Al Barsha")
4. substring match in either direction
5. city centroid plus a deterministic, inland-only offset derived from the name

Stages 2-4 scan the reference table in its declared order.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeoCoordinate:
    lat: float
    lng: float


def _c(lat: float, lng: float) -> GeoCoordinate:
    return GeoCoordinate(lat=lat, lng=lng)


AREA_COORDINATES: Mapping[str, GeoCoordinate] = {
    # Dubai
    "Academic City": _c(25.1083, 55.3967),
    "Al Badaa": _c(25.2033, 55.2561),
    "Al Bada'a": _c(25.2033, 55.2561),
    "Al Barsha": _c(25.1091, 55.1946),
    "Al Barsha South": _c(25.085, 55.19),
    "Barsha": _c(25.1091, 55.1946),
    "Barsha Heights": _c(25.0978, 55.1756),
    "Barsha South": _c(25.085, 55.19),
    "Al Garhoud": _c(25.2456, 55.3467),
    "Al Jaddaf": _c(25.22, 55.33),
    "Al Jadaf": _c(25.22, 55.33),
    "Al Jurf": _c(25.0833, 55.1333),
    "Al Karama": _c(25.2428, 55.3022),
    "Al Khawaneej": _c(25.2833, 55.45),
    "Al Mankhool": _c(25.2439, 55.29),
    "Al Muteena": _c(25.275, 55.325),
    "Al Nahda": _c(25.2933, 55.3692),
    "Al Nakheel": _c(25.2944, 55.3167),
    "Al Quoz": _c(25.1344, 55.2453),
    "Al Qusais": _c(25.2667, 55.3833),
    "Al Raffa": _c(25.2561, 55.29),
    "Al Rigga": _c(25.2656, 55.3167),
    "Al Safa": _c(25.1833, 55.2333),
    "Al Satwa": _c(25.2292, 55.2744),
    "Al Seef": _c(25.2533, 55.2967),
    "Al Sufouh": _c(25.1056, 55.1511),
    "Al Warqa": _c(25.2, 55.4167),
    "Al Wasl": _c(25.2061, 55.2531),
    "Arjan": _c(25.05, 55.2333),
    "Baniyas": _c(25.2778, 55.3056),
    "Blue Waters": _c(25.0811, 55.12),
    "Business Bay": _c(25.1842, 55.2724),
    "City Walk": _c(25.2067, 55.2633),
    "Damac Hills": _c(25.04, 55.23),
    "DAMAC Hills": _c(25.04, 55.23),
    "Deira": _c(25.2697, 55.3095),
    "Deira Corniche": _c(25.28, 55.32),
    "Design District": _c(25.1833, 55.3167),
    "DIFC": _c(25.215, 55.28),
    "Discovery Gardens": _c(25.0333, 55.1333),
    "Downtown Dubai": _c(25.1972, 55.2744),
    "Dubai Airport Free Zone": _c(25.25, 55.3667),
    "Dubai Hills": _c(25.1, 55.2333),
    "Dubai Investment Park": _c(24.9833, 55.1667),
    "Dubai Marina": _c(25.08, 55.135),
    "Gold Souq": _c(25.2858, 55.2967),
    "Healthcare City": _c(25.2267, 55.32),
    "Hessa": _c(25.0667, 55.1833),
    "Hor Al Anz": _c(25.2778, 55.3333),
    "Hudaiba": _c(25.235, 55.265),
    "Industrial Area": _c(25.0833, 55.3833),
    "International City": _c(25.1737, 55.4049),
    "International Media Production Zone": _c(25.0333, 55.1667),
    "IMPZ": _c(25.0333, 55.1667),
    "Internet City": _c(25.1, 55.1667),
    "Jailbird": _c(25.22, 55.28),
    "Jebel Ali": _c(25.0167, 55.0333),
    "JBR": _c(25.08, 55.14),
    "JLT": _c(25.0692, 55.1444),
    "Jumeirah": _c(25.2158, 55.2461),
    "Jumeirah Beach Residence": _c(25.08, 55.14),
    "Jumeirah Islands": _c(25.05, 55.15),
    "Jumeirah Lake Towers": _c(25.0692, 55.1444),
    "Jumeirah Park": _c(25.04, 55.15),
    "Jumeirah Village Circle": _c(25.055, 55.21),
    "JVC": _c(25.055, 55.21),
    "Kite Beach": _c(25.15, 55.2),
    "Marina": _c(25.08, 55.135),
    "Meadows": _c(25.05, 55.15),
    "Media City": _c(25.0944, 55.1536),
    "Merh O Mah": _c(25.12, 55.2),
    "Meydan": _c(25.1633, 55.3033),
    "Mirdif": _c(25.2256, 55.4189),
    "Motor City": _c(25.05, 55.2333),
    "Mudon": _c(25.03, 55.26),
    "Muhaisnah": _c(25.2611, 55.4089),
    "Nadd Al Hamar": _c(25.1833, 55.3667),
    "Nad Al Sheba": _c(25.1667, 55.3333),
    "Oud Metha": _c(25.23, 55.31),
    "Palm Jumeirah": _c(25.1124, 55.139),
    "Port Saeed": _c(25.2667, 55.3167),
    "Rashidiya": _c(25.2333, 55.3833),
    "Al Rashidiya": _c(25.2333, 55.3833),
    "Sheikh Zayed Road": _c(25.15, 55.2167),
    "Silicon Oasis": _c(25.1167, 55.3833),
    "Dubai Silicon Oasis": _c(25.1167, 55.3833),
    "Trade Centre": _c(25.2283, 55.285),
    "Umm Al Sheif": _c(25.1333, 55.2),
    "Umm Ramool": _c(25.2333, 55.3667),
    "Umm Suqeim": _c(25.15, 55.2),
    "University City": _c(25.1167, 55.3833),
    # Abu Dhabi
    "Abu Dhabi": _c(24.4539, 54.3773),
    "Abu Dhabi Central": _c(24.4539, 54.3773),
    "Al Bahya": _c(24.5197, 54.6417),
    "Al Bateen": _c(24.4603, 54.3478),
    "Al Dhafrah": _c(23.65, 53.7),
    "Al Falah": _c(24.3667, 54.5333),
    "Al Hosn": _c(24.4833, 54.3533),
    "Al Khalidiyah": _c(24.4681, 54.3481),
    "Al Manhal": _c(24.4528, 54.3678),
    "Al Markaziyah": _c(24.49, 54.365),
    "Al Maryah Island": _c(24.5, 54.3833),
    "Al Muntazah": _c(24.42, 54.5),
    "Al Mushrif": _c(24.4544, 54.3878),
    "Al Nahyan": _c(24.465, 54.38),
    "Al Qana": _c(24.41, 54.49),
    "Al Raha": _c(24.4628, 54.5833),
    "Al Rowdah": _c(24.4539, 54.3708),
    "Al Zahiya": _c(24.4578, 54.3944),
    "Bani Yas East": _c(24.3167, 54.6333),
    "Bawabat": _c(24.35, 54.6),
    "Corniche": _c(24.475, 54.3347),
    "Deerfields": _c(24.3667, 54.5167),
    "Falah City": _c(24.3833, 54.55),
    "Khalidiya": _c(24.4681, 54.3481),
    "Khalifa City": _c(24.4216, 54.5766),
    "Madinat Khalifa": _c(24.45, 54.4),
    "Masdar City": _c(24.4264, 54.6156),
    "Mohammed Bin Zayed City": _c(24.3458, 54.5217),
    "MBZ City": _c(24.3458, 54.5217),
    "Muroor Road": _c(24.4553, 54.3992),
    "Mushrif": _c(24.4544, 54.3878),
    "Mussafah": _c(24.332, 54.5344),
    "Mussafah South": _c(24.31, 54.52),
    "Reem Island": _c(24.4972, 54.4036),
    "Al Reem Island": _c(24.4972, 54.4036),
    "Saadiyat Island": _c(24.5333, 54.4167),
    "Shahama": _c(24.5333, 54.6833),
    "Yas Island": _c(24.4958, 54.6039),
    "Zafranah": _c(24.4417, 54.4167),
    # Al Ain
    "Al Ain": _c(24.2075, 55.7447),
    "Al Ain Central": _c(24.2075, 55.7447),
    "Al Dhahir": _c(24.1833, 55.7667),
    "Al Hili": _c(24.2667, 55.75),
    "Al Jimi": _c(24.2376, 55.7347),
    "Al Mutarad": _c(24.2, 55.75),
    "Al Wijdani": _c(24.19, 55.76),
    "Al Yahar": _c(24.3167, 55.7),
    "Zakher": _c(24.1255, 55.1958),
    # Sharjah
    "Al Fisht": _c(25.355, 55.4),
    "Al Jada": _c(25.32, 55.4),
    "Al Jurain": _c(25.34, 55.41),
    "Al Juraina": _c(25.35, 55.42),
    "Al Majaz": _c(25.3213, 55.3835),
    "Al Qasba": _c(25.33, 55.39),
    "Al Rahmaniya": _c(25.36, 55.43),
    "Al Rifaah": _c(25.37, 55.4),
    "Al Seyouh": _c(25.2833, 55.55),
    "Al Shuwaihen": _c(25.36, 55.39),
    "Industrial Area Sharjah": _c(25.3, 55.45),
    "Muwailah": _c(25.3167, 55.45),
    "Muwaileh": _c(25.3167, 55.45),
    "Samnan": _c(25.37, 55.42),
    "Sharjah": _c(25.3488, 55.4054),
    "Sharjah Central": _c(25.3488, 55.4054),
    "University City Sharjah": _c(25.2967, 55.4733),
    # Ajman
    "Ajman": _c(25.4111, 55.435),
    "Ajman Central": _c(25.4111, 55.435),
    "Al Hamidiya": _c(25.42, 55.45),
    "Al Jurf Ajman": _c(25.4, 55.46),
    "Al Nuaimia": _c(25.3933, 55.4433),
    "Al Rashidiya Ajman": _c(25.41, 55.44),
    "Al Rawda Ajman": _c(25.415, 55.465),
    "Mutawa": _c(25.405, 55.455),
    # Ras Al Khaimah
    "Al Dhait": _c(25.75, 55.95),
    "Al Nakheel RAK": _c(25.79, 55.96),
    "Al Rifaah RAK": _c(25.76, 55.94),
    "Dafan Al Khor": _c(25.82, 55.97),
    "Ras Al Khaimah": _c(25.7895, 55.9432),
    "Ras Al Khaimah Central": _c(25.8007, 55.9762),
    # Fujairah
    "Al Gurfa": _c(25.15, 56.33),
    "Fujairah": _c(25.1164, 56.3414),
    "Fujairah City": _c(25.1164, 56.3414),
}

CITY_CENTROIDS: Mapping[str, GeoCoordinate] = {
    "Dubai": _c(25.2048, 55.2708),
    "Abu Dhabi": _c(24.4539, 54.42),
    "Sharjah": _c(25.3462, 55.4211),
    "Ajman": _c(25.4111, 55.436),
    "Ras Al Khaimah": _c(25.7897, 55.9432),
    "Fujairah": _c(25.1288, 56.3265),
    "Umm Al Quwain": _c(25.5644, 55.5552),
}

DEFAULT_CITY = "Dubai"

# (city, keywords) checked in order; the first city with a keyword in the area name wins.
_CITY_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Abu Dhabi", ("abu dhabi", "khalifa", "maryah", "reem", "yas")),
    ("Sharjah", ("sharjah", "shagara", "majaz", "qasimia")),
    ("Ajman", ("ajman", "nuaimia")),
    ("Ras Al Khaimah", ("ras al khaimah",)),
    ("Fujairah", ("fujairah",)),
    ("Umm Al Quwain", ("umm al quwain",)),
)

MATCH_EXACT = "exact"
MATCH_NORMALIZED = "normalized"
MATCH_PREFIX = "prefix"
MATCH_SUBSTRING = "substring"
MATCH_FALLBACK = "fallback"

# ASCII word characters and any Unicode whitespace survive.
_PUNCTUATION = re.compile(r"[^0-9A-Za-z_\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_area_name(name: str) -> str:
    stripped = _PUNCTUATION.sub("", (name or "").lower())
    return _WHITESPACE.sub(" ", stripped).strip()


def city_from_area(area: str, default_city: str = DEFAULT_CITY) -> str:
    lowered = (area or "").lower()
    for city, keywords in _CITY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return city
    return default_city


def _name_hash(name: str) -> int:
    # Sum of UTF-16 code units so offsets match the dashboard's existing markers.
    total = 0
    for char in name:
        code = ord(char)
        if code > 0xFFFF:
            code -= 0x10000
            total += 0xD800 + (code >> 10) + 0xDC00 + (code & 0x3FF)
        else:
            total += code
    return total


def fallback_offset(area: str) -> Tuple[float, float]:
    """Deterministic (lat, lng) offset: lat within +/-0.02, lng always +0.01..+0.05 (east)."""

    value = _name_hash(area)
    lat_offset = ((value % 100) / 100 - 0.5) * 0.04
    lng_offset = ((value % 50) / 50) * 0.04 + 0.01
    return lat_offset, lng_offset


class GeoResolver:
    """Area name -> coordinate lookup over a read-only reference table."""

    def __init__(
        self,
        coordinates: Mapping[str, GeoCoordinate] = AREA_COORDINATES,
        city_centroids: Mapping[str, GeoCoordinate] = CITY_CENTROIDS,
        default_city: str = DEFAULT_CITY,
    ) -> None:
        self._coordinates: Dict[str, GeoCoordinate] = dict(coordinates)
        self._normalized: Tuple[Tuple[str, GeoCoordinate], ...] = tuple(
            (normalize_area_name(key), value) for key, value in self._coordinates.items()
        )
        self._centroids: Dict[str, GeoCoordinate] = dict(city_centroids)
        self.default_city = default_city if default_city in self._centroids else DEFAULT_CITY

    def match(self, area_name: str) -> Optional[Tuple[GeoCoordinate, str]]:
        """Return ``(coordinate, stage)`` from the reference table, or ``None``."""

        exact = self._coordinates.get(area_name)
        if exact is not None:
            return exact, MATCH_EXACT

        wanted = normalize_area_name(area_name)
        if not wanted:
            return None
        for key, value in self._normalized:
            if key == wanted:
                return value, MATCH_NORMALIZED
        for key, value in self._normalized:
            if wanted.startswith(key) or key.startswith(wanted):
                return value, MATCH_PREFIX
        for key, value in self._normalized:
            if key in wanted or wanted in key:
                return value, MATCH_SUBSTRING
        return None

    def resolve_with_method(self, area_name: str, city_fallback: str = "") -> Tuple[GeoCoordinate, str]:
        found = self.match(area_name)
        if found is not None:
            return found

        city = city_fallback or city_from_area(area_name, self.default_city)
        centre = self._centroids.get(city) or self._centroids[self.default_city]
        lat_offset, lng_offset = fallback_offset(area_name or "")
        logger.debug("Area %r not found in coordinates, using fallback for %s", area_name, city)
        return GeoCoordinate(lat=centre.lat + lat_offset, lng=centre.lng + lng_offset), MATCH_FALLBACK

    def resolve(self, area_name: str, city_fallback: str = "") -> GeoCoordinate:
        return self.resolve_with_method(area_name, city_fallback)[0]


_DEFAULT_RESOLVER = GeoResolver()


def resolve(area_name: str, city_fallback: str = "") -> GeoCoordinate:
    """Resolve with the built-in UAE reference table."""

    return _DEFAULT_RESOLVER.resolve(area_name, city_fallback)
