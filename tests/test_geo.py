from __future__ import annotations

import pytest

from Delivery_analytics.geo import (
    AREA_COORDINATES,
    CITY_CENTROIDS,
    MATCH_EXACT,
    MATCH_FALLBACK,
    MATCH_NORMALIZED,
    MATCH_PREFIX,
    MATCH_SUBSTRING,
    GeoCoordinate,
    GeoResolver,
    city_from_area,
    fallback_offset,
    normalize_area_name,
    resolve,
)


@pytest.fixture
def resolver() -> GeoResolver:
    return GeoResolver()


def test_exact_match(resolver):
    coordinate, method = resolver.resolve_with_method("Dubai Marina")
    assert coordinate == GeoCoordinate(25.08, 55.135)
    assert method == MATCH_EXACT


def test_normalized_match_ignores_case_and_punctuation(resolver):
    coordinate, method = resolver.resolve_with_method("  dubai   MARINA! ")
    assert coordinate == AREA_COORDINATES["Dubai Marina"]
    assert method == MATCH_NORMALIZED


def test_normalized_match_beats_an_earlier_prefix_key(resolver):
    # "Al Barsha" precedes "Al Barsha South" in the table and is a prefix of the input.
    coordinate, method = resolver.resolve_with_method("al barsha south")
    assert coordinate == GeoCoordinate(25.085, 55.19)
    assert method == MATCH_NORMALIZED


def test_prefix_match(resolver):
    coordinate, method = resolver.resolve_with_method("Al Barsha 2")
    assert coordinate == AREA_COORDINATES["Al Barsha"]
    assert method == MATCH_PREFIX


def test_prefix_match_beats_an_earlier_substring_key(resolver):
    coordinate, method = resolver.resolve_with_method("Deira City Centre Al Barsha")
    assert coordinate == AREA_COORDINATES["Deira"]
    assert method == MATCH_PREFIX


def test_substring_match(resolver):
    coordinate, method = resolver.resolve_with_method("Palm Deira")
    assert coordinate == AREA_COORDINATES["Deira"]
    assert method == MATCH_SUBSTRING


def test_fallback_uses_city_centroid_and_name_offset(resolver):
    coordinate, method = resolver.resolve_with_method("Warsan Village", "Dubai")

    assert method == MATCH_FALLBACK
    # "Warsan Village" code units sum to 1360
    assert coordinate.lat == pytest.approx(25.2048 + 0.004)
    assert coordinate.lng == pytest.approx(55.2708 + 0.018)


def test_fallback_is_deterministic_and_east_of_centre(resolver):
    for name in ("Warsan Village", "Nowhere Gardens", "Zzz", "Ørsted Plaza"):
        first = resolver.resolve(name, "Sharjah")
        assert resolver.resolve(name, "Sharjah") == first
        centre = CITY_CENTROIDS["Sharjah"]
        assert centre.lat - 0.02 <= first.lat <= centre.lat + 0.02
        assert centre.lng + 0.01 <= first.lng <= centre.lng + 0.05


def test_fallback_city_inferred_from_area_name(resolver):
    coordinate, method = resolver.resolve_with_method("Khalifa Park North")
    lat_offset, lng_offset = fallback_offset("Khalifa Park North")

    assert method == MATCH_FALLBACK
    assert coordinate.lat == pytest.approx(CITY_CENTROIDS["Abu Dhabi"].lat + lat_offset)
    assert coordinate.lng == pytest.approx(CITY_CENTROIDS["Abu Dhabi"].lng + lng_offset)


def test_unknown_city_falls_back_to_default(resolver):
    lat_offset, lng_offset = fallback_offset("Nowhere Gardens")
    coordinate = resolver.resolve("Nowhere Gardens", "Atlantis")

    assert coordinate.lat == pytest.approx(CITY_CENTROIDS["Dubai"].lat + lat_offset)
    assert coordinate.lng == pytest.approx(CITY_CENTROIDS["Dubai"].lng + lng_offset)


def test_empty_area_goes_to_fallback(resolver):
    coordinate, method = resolver.resolve_with_method("")

    assert method == MATCH_FALLBACK
    assert coordinate.lat == pytest.approx(25.2048 - 0.02)
    assert coordinate.lng == pytest.approx(55.2708 + 0.01)


def test_module_level_resolve_uses_builtin_table():
    assert resolve("JBR") == GeoCoordinate(25.08, 55.14)


def test_custom_reference_table():
    custom = GeoResolver({"Lab": GeoCoordinate(1.0, 2.0)}, default_city="Sharjah")

    assert custom.resolve("lab") == GeoCoordinate(1.0, 2.0)
    assert custom.match("Dubai Marina") is None
    assert custom.default_city == "Sharjah"


@pytest.mark.parametrize(
    "area, city",
    [
        ("Yas Island", "Abu Dhabi"),
        ("Khalifa City A", "Abu Dhabi"),
        ("Al Majaz 3", "Sharjah"),
        ("Al Nuaimia 1", "Ajman"),
        ("Ras Al Khaimah Creek", "Ras Al Khaimah"),
        ("Business Bay", "Dubai"),
        ("", "Dubai"),
    ],
)
def test_city_from_area(area, city):
    assert city_from_area(area) == city


def test_normalize_area_name():
    assert normalize_area_name("  Al  Bada'a ") == "al badaa"
    assert normalize_area_name("JLT - Cluster D") == "jlt cluster d"


def test_normalized_match_treats_non_breaking_space_as_whitespace(resolver):
    assert normalize_area_name("Business\u00a0Bay") == "business bay"

    coordinate, method = resolver.resolve_with_method("Business\u00a0Bay", "Dubai")
    assert coordinate == AREA_COORDINATES["Business Bay"]
    assert method == MATCH_NORMALIZED


def test_fallback_without_city_uses_configured_default():
    custom = GeoResolver(default_city="Sharjah")
    lat_offset, lng_offset = fallback_offset("Nowhere Gardens")
    coordinate = custom.resolve("Nowhere Gardens")

    assert city_from_area("Nowhere Gardens", "Sharjah") == "Sharjah"
    assert coordinate.lat == pytest.approx(CITY_CENTROIDS["Sharjah"].lat + lat_offset)
    assert coordinate.lng == pytest.approx(CITY_CENTROIDS["Sharjah"].lng + lng_offset)
