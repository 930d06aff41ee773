import math

from loopwalk.geo import (
    bounds,
    center,
    distance_km,
    is_valid_coordinate,
    latlon_to_lonlat,
    lonlat_to_latlon,
    offset_point,
    path_length_km,
)

LONDON = (51.5074, -0.1278)
PARIS = (48.8566, 2.3522)


def test_distance_london_paris():
    d = distance_km(LONDON, PARIS)
    assert 300 < d < 400
    assert distance_km(LONDON, LONDON) == 0


def test_path_length_sums_legs():
    a, b, c = (51.5, -0.1), (51.51, -0.1), (51.52, -0.1)
    assert math.isclose(path_length_km([a, b, c]), distance_km(a, b) + distance_km(b, c))
    assert path_length_km([a]) == 0
    assert path_length_km([]) == 0


def test_bounds_and_center():
    coords = [(51.0, -1.0), (52.0, 1.0), (51.5, 0.0)]
    assert bounds(coords) == ((51.0, -1.0), (52.0, 1.0))
    assert center(coords) == (51.5, 0.0)
    assert bounds([]) is None
    assert center([]) is None


def test_offset_point_directions():
    east = offset_point((0.0, 0.0), 0.0, 0.01)
    north = offset_point((0.0, 0.0), math.pi / 2, 0.01)
    assert math.isclose(east[1], 0.01) and math.isclose(east[0], 0.0, abs_tol=1e-12)
    assert math.isclose(north[0], 0.01) and math.isclose(north[1], 0.0, abs_tol=1e-12)


def test_is_valid_coordinate():
    assert is_valid_coordinate(LONDON)
    assert is_valid_coordinate([0, 0])
    assert not is_valid_coordinate((91.0, 0.0))
    assert not is_valid_coordinate((0.0, 181.0))
    assert not is_valid_coordinate((float("nan"), 0.0))
    assert not is_valid_coordinate((True, 0.0))
    assert not is_valid_coordinate(("51.5", "-0.1"))
    assert not is_valid_coordinate((51.5,))
    assert not is_valid_coordinate(None)


def test_lonlat_conversion():
    assert lonlat_to_latlon([[-0.1278, 51.5074]]) == [(51.5074, -0.1278)]
    assert latlon_to_lonlat([(51.5074, -0.1278)]) == [[-0.1278, 51.5074]]
