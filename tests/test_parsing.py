import pytest

from loopwalk.errors import InvalidIsochroneError, MalformedRouteError
from loopwalk.routing_client import (
    build_isochrone_body,
    build_route_body,
    parse_isochrone_polygon,
    parse_route_response,
)


def _feature(coords, properties):
    return {"type": "FeatureCollection", "features": [{"geometry": {"coordinates": coords}, "properties": properties}]}


def test_parse_route_summary_variant():
    response = _feature([[-0.1, 51.5], [-0.11, 51.51]], {"summary": {"distance": 2500, "duration": 1800}})
    coords, km, minutes = parse_route_response(response)
    assert coords == [(51.5, -0.1), (51.51, -0.11)]
    assert km == 2.5
    assert minutes == 30


def test_parse_route_top_level_properties_variant():
    response = _feature([[-0.1, 51.5], [-0.11, 51.51]], {"distance": 1000, "duration": 720})
    _, km, minutes = parse_route_response(response)
    assert km == 1.0
    assert minutes == 12


@pytest.mark.parametrize(
    "response",
    [
        {},
        {"features": []},
        None,
        _feature([[-0.1, 51.5]], {"distance": 1000, "duration": 720}),
        _feature([[-0.1, 51.5], [-0.11, 51.51]], {}),
        _feature([[-0.1, 51.5], [-0.11, 51.51]], {"distance": 0, "duration": 720}),
        _feature([["x"], [-0.11, 51.51]], {"distance": 10, "duration": 10}),
        {"features": [{"geometry": "oops", "properties": {}}]},
        {"features": "oops"},
        {"features": ["oops"]},
        _feature({"x": 1}, {"distance": 10, "duration": 10}),
        _feature([[-0.1, 51.5], [-0.11, 51.51]], "oops"),
        _feature([[-0.1, 51.5], [True, 51.51]], {"distance": 10, "duration": 10}),
        _feature([[-0.1, 51.5], [-0.11, 51.51]], {"distance": "far", "duration": 10}),
    ],
)
def test_parse_route_malformed(response):
    with pytest.raises(MalformedRouteError):
        parse_route_response(response)


def test_parse_isochrone_polygon():
    ring = [[-0.1, 51.5], [-0.09, 51.5], [-0.09, 51.51], [-0.1, 51.51], [-0.1, 51.5]]
    polygon = parse_isochrone_polygon(_feature([ring], {"value": 900}))
    assert len(polygon) == 5
    assert polygon[0] == (51.5, -0.1)


def test_parse_isochrone_too_few_points():
    ring = [[-0.1, 51.5], [-0.09, 51.5], [-0.1, 51.5]]
    with pytest.raises(InvalidIsochroneError):
        parse_isochrone_polygon(_feature([ring], {}))
    with pytest.raises(InvalidIsochroneError):
        parse_isochrone_polygon({"features": []})
    with pytest.raises(InvalidIsochroneError):
        parse_isochrone_polygon(_feature([], {}))


def test_request_bodies_use_lon_lat_order():
    body = build_route_body((51.5, -0.1), (51.51, -0.12), "foot-walking")
    assert body == {"start": [-0.1, 51.5], "waypoints": [[-0.12, 51.51]], "profile": "foot-walking"}
    iso = build_isochrone_body((51.5, -0.1), 900, "foot-walking")
    assert iso == {"start": [-0.1, 51.5], "timeSeconds": 900, "profile": "foot-walking"}


def test_parse_route_ignores_non_dict_summary():
    response = _feature([[-0.1, 51.5], [-0.11, 51.51]], {"summary": "n/a", "distance": 1000, "duration": 720})
    _, km, minutes = parse_route_response(response)
    assert km == 1.0
    assert minutes == 12


@pytest.mark.parametrize(
    "response",
    [
        _feature({"x": 1}, {}),
        _feature([{"x": 1}], {}),
        _feature(["oops"], {}),
        {"features": [{"geometry": "oops"}]},
        {"features": [None]},
    ],
)
def test_parse_isochrone_wrong_shapes(response):
    with pytest.raises(InvalidIsochroneError):
        parse_isochrone_polygon(response)
