from datetime import datetime, timedelta, timezone

import pytest

from loopwalk.models import PaceSetting, Route
from loopwalk.storage import RouteStore

T0 = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)


def _route(route_id, minutes_later=0, fingerprints=None):
    return Route(
        id=route_id,
        distance_km=2.5,
        duration_minutes=30.0,
        coordinates=[(51.5074, -0.1278), (51.51, -0.12), (51.5074, -0.1278)],
        start_point=(51.5074, -0.1278),
        created_at=T0 + timedelta(minutes=minutes_later),
        fingerprints=fingerprints if fingerprints is not None else [f"{route_id}-a", f"{route_id}-b"],
    )


@pytest.fixture
def store(tmp_path):
    with RouteStore(str(tmp_path / "routes.db")) as s:
        yield s


def test_route_round_trip(store):
    route = _route("route_1")
    store.save_route(route)
    loaded = store.get_route("route_1")
    assert loaded == route
    assert store.get_route("missing") is None


def test_save_route_is_an_upsert(store):
    store.save_route(_route("route_1"))
    updated = _route("route_1")
    updated.name = "Canal loop"
    store.save_route(updated)
    routes = store.list_routes()
    assert len(routes) == 1
    assert routes[0].name == "Canal loop"


def test_list_and_recent_fingerprints_newest_first(store):
    store.save_route(_route("route_old", 0))
    store.save_route(_route("route_new", 10))
    store.save_route(_route("route_mid", 5))

    assert [r.id for r in store.list_routes()] == ["route_new", "route_mid", "route_old"]
    assert store.recent_fingerprints(2) == [
        ["route_new-a", "route_new-b"],
        ["route_mid-a", "route_mid-b"],
    ]
    assert store.recent_fingerprints(0) == []


def test_favorites(store):
    store.save_route(_route("route_1", 0))
    store.save_route(_route("route_2", 1))
    assert store.set_favorite("route_1", True, name="Park loop")
    assert not store.set_favorite("nope", True)

    favorites = store.list_favorites()
    assert [r.id for r in favorites] == ["route_1"]
    assert favorites[0].name == "Park loop"

    assert store.set_favorite("route_1", False)
    assert store.list_favorites() == []
    assert store.get_route("route_1").name == "Park loop"


def test_delete_route(store):
    store.save_route(_route("route_1"))
    assert store.delete_route("route_1") is True
    assert store.get_route("route_1") is None
    assert store.delete_route("route_1") is False


def test_settings_defaults_and_updates(store):
    settings = store.get_settings()
    assert settings.pace == PaceSetting("metric", 12.0)
    assert settings.home_location is None
    assert settings.routing_provider == "proxy"

    store.save_setting("home_location", [51.5074, -0.1278])
    store.save_setting("pace", PaceSetting("imperial", 18.0).to_dict())
    store.save_setting("routing_provider", "demo")
    settings = store.get_settings()
    assert settings.home_location == (51.5074, -0.1278)
    assert settings.pace == PaceSetting("imperial", 18.0)
    assert settings.routing_provider == "demo"

    with pytest.raises(ValueError):
        store.save_setting("theme", "dark")


def test_walk_history(store):
    store.save_route(_route("route_1"))
    first = store.save_walk("route_1", actual_duration=32.5, notes="windy", walk_date="2024-05-01T09:00:00+00:00")
    store.save_walk("route_1", walk_date="2024-05-02T09:00:00+00:00")
    walks = store.list_walks()
    assert [w.walk_date for w in walks] == ["2024-05-02T09:00:00+00:00", "2024-05-01T09:00:00+00:00"]
    assert walks[1] == first
    assert first.id.startswith("walk_")


def test_data_survives_reopen(tmp_path):
    path = str(tmp_path / "routes.db")
    with RouteStore(path) as s:
        s.save_route(_route("route_1"))
    with RouteStore(path) as s:
        assert s.get_route("route_1") is not None
