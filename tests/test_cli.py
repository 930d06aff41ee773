import json

import pytest

import run
from loopwalk import config
from loopwalk.storage import RouteStore


@pytest.fixture(autouse=True)
def offline(monkeypatch):
    monkeypatch.setattr(run, "load_env", lambda *a, **k: None)
    monkeypatch.setattr(config, "load_walk_config", lambda *a, **k: False)
    monkeypatch.setattr(config, "HOME_LOCATION", None)


def _args(db_path, *extra):
    return ["--provider", "demo", "--seed", "7", "--db-path", str(db_path), *extra]


def test_demo_run_saves_and_writes_outputs(tmp_path, capsys):
    db = tmp_path / "routes.db"
    out = tmp_path / "out" / "route.json"
    geojson = tmp_path / "out" / "route.geojson"

    code = run.main(
        _args(db, "--lat", "51.5074", "--lon", "-0.1278", "--duration", "30", "--out", str(out), "--geojson", str(geojson))
    )

    assert code == 0
    printed = capsys.readouterr().out
    assert "- stage: isochrone:synthetic" in printed
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["start_point"] == [51.5074, -0.1278]
    assert json.loads(geojson.read_text(encoding="utf-8"))["type"] == "FeatureCollection"
    with RouteStore(str(db)) as store:
        routes = store.list_routes()
    assert [r.id for r in routes] == [data["id"]]


def test_no_save_leaves_store_empty(tmp_path):
    db = tmp_path / "routes.db"
    assert run.main(_args(db, "--lat", "51.5", "--lon", "-0.1", "--no-save")) == 0
    with RouteStore(str(db)) as store:
        assert store.list_routes() == []


def test_missing_start_location(tmp_path, capsys):
    assert run.main(_args(tmp_path / "routes.db")) == 1
    assert "start location" in capsys.readouterr().err


def test_set_home_then_generate(tmp_path):
    db = tmp_path / "routes.db"
    assert run.main(_args(db, "--set-home", "--lat", "51.5074", "--lon", "-0.1278", "--unit", "imperial")) == 0
    with RouteStore(str(db)) as store:
        settings = store.get_settings()
    assert settings.home_location == (51.5074, -0.1278)
    assert settings.pace.unit == "imperial"
    assert settings.routing_provider == "demo"

    assert run.main(["--db-path", str(db), "--seed", "3"]) == 0


def test_route_management_commands(tmp_path, capsys):
    db = tmp_path / "routes.db"
    assert run.main(_args(db, "--lat", "51.5", "--lon", "-0.1")) == 0
    with RouteStore(str(db)) as store:
        route_id = store.list_routes()[0].id
    capsys.readouterr()

    assert run.main(_args(db, "--favorite", route_id, "--name", "Morning loop")) == 0
    assert run.main(_args(db, "--list-favorites")) == 0
    assert "Morning loop" in capsys.readouterr().out

    assert run.main(_args(db, "--log-walk", route_id, "--walk-minutes", "33")) == 0
    with RouteStore(str(db)) as store:
        assert store.list_walks()[0].route_id == route_id

    assert run.main(_args(db, "--delete-route", route_id)) == 0
    assert run.main(_args(db, "--delete-route", route_id)) == 1
    assert run.main(_args(db, "--list-routes")) == 0
    assert "No routes stored." in capsys.readouterr().out


def test_invalid_duration_is_reported(tmp_path, capsys):
    assert run.main(_args(tmp_path / "routes.db", "--lat", "51.5", "--lon", "-0.1", "--duration", "0")) == 1
    assert "Invalid request" in capsys.readouterr().err


def test_preflight(tmp_path, capsys):
    assert run.main(_args(tmp_path / "routes.db", "--preflight")) == 0
    assert "Preflight: PASS" in capsys.readouterr().out
