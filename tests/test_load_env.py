import os
from pathlib import Path

import run


def test_dotenv_fills_gaps_but_real_env_wins(tmp_path: Path, monkeypatch):
    (tmp_path / ".env").write_text(
        "LOOPWALK_PROXY_URL=http://dotenv-proxy:8888\nORS_API_KEY=key-from-dotenv\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("LOOPWALK_PROXY_URL", "http://shell-proxy:8888")
    # Registered so teardown removes whatever load_env sets.
    monkeypatch.setenv("ORS_API_KEY", "placeholder")
    monkeypatch.delenv("ORS_API_KEY")

    run.load_env(root_dir=tmp_path)

    assert os.environ["LOOPWALK_PROXY_URL"] == "http://shell-proxy:8888"
    assert os.environ["ORS_API_KEY"] == "key-from-dotenv"


def test_custom_env_file_name_is_resolved_against_root(tmp_path: Path, monkeypatch):
    (tmp_path / "walk.env").write_text("LOOPWALK_PROXY_URL=http://x\n", encoding="utf-8")
    seen = []
    monkeypatch.setattr(run, "load_dotenv", lambda **kwargs: seen.append(kwargs))

    run.load_env("walk.env", root_dir=tmp_path)

    assert seen == [{"dotenv_path": (tmp_path / "walk.env").resolve(), "override": False}]


def test_missing_env_file_is_skipped(tmp_path: Path, monkeypatch):
    seen = []
    monkeypatch.setattr(run, "load_dotenv", lambda **kwargs: seen.append(kwargs))
    run.load_env(root_dir=tmp_path)
    assert seen == []
