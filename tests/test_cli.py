"""Tests for the guildhall CLI."""

import json

import pytest

from guildhall.cli import main

SNAPSHOT = {
    "guilds": [
        {
            "id": "100",
            "name": "Alpha",
            "ownerID": "1",
            "members": [{"id": "1", "user": {"username": "alice"}}],
            "roles": [{"id": "r1", "name": "Mod", "position": 1}],
            "channels": [{"id": "c1", "name": "general"}],
        }
    ],
    "commands": [{"name": "ping", "category": "General"}],
    "pieceStores": {"events": {"ready": {}}},
}

SETTINGS = {
    "clientID": "cid",
    "clientSecret": "csecret",
    "callbackURL": "https://dash.example.com/callback",
    "sessionSecret": "s3cret",
    "domainName": "dash.example.com",
    "ownerID": "1",
}


@pytest.fixture
def snapshot(tmp_path):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(SNAPSHOT), encoding="utf-8")
    return str(path)


@pytest.fixture
def settings(tmp_path):
    path = tmp_path / "dashboard.json"
    path.write_text(json.dumps(SETTINGS), encoding="utf-8")
    return str(path)


class TestRoutesCommand:
    def test_api_routes_table(self, snapshot, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", "api", "--snapshot", snapshot])
        out = capsys.readouterr().out
        lines = out.splitlines()
        assert lines[0].split() == ["METHOD", "PATTERN", "ACCESS", "HANDLER"]
        assert "guilds/:guildID/members/:memberID" in out
        assert "events/:id" in out

    def test_dashboard_routes_show_access(
        self, snapshot, settings, capsys: pytest.CaptureFixture[str]
    ) -> None:
        main(["routes", "dashboard", "--snapshot", snapshot, "--config", settings])
        rows = [line.split() for line in capsys.readouterr().out.splitlines()[2:]]
        by_pattern = {(row[0], row[1]): row[2] for row in rows}
        assert by_pattern[("GET", "/")] == "public"
        assert by_pattern[("GET", "/admin")] == "admin"
        assert by_pattern[("GET", "/dashboard")] == "login"
        assert by_pattern[("POST", "/dashboard/:guildID/manage")] == "guild"


class TestErrors:
    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as excinfo:
            main([])
        assert excinfo.value.code == 0
        assert "usage: guildhall" in capsys.readouterr().out

    def test_missing_snapshot(self, tmp_path, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as excinfo:
            main(["routes", "api", "--snapshot", str(tmp_path / "absent.json")])
        assert excinfo.value.code == 1
        assert "cannot load snapshot" in capsys.readouterr().err

    def test_dashboard_needs_config(self, snapshot, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as excinfo:
            main(["routes", "dashboard", "--snapshot", snapshot])
        assert excinfo.value.code == 1
        assert "--config" in capsys.readouterr().err

    def test_bad_dashboard_config(
        self, snapshot, tmp_path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        path = tmp_path / "dashboard.json"
        path.write_text(json.dumps({"clientID": "x"}), encoding="utf-8")
        with pytest.raises(SystemExit) as excinfo:
            main(["routes", "dashboard", "--snapshot", snapshot, "--config", str(path)])
        assert excinfo.value.code == 1
        assert "missing required keys" in capsys.readouterr().err

    def test_unknown_surface(self, snapshot) -> None:
        with pytest.raises(SystemExit) as excinfo:
            main(["routes", "web", "--snapshot", snapshot])
        assert excinfo.value.code == 2
