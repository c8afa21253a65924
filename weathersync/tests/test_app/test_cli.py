"""Tests for CLI commands."""

from pathlib import Path

import httpx
import pytest
import respx

from weathersync.cli import main
from weathersync.config.loader import load_config

BASE = "https://test-owm.example.com"
PROBE = f"{BASE}/ping"


@pytest.fixture
def cli_args(tmp_path: Path) -> list[str]:
    config_path = tmp_path / "test.yaml"
    config_path.write_text(
        f"api:\n  base_url: {BASE}\n  api_key: k\n  max_retries: 0\n"
        f"sync:\n  warm_favorites: false\n  connectivity_url: {PROBE}\n"
    )
    return ["--config", str(config_path), "--data-dir", str(tmp_path / "data")]


class TestCLI:
    def test_no_command_returns_1(self, capsys):
        assert main([]) == 1

    def test_config_show(self, cli_args, capsys):
        assert main([*cli_args, "config", "show"]) == 0
        assert "test-owm.example.com" in capsys.readouterr().out

    def test_config_set(self, cli_args, capsys):
        assert main([*cli_args, "config", "set", "sync.default_location=Paris"]) == 0
        assert "Paris" in capsys.readouterr().out
        saved = load_config(cli_args[1])
        assert saved.sync.default_location == "Paris"
        assert saved.api.base_url == BASE
        # --data-dir is a per-run override and stays out of the file
        assert saved.cache.data_dir != cli_args[3]

    def test_config_set_unknown_key(self, cli_args, capsys):
        before = Path(cli_args[1]).read_text()
        assert main([*cli_args, "config", "set", "sync.nope=1"]) == 1
        assert Path(cli_args[1]).read_text() == before
        assert "Error" in capsys.readouterr().out

    def test_favorites(self, cli_args, capsys):
        assert main([*cli_args, "favorites", "list"]) == 0
        assert "no favorite locations" in capsys.readouterr().out

        assert main([*cli_args, "favorites", "add", "Paris"]) == 0
        assert "added to favorites" in capsys.readouterr().out
        assert main([*cli_args, "favorites", "add", "Paris"]) == 0
        assert "already a favorite" in capsys.readouterr().out

        main([*cli_args, "favorites", "list"])
        assert capsys.readouterr().out.strip() == "Paris"

        assert main([*cli_args, "favorites", "remove", "Paris"]) == 0
        assert main([*cli_args, "favorites", "remove", "Paris"]) == 1

    def test_settings(self, cli_args, capsys):
        assert main([*cli_args, "settings", "set-interval", "15"]) == 0
        assert "Auto-refresh set to 15 minutes" in capsys.readouterr().out
        assert main([*cli_args, "settings", "set-interval", "7"]) == 1
        capsys.readouterr()

        assert main([*cli_args, "settings", "set-unit", "F"]) == 0
        assert main([*cli_args, "settings", "show"]) == 0
        out = capsys.readouterr().out
        assert "Auto-refresh: 15 minutes" in out
        assert "Unit: °F" in out

    def test_show_without_cache(self, cli_args, capsys):
        assert main([*cli_args, "show", "Paris"]) == 1
        assert "! No cached data for Paris" in capsys.readouterr().out

    @respx.mock
    def test_fetch_then_show(self, cli_args, capsys, current_text, forecast_text):
        respx.head(PROBE).mock(return_value=httpx.Response(200))
        respx.get(f"{BASE}/data/2.5/weather").mock(
            return_value=httpx.Response(200, text=current_text)
        )
        respx.get(f"{BASE}/data/2.5/forecast").mock(
            return_value=httpx.Response(200, text=forecast_text)
        )
        assert main([*cli_args, "fetch", "London"]) == 0
        out = capsys.readouterr().out
        assert "* Weather data refreshed!" in out
        assert "=== Current Weather - London, GB ===" in out
        assert "Status: ready" in out

        assert main([*cli_args, "show"]) == 0
        out = capsys.readouterr().out
        assert "showing last known data for London" in out

    @respx.mock
    def test_fetch_failure(self, cli_args, capsys):
        respx.head(PROBE).mock(return_value=httpx.Response(200))
        respx.get(f"{BASE}/data/2.5/weather").mock(
            return_value=httpx.Response(404, text='{"message": "city not found"}')
        )
        assert main([*cli_args, "fetch", "Atlantis"]) == 1
        assert "! API Error: Unsuccessful response: 404" in capsys.readouterr().out

    def test_warm_without_favorites(self, cli_args, capsys):
        assert main([*cli_args, "warm"]) == 0
        assert "No favorites" in capsys.readouterr().out
