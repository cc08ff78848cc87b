"""Tests for the command-line entry point."""

import json

import pytest

from location_resolver import __main__ as cli
from location_resolver.config import AppConfig, DatabaseConfig, GeoNamesConfig


@pytest.fixture
def offline_config(monkeypatch):
    config = AppConfig(
        geonames=GeoNamesConfig(api_key=None),
        database=DatabaseConfig(url="sqlite:///:memory:"),
    )
    monkeypatch.setattr(cli, "get_config", lambda: config)
    monkeypatch.setattr(cli, "configure_logging", lambda _config: None)
    return config


def test_search_command(offline_config, capsys):
    assert cli.main(["search", "Mum", "--country", "India", "--no-coordinates"]) == 0

    output = json.loads(capsys.readouterr().out)
    assert output["total"] == 1
    assert output["locations"][0]["name"] == "Mumbai"
    assert "coordinates" not in output["locations"][0]


def test_popular_command(offline_config, capsys):
    assert cli.main(["popular", "--country", "Australia", "--limit", "2"]) == 0

    output = json.loads(capsys.readouterr().out)
    assert [city["name"] for city in output] == ["Sydney", "Melbourne"]


def test_init_db_command(offline_config, capsys):
    assert cli.main(["init-db"]) == 0

    output = json.loads(capsys.readouterr().out)
    assert output["inserted"] > 0


def test_unknown_command_exits():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["teleport"])
