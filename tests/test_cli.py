import json

import pytest
import requests
from click.testing import CliRunner

from lingo_python_api.__main__ import cli

from conftest import FakeSession, make_response

CREDENTIALS = ["--space-id", "1234", "--token", "secret-token"]


@pytest.fixture
def cli_session(monkeypatch) -> FakeSession:
    """Make every client built by the CLI use a fake session."""
    session = FakeSession()
    monkeypatch.setattr(requests, "Session", lambda: session)
    return session


def test_help_lists_generated_commands():
    result = CliRunner().invoke(cli, ["--help"])
    assert result.exit_code == 0
    for command in ("fetch-kits", "fetch-section", "create-file-asset", "search"):
        assert command in result.output
    assert "call-api" not in result.output


def test_command_help_uses_docstring_args():
    result = CliRunner().invoke(cli, CREDENTIALS + ["fetch-section", "--help"])
    assert result.exit_code == 0
    assert "--section-id" in result.output
    assert "The section id or short id." in result.output


def test_missing_credentials_is_a_usage_error():
    result = CliRunner().invoke(cli, ["fetch-kits"])
    assert result.exit_code == 2
    assert "Space id is required" in result.output


def test_fetch_kits_prints_json(cli_session: FakeSession):
    cli_session.queue_result({"kits": [{"kit_uuid": "k1", "name": "Brand"}]})
    result = CliRunner().invoke(cli, CREDENTIALS + ["fetch-kits"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == [{"kitId": "k1", "name": "Brand", "versions": []}]


def test_options_are_passed_to_method(cli_session: FakeSession):
    cli_session.queue_result({"section": {"uuid": "s1", "items": []}})
    result = CliRunner().invoke(
        cli, CREDENTIALS + ["fetch-section", "--section-id", "logos-s1", "--page", "2"]
    )
    assert result.exit_code == 0, result.output
    assert cli_session.sent[0].url.endswith("/sections/s1?v=0&page=2&limit=50")


def test_json_arguments_are_parsed(cli_session: FakeSession):
    cli_session.queue_result({"asset": {"uuid": "a1", "type": "COLOR"}})
    result = CliRunner().invoke(
        cli,
        CREDENTIALS
        + ["create-color-asset", "--color", "#FF0000", "--asset-data", '{"name": "Red"}'],
    )
    assert result.exit_code == 0, result.output
    assert json.loads(cli_session.sent[0].body)["name"] == "Red"


def test_lingo_error_exits_with_1(cli_session: FakeSession):
    cli_session.queue_error(1100, "Kit not found")
    result = CliRunner().invoke(cli, CREDENTIALS + ["fetch-kit", "--kit-id", "k1"])
    assert result.exit_code == 1


def test_download_writes_bytes(cli_session: FakeSession):
    cli_session.queue_result({"url": "https://cdn.example.com/logo.png"})
    cli_session.queue(make_response(content=b"\x89PNG"))
    result = CliRunner().invoke(cli, CREDENTIALS + ["download-asset", "--asset-id", "a1"])
    assert result.exit_code == 0
    assert result.stdout_bytes == b"\x89PNG"


def test_search_command(cli_session: FakeSession):
    cli_session.queue_result({"total": 0, "offset": 0, "limit": 5, "results": []})
    result = CliRunner().invoke(
        cli, CREDENTIALS + ["search", "--scope", "assets", "--keyword", "logo", "--limit", "5"]
    )
    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {"total": 0, "offset": 0, "limit": 5, "results": []}
    assert "/search?query=" in cli_session.sent[0].url


def test_asset_dates_from_json_options(cli_session: FakeSession, tmp_path):
    path = tmp_path / "logo.png"
    path.write_bytes(b"PNG")
    result = CliRunner().invoke(
        cli,
        CREDENTIALS
        + ["validate-asset", "--file", str(path), "--asset-data", '{"dateAdded": "2020-01-01"}'],
    )
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["dateAdded"] == 1577836800

    result = CliRunner().invoke(
        cli,
        CREDENTIALS
        + ["validate-asset", "--file", str(path), "--asset-data", '{"dateAdded": "soon"}'],
    )
    assert result.exit_code == 1
    assert not isinstance(result.exception, AttributeError)
    assert cli_session.sent == []
