"""Tests for the command-line entry point.

Feature: github-events-sync
"""

import json
import os
import sys
from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

from event_sync import cli
from event_sync.exceptions import DataError, TransportError
from event_sync.ingestion import credentials as credentials_module
from event_sync.ingestion import github_client as github_client_module
from event_sync.sync.models import SyncReport


@pytest.fixture
def environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Isolated configuration with explicit credentials and a temporary log path."""
    for key in list(os.environ):
        if key.startswith("GHEVENTS_"):
            monkeypatch.delenv(key)
    log_path = tmp_path / "events.jsonl"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.setenv("GH_CONFIG_DIR", str(tmp_path / "gh"))
    monkeypatch.setenv("GHEVENTS_GITHUB__LOGIN", "octocat")
    monkeypatch.setenv("GHEVENTS_GITHUB__TOKEN", "test-token")
    monkeypatch.setenv("GHEVENTS_STORAGE__LOG_PATH", str(log_path))
    monkeypatch.setattr(credentials_module.shutil, "which", lambda name: None)
    return log_path


@pytest.fixture
def session(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    fake = MagicMock()
    monkeypatch.setattr(github_client_module.requests, "Session", lambda: fake)
    return fake


def page_of(ids: list[int]) -> requests.Response:
    response = requests.Response()
    response.status_code = 200
    response._content = json.dumps([{"id": str(i)} for i in ids]).encode("utf-8")
    return response


def make_report(appended: int) -> SyncReport:
    now = datetime.now()
    return SyncReport(
        log_path=Path("events.jsonl"),
        watermark=10,
        events_appended=appended,
        start_time=now,
        end_time=now,
    )


def test_run_appends_and_exits_zero(environment: Path, session: MagicMock, capsys):
    session.get.side_effect = [page_of([3, 2, 1])]

    assert cli.main([]) == 0

    assert environment.read_text() == '{"id":"1"}\n{"id":"2"}\n{"id":"3"}\n'
    session.close.assert_called_once()
    assert capsys.readouterr().out == ""


@pytest.mark.usefixtures("environment")
def test_summary_printed_on_terminal(monkeypatch: pytest.MonkeyPatch, capsys):
    monkeypatch.setattr(cli, "perform_sync", lambda config: make_report(4))
    monkeypatch.setattr(sys.stdout, "isatty", lambda: True)

    assert cli.main([]) == 0

    assert capsys.readouterr().out == "Fetched 4 events\n"


@pytest.mark.usefixtures("environment")
def test_no_summary_when_nothing_new(monkeypatch: pytest.MonkeyPatch, capsys):
    monkeypatch.setattr(cli, "perform_sync", lambda config: make_report(0))
    monkeypatch.setattr(sys.stdout, "isatty", lambda: True)

    assert cli.main([]) == 0

    assert capsys.readouterr().out == ""


@pytest.mark.parametrize(
    "error",
    [
        TransportError("GitHub returned HTTP 502 for events page 2", status_code=502),
        DataError("Last line of events.jsonl is not valid JSON"),
    ],
)
@pytest.mark.usefixtures("environment")
def test_fatal_errors_exit_one(monkeypatch: pytest.MonkeyPatch, capsys, error: Exception):
    def failing_sync(config):
        raise error

    monkeypatch.setattr(cli, "perform_sync", failing_sync)

    assert cli.main([]) == 1

    captured = capsys.readouterr()
    assert f"Fatal: {error}" in captured.err
    assert captured.out == ""


def test_missing_credentials_fail_before_network(
    environment: Path, session: MagicMock, monkeypatch: pytest.MonkeyPatch, capsys
):
    monkeypatch.delenv("GHEVENTS_GITHUB__LOGIN")

    assert cli.main([]) == 1

    assert "Fatal: GitHub login not found" in capsys.readouterr().err
    session.get.assert_not_called()
    assert not environment.exists()


def test_unexpected_arguments_are_rejected():
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--full-sync"])

    assert exc_info.value.code == 2


def assert_fatal_without_log(environment: Path, capsys, message: str) -> None:
    captured = capsys.readouterr()
    assert f"Fatal: {message}" in captured.err
    assert captured.out == ""
    assert not environment.exists()


def test_malformed_environment_value_exits_one(
    environment: Path, session: MagicMock, monkeypatch: pytest.MonkeyPatch, capsys
):
    monkeypatch.setenv("GHEVENTS_GITHUB", "{not json")

    assert cli.main([]) == 1

    assert_fatal_without_log(environment, capsys, "Configuration validation failed")
    session.get.assert_not_called()


def test_unusable_log_file_exits_one(
    environment: Path, session: MagicMock, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys
):
    monkeypatch.setenv("GHEVENTS_LOGGING__LOG_FILE", str(tmp_path / "missing" / "sync.log"))

    assert cli.main([]) == 1

    assert_fatal_without_log(environment, capsys, "Cannot open log file")
    session.get.assert_not_called()


def test_unencodable_record_exits_one(environment: Path, session: MagicMock, capsys):
    response = requests.Response()
    response.status_code = 200
    response._content = b'[{"id":"1","payload":{"message":"truncated \\ud83d"}}]'
    session.get.side_effect = [response]

    assert cli.main([]) == 1

    assert_fatal_without_log(environment, capsys, "Events cannot be encoded as UTF-8")
