"""Tests for the command-line interface."""

import sys
from pathlib import Path

import httpx
import pytest
from pydantic import ValidationError

from newswave import cli
from newswave.cli import CLIArgs, build_parser, run

LOCAL_CONFIG = """
verifier:
  type: fixed
  score: 0.82
store:
  type: memory
ledger:
  type: memory
identity:
  type: static
  address: "0x1234567890abcdef1234567890abcdef12345678"
"""


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "local.yaml"
    path.write_text(LOCAL_CONFIG)
    return path


def test_parser_publish() -> None:
    ns = build_parser().parse_args(["publish", "Flood warning", "--body", "River rising."])
    assert ns.command == "publish"
    assert ns.title == "Flood warning"
    assert ns.body == "River rising."


def test_parser_list_only() -> None:
    ns = build_parser().parse_args(["-c", "x.yaml", "list", "--only", "verified"])
    assert ns.command == "list"
    assert ns.only == "verified"
    assert ns.config == Path("x.yaml")


def test_parser_publish_requires_body() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["publish", "Flood warning"])


def test_cli_args_config_must_exist(tmp_path: Path) -> None:
    with pytest.raises(ValidationError, match="Config file not found"):
        CLIArgs(command="list", config=tmp_path / "missing.yaml")


def test_cli_args_rejects_negative_index(config_path: Path) -> None:
    with pytest.raises(ValidationError):
        CLIArgs(command="show", config=config_path, index=-1)


def test_cli_args_show_requires_index(config_path: Path) -> None:
    with pytest.raises(ValidationError, match="show requires an index"):
        CLIArgs(command="show", config=config_path)


async def test_run_publish(config_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    args = CLIArgs(
        command="publish", config=config_path, title="Flood warning", body="River rising."
    )

    assert await run(args) == 0

    out = capsys.readouterr().out
    assert "Published #0: Flood warning" in out
    assert "0x1234...5678" in out
    assert "82%" in out


async def test_run_publish_failure_prints_description(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    path = tmp_path / "http.yaml"
    path.write_text(
        LOCAL_CONFIG.replace("type: fixed\n  score: 0.82", "type: http\n  url: http://verify")
    )

    async def mock_post(*args, **kwargs):
        raise httpx.ConnectError("refused")

    monkeypatch.setattr(httpx.AsyncClient, "post", mock_post)
    args = CLIArgs(command="publish", config=path, title="t", body="b")

    assert await run(args) == 1

    err = capsys.readouterr().err
    assert "verifying" in err
    assert "Nothing was stored" in err


async def test_run_publish_without_identity(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv("NEWSWAVE_ADDRESS", raising=False)
    path = tmp_path / "anon.yaml"
    path.write_text("identity:\n  type: static\n")
    args = CLIArgs(command="publish", config=path, title="t", body="b")

    assert await run(args) == 1


async def test_run_list_empty(config_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert await run(CLIArgs(command="list", config=config_path)) == 0
    assert "0 of 0 articles" in capsys.readouterr().out


async def test_run_show_out_of_range(config_path: Path) -> None:
    assert await run(CLIArgs(command="show", config=config_path, index=0)) == 1


async def test_run_retry_record(config_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    args = CLIArgs(
        command="retry-record", config=config_path, content_ref="sha256-abc", title="t"
    )

    assert await run(args) == 0
    assert "Recorded #0: sha256-abc" in capsys.readouterr().out


def test_main_keyboard_interrupt(config_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def interrupted(coro):
        coro.close()
        raise KeyboardInterrupt

    monkeypatch.setattr(sys, "argv", ["newswave", "-c", str(config_path), "list"])
    monkeypatch.setattr(cli.asyncio, "run", interrupted)

    with pytest.raises(SystemExit) as exc_info:
        cli.main()
    assert exc_info.value.code == 130


def test_main_missing_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "argv", ["newswave", "-c", str(tmp_path / "nope.yaml"), "list"])

    with pytest.raises(SystemExit) as exc_info:
        cli.main()
    assert exc_info.value.code == 1
