from __future__ import annotations

import json
import tempfile
from pathlib import Path

import pytest

from fastfm.cli import app as cli_app


def test_sample_config_prints_json(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(cli_app.typer.Exit) as exc_info:
        cli_app.run(sample_config=True)

    assert exc_info.value.exit_code == 0
    out = capsys.readouterr().out
    assert json.loads(out)["keyboard"]["navigation"]["tab"] == "tab"


def test_list_prints_directory(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(cli_app, "console", cli_app.Console(width=200))
    with tempfile.TemporaryDirectory() as tmp:
        (Path(tmp) / "sub").mkdir()
        (Path(tmp) / "hello.txt").write_text("hi", encoding="utf-8")

        with pytest.raises(cli_app.typer.Exit) as exc_info:
            cli_app.run(list_path=tmp, config_file=str(Path(tmp) / "none.json"))

    assert exc_info.value.exit_code == 0
    out = capsys.readouterr().out
    assert "sub/" in out
    assert "hello.txt" in out


def test_list_missing_directory_exits_with_error(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(cli_app, "console", cli_app.Console(width=200))
    with pytest.raises(cli_app.typer.Exit) as exc_info:
        cli_app.run(list_path="/definitely/not/here", config_file="/definitely/not/here.json")

    assert exc_info.value.exit_code == 1
    assert "Path does not exist" in capsys.readouterr().out


def test_empty_search_keyword_is_rejected(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(cli_app, "console", cli_app.Console(width=200))
    with pytest.raises(cli_app.typer.Exit) as exc_info:
        cli_app.run(search="  ", config_file="/definitely/not/here.json")

    assert exc_info.value.exit_code == 1
    assert "must not be empty" in capsys.readouterr().out
