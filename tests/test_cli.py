import builtins
import io
import json
import sys
from pathlib import Path

import pytest

import calc.calc_repl
from calc import calc_cli
from calc.calc_config import CONFIG_ENV_VAR, CalcConfig
from calc.calc_constants import Dialect
from calc.calc_session import Session


@pytest.fixture(autouse=True)  # type: ignore[misc]
def batch_mode(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(calc.calc_repl, "is_interactive", lambda: False)


@pytest.fixture  # type: ignore[misc]
def script_file(tmp_path: Path) -> Path:
    path = tmp_path / "input.txt"
    path.write_text("1 + 2\n2 * 3 + 4\n1 / 0\n(1 + 2) * 3\n", encoding="utf-8")
    return path


@pytest.mark.parametrize(  # type: ignore[misc]
    "argv0, expected",
    [
        ("/usr/local/bin/calc", "calc"),
        ("C:/tools/ecalc.exe", "ecalc"),
        ("scalc.py", "scalc"),
        ("", "calc"),
    ],
)
def test_program_name(argv0: str, expected: str) -> None:
    assert calc_cli.program_name(argv0) == expected


def test_run_calc_string(capsys: pytest.CaptureFixture[str]) -> None:
    assert calc_cli.run_calc("1 + 2\ntrue || false", is_string=True) == 0
    assert capsys.readouterr().out.splitlines() == ["3", "true"]


def test_run_calc_file(script_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert calc_cli.run_calc(str(script_file), prog="calc") == 0
    captured = capsys.readouterr()
    assert captured.out.splitlines() == ["3", "10", "9"]
    assert "calc: 3:5: Division by zero." in captured.err


def test_run_calc_missing_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    missing = tmp_path / "nope.txt"
    assert calc_cli.run_calc(str(missing), prog="calc") == 1
    assert f"calc: Could not open {missing}." in capsys.readouterr().err


def test_run_calc_undecodable_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "binary.txt"
    path.write_bytes(b"\xff\xfe1 + 1\n")
    assert calc_cli.run_calc(str(path)) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "An unexpected I/O error occurred." in captured.err


def test_run_calc_simple_dialect(capsys: pytest.CaptureFixture[str]) -> None:
    config = CalcConfig(Dialect.SIMPLE)
    assert calc_cli.run_calc("99999999999 * 10\n1 < 2", True, config) == 0
    captured = capsys.readouterr()
    assert captured.out.splitlines() == ["999999999990"]
    assert "Unknown token '<'." in captured.err


def test_dump_tokens() -> None:
    out = io.StringIO()
    calc_cli.dump_tokens(Session("1 @"), out)
    assert out.getvalue() == (
        "Token 1:\n\textent: 1:1 [0, 1)\n\tkind: integer\n\tflags: 0\n\ttext: '1'\n"
        "Token 2:\n\textent: 1:3 [2, 3)\n\tkind: unknown\n\tflags: 0 (ERROR)\n\ttext: '@'\n"
        "Token 3:\n\textent: 1:4 [3, 3)\n\tkind: eof\n\tflags: 0\n\ttext: ''\n"
    )


def test_dump_tokens_reports_token_positions() -> None:
    out = io.StringIO()
    calc_cli.dump_tokens(Session("1\r\n  +"), out)
    blocks = out.getvalue().split("Token ")[1:]
    assert [b.splitlines()[1] for b in blocks] == [
        "\textent: 1:1 [0, 1)",
        "\textent: 1:2 [1, 3)",
        "\textent: 2:3 [5, 6)",
        "\textent: 2:4 [6, 6)",
    ]


def test_main_string(capsys: pytest.CaptureFixture[str]) -> None:
    assert calc_cli.main(["-s", "2 + 3 * 4"]) == 0
    assert capsys.readouterr().out.strip() == "14"


def test_main_simple_flag(capsys: pytest.CaptureFixture[str]) -> None:
    assert calc_cli.main(["--simple", "-s", "true"]) == 0
    assert "Unknown token 'true'." in capsys.readouterr().err


def test_main_tokens_flag(capsys: pytest.CaptureFixture[str]) -> None:
    assert calc_cli.main(["--tokens", "-s", "1+1"]) == 0
    out = capsys.readouterr().out
    assert out.count("Token ") == 4
    assert "\tkind: add\n" in out


def test_main_verbose_flag(capsys: pytest.CaptureFixture[str]) -> None:
    assert calc_cli.main(["-v", "-s", "-1"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out == ["[ast] >>> UnaryOp(SUB, Literal(Value.integer(1)))", "-1"]


def test_main_file(script_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert calc_cli.main([str(script_file)]) == 0
    assert capsys.readouterr().out.splitlines() == ["3", "10", "9"]


def test_main_config_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "calc.json"
    path.write_text(json.dumps({"dialect": "simple"}), encoding="utf-8")
    assert calc_cli.main(["--config", str(path), "-s", "1 == 1"]) == 0
    assert "Unknown token '=='." in capsys.readouterr().err


def test_main_config_from_env(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    path = tmp_path / "calc.json"
    path.write_text(json.dumps({"verbose": True}), encoding="utf-8")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
    assert calc_cli.main(["-s", "5"]) == 0
    assert capsys.readouterr().out.startswith("[ast] >>> ")


def test_main_bad_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "calc.json"
    path.write_text(json.dumps({"dialect": 3, "speed": "fast"}), encoding="utf-8")
    assert calc_cli.main(["--config", str(path), "-s", "1"]) == 1
    err = capsys.readouterr().err
    assert "Invalid configuration" in err
    assert " - unknown key 'speed'" in err


def test_main_too_many_arguments() -> None:
    with pytest.raises(SystemExit) as excinfo:
        calc_cli.main(["a.txt", "b.txt"])
    assert excinfo.value.code == 2


def test_main_without_source_starts_repl(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    lines = iter(["6 * 7"])

    def fake_input(prompt: str = "") -> str:
        try:
            return next(lines)
        except StopIteration:
            raise EOFError from None

    monkeypatch.setattr(builtins, "input", fake_input)
    assert calc_cli.main([]) == 0
    assert capsys.readouterr().out.strip() == "42"


def test_main_tokens_from_stdin(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(sys, "stdin", io.StringIO("(1)\n"))
    assert calc_cli.main(["--tokens"]) == 0
    out = capsys.readouterr().out
    assert "\tkind: lparen\n" in out
    assert "\tkind: newline\n" in out
    assert out.count("Token ") == 5
