from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from calc.calc_config import CONFIG_ENV_VAR, DEFAULT_PROMPT, CalcConfig
from calc.calc_constants import Dialect
from calc.calc_errors import ConfigError


def test_defaults() -> None:
    config = CalcConfig()
    assert config.dialect == Dialect.EXTENDED
    assert config.ascii_only is False
    assert config.verbose is False
    assert config.prompt == DEFAULT_PROMPT


def test_load_from_json(write_config: Callable[[Any], Path]) -> None:
    path = write_config({"dialect": "simple", "ascii_only": True, "prompt": "calc> "})
    config = CalcConfig.load_from_json(str(path))
    assert config == CalcConfig(Dialect.SIMPLE, ascii_only=True, prompt="calc> ")


def test_invalid_settings_are_all_reported(write_config: Callable[[Any], Path]) -> None:
    path = write_config({"dialect": "fancy", "verbose": "yes", "colour": True, "prompt": 3})
    with pytest.raises(ConfigError) as excinfo:
        CalcConfig.load_from_json(str(path))
    assert str(excinfo.value) == "Invalid configuration"
    problems = excinfo.value.problems
    assert len(problems) == 4
    assert any("dialect" in p for p in problems)
    assert any("unknown key 'colour'" in p for p in problems)


def test_config_must_be_object(write_config: Callable[[Any], Path]) -> None:
    path = write_config([1, 2])
    with pytest.raises(ConfigError, match="JSON object"):
        CalcConfig.load_from_json(str(path))


def test_unreadable_config(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Failed to load config file"):
        CalcConfig.load_from_json(str(tmp_path / "missing.json"))
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError):
        CalcConfig.load_from_json(str(broken))


def test_from_env(write_config: Callable[[Any], Path]) -> None:
    assert CalcConfig.from_env({}) == CalcConfig()
    path = write_config({"verbose": True})
    assert CalcConfig.from_env({CONFIG_ENV_VAR: str(path)}).verbose is True


def test_from_env_reads_os_environ(
    monkeypatch: pytest.MonkeyPatch, write_config: Callable[[Any], Path]
) -> None:
    monkeypatch.setenv(CONFIG_ENV_VAR, str(write_config({"dialect": "simple"})))
    assert CalcConfig.from_env().dialect == Dialect.SIMPLE


def test_merged_ignores_none() -> None:
    base = CalcConfig(verbose=True)
    merged = base.merged(dialect=Dialect.SIMPLE, verbose=None)
    assert merged.dialect == Dialect.SIMPLE
    assert merged.verbose is True
    assert base.dialect == Dialect.EXTENDED
    with pytest.raises(ConfigError):
        base.merged(colour=True)
