import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from calc.calc_config import CONFIG_ENV_VAR


@pytest.fixture(autouse=True)  # type: ignore[misc]
def no_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # a developer's own settings must not leak into the tests
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


@pytest.fixture  # type: ignore[misc]
def write_config(tmp_path: Path) -> Callable[[Any], Path]:
    def write(raw: Any, name: str = "calc.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(raw), encoding="utf-8")
        return path

    return write
