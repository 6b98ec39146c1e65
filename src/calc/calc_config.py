"""
Configuration for the calc command-line tools.

Settings come from three places, highest priority first:

    1. command-line flags (applied with ``CalcConfig.merged``),
    2. a JSON file named by ``--config`` or the ``CALC_CONFIG`` environment variable,
    3. the defaults below.

Example JSON structure:
    {
        "dialect": "simple",
        "ascii_only": true,
        "verbose": false,
        "prompt": "calc> "
    }

Classes:
    CalcConfig: Bundle of settings, with JSON and environment loaders.
"""

import json
import os
from collections.abc import Mapping
from typing import Any

from calc.calc_constants import Dialect
from calc.calc_errors import ConfigError

CONFIG_ENV_VAR = "CALC_CONFIG"
DEFAULT_PROMPT = "> "


class CalcConfig:
    """Calculator settings.

    Attributes:
        dialect (Dialect): Grammar to accept.
        ascii_only (bool): Restrict digits and blanks to ASCII.
        verbose (bool): Echo each parsed tree before its value.
        prompt (str): Prompt shown by the interactive REPL.
    """

    KEYS = ("dialect", "ascii_only", "verbose", "prompt")

    def __init__(
        self,
        dialect: Dialect = Dialect.EXTENDED,
        ascii_only: bool = False,
        verbose: bool = False,
        prompt: str = DEFAULT_PROMPT,
    ) -> None:
        self.dialect = dialect
        self.ascii_only = ascii_only
        self.verbose = verbose
        self.prompt = prompt

    def __repr__(self) -> str:
        return (
            f"CalcConfig(dialect={self.dialect.value}, ascii_only={self.ascii_only}, "
            f"verbose={self.verbose}, prompt={self.prompt!r})"
        )

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, CalcConfig) and all(
            getattr(self, key) == getattr(other, key) for key in self.KEYS
        )

    def merged(self, **overrides: Any) -> "CalcConfig":
        """Returns a copy with every non-None override applied."""
        values = {key: getattr(self, key) for key in self.KEYS}
        for key, value in overrides.items():
            if key not in values:
                raise ConfigError(f"Unknown setting: {key}")
            if value is not None:
                values[key] = value
        return CalcConfig(**values)

    @classmethod
    def from_mapping(cls, raw: Any) -> "CalcConfig":
        """Validates a decoded JSON object and builds a config from it.

        Raises:
            ConfigError: Listing every problem found.
        """
        if not isinstance(raw, dict):
            raise ConfigError("Configuration must be a JSON object")

        problems: list[str] = []
        values: dict[str, Any] = {}
        for key, value in raw.items():
            if key not in cls.KEYS:
                problems.append(f"unknown key '{key}'")
            elif key == "dialect":
                try:
                    values[key] = Dialect(value)
                except ValueError:
                    problems.append(
                        f"dialect must be one of {[d.value for d in Dialect]}, got {value!r}"
                    )
            elif key == "prompt":
                if isinstance(value, str):
                    values[key] = value
                else:
                    problems.append(f"prompt must be a string, got {value!r}")
            elif isinstance(value, bool):
                values[key] = value
            else:
                problems.append(f"{key} must be true or false, got {value!r}")

        if problems:
            raise ConfigError("Invalid configuration", problems)
        return cls(**values)

    @classmethod
    def load_from_json(cls, path: str) -> "CalcConfig":
        """
        Loads settings from a JSON file.

        Args:
            path: Path to the JSON configuration file.

        Raises:
            ConfigError: If the file cannot be read or decoded, or holds invalid settings.
        """
        try:
            with open(path, encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigError(f"Failed to load config file {path}: {e}") from e
        return cls.from_mapping(raw)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "CalcConfig":
        """Loads the file named by ``CALC_CONFIG``, or returns the defaults."""
        env = os.environ if environ is None else environ
        path = env.get(CONFIG_ENV_VAR)
        if not path:
            return cls()
        return cls.load_from_json(path)
