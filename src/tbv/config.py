"""Settings for a verification run, read from `[tool.tbv]` in pyproject.toml."""

from functools import partial
from pathlib import Path
import tomllib
from typing import Any, Self

from attrs import asdict, define, evolve

from . import capabilities
from .engine import PipelineEngine
from .exceptions import ConfigError

DEFAULT_REGISTRY_URL = "https://registry.npmjs.com"
DEFAULT_PACK_COMMAND = "npm pack --dry-run"
DEFAULT_INSTALL_COMMAND = "npm ci"

_EXPECTED_TYPES: dict[str, tuple[type, ...]] = {
    "registry_url": (str,),
    "pack_command": (str,),
    "install_command": (str,),
    "http_timeout": (int, float),
    "command_timeout": (int, float),
    "keep_temp": (bool,),
}


@define(frozen=True)
class Settings:
    registry_url: str = DEFAULT_REGISTRY_URL
    pack_command: str = DEFAULT_PACK_COMMAND
    install_command: str = DEFAULT_INSTALL_COMMAND
    http_timeout: float = capabilities.DEFAULT_HTTP_TIMEOUT
    command_timeout: float | None = None
    keep_temp: bool = False

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> Self:
        values = {}
        for key, value in data.items():
            normalized = key.replace("-", "_")
            if normalized not in _EXPECTED_TYPES:
                raise ConfigError(f"Unknown setting '{key}' in [tool.tbv].")
            # bool is an int subclass; keep it out of the numeric settings.
            expected = _EXPECTED_TYPES[normalized]
            if not isinstance(value, expected) or (
                isinstance(value, bool) and bool not in expected
            ):
                raise ConfigError(
                    f"Setting '{key}' has invalid type {type(value).__name__}."
                )
            if normalized.endswith("_command") and not value.strip():
                raise ConfigError(f"Setting '{key}' must not be empty.")
            values[normalized] = value
        return cls(**values)

    @classmethod
    def from_pyproject(cls, path: Path) -> Self:
        """Loads settings from a pyproject.toml. A missing file yields defaults."""
        if not path.exists():
            return cls()
        try:
            with path.open("rb") as f:
                pyproject_data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Could not parse {path}: {e}") from e
        tool_conf = pyproject_data.get("tool", {})
        if not isinstance(tool_conf, dict):
            raise ConfigError("[tool] must be a table.")
        tbv_conf = tool_conf.get("tbv", {})
        if not isinstance(tbv_conf, dict):
            raise ConfigError("[tool.tbv] must be a table.")
        return cls.from_mapping(tbv_conf)

    def with_overrides(self, **overrides: Any) -> Self:
        return evolve(self, **{k: v for k, v in overrides.items() if v is not None})

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def build_engine(self, render=None) -> PipelineEngine:
        return PipelineEngine(
            http_get_json_fn=partial(capabilities.http_get_json, timeout=self.http_timeout),
            render=render,
            command_timeout=self.command_timeout,
        )
