"""Tests for reading settings from pyproject.toml."""

from pathlib import Path

import pytest

from tbv.config import DEFAULT_REGISTRY_URL, Settings
from tbv.exceptions import ConfigError


def test_missing_manifest_yields_defaults(tmp_path: Path) -> None:
    settings = Settings.from_pyproject(tmp_path / "pyproject.toml")
    assert settings == Settings()
    assert settings.registry_url == DEFAULT_REGISTRY_URL
    assert settings.pack_command == "npm pack --dry-run"
    assert settings.install_command == "npm ci"


def test_reads_tool_tbv_table(tmp_path: Path) -> None:
    manifest = tmp_path / "pyproject.toml"
    manifest.write_text(
        """
[project]
name = "unrelated"

[tool.tbv]
registry_url = "https://npm.internal"
install-command = "npm install --ignore-scripts"
http_timeout = 5
command_timeout = 120.5
keep_temp = true
"""
    )
    settings = Settings.from_pyproject(manifest)

    assert settings.registry_url == "https://npm.internal"
    assert settings.install_command == "npm install --ignore-scripts"
    assert settings.pack_command == "npm pack --dry-run"
    assert settings.http_timeout == 5
    assert settings.command_timeout == 120.5
    assert settings.keep_temp is True


def test_manifest_without_table_yields_defaults(tmp_path: Path) -> None:
    manifest = tmp_path / "pyproject.toml"
    manifest.write_text('[project]\nname = "x"\n')
    assert Settings.from_pyproject(manifest) == Settings()


@pytest.mark.parametrize(
    "body, match",
    [
        ('[tool.tbv]\nregistry = "x"\n', "Unknown setting 'registry'"),
        ("[tool.tbv]\nhttp_timeout = \"soon\"\n", "invalid type str"),
        ("[tool.tbv]\ncommand_timeout = true\n", "invalid type bool"),
        ("[tool.tbv\n", "Could not parse"),
    ],
)
def test_invalid_manifest_raises_config_error(tmp_path: Path, body: str, match: str) -> None:
    manifest = tmp_path / "pyproject.toml"
    manifest.write_text(body)
    with pytest.raises(ConfigError, match=match):
        Settings.from_pyproject(manifest)


def test_overrides_ignore_none() -> None:
    settings = Settings(registry_url="https://a").with_overrides(
        registry_url=None, command_timeout=30.0
    )
    assert settings.registry_url == "https://a"
    assert settings.command_timeout == 30.0


def test_build_engine_applies_timeouts() -> None:
    engine = Settings(command_timeout=9.0).build_engine()
    assert engine.command_timeout == 9.0
    assert engine.http_get_json_fn.keywords == {"timeout": 30.0}


@pytest.mark.parametrize("key", ["pack-command", "install_command"])
@pytest.mark.parametrize("value", ['""', '"   "'])
def test_empty_command_is_rejected(tmp_path: Path, key: str, value: str) -> None:
    manifest = tmp_path / "pyproject.toml"
    manifest.write_text(f"[tool.tbv]\n{key} = {value}\n")
    with pytest.raises(ConfigError, match="must not be empty"):
        Settings.from_pyproject(manifest)


@pytest.mark.parametrize(
    "body, match",
    [
        ("tool = 1\n", r"\[tool\] must be a table"),
        ("[tool]\ntbv = \"yes\"\n", r"\[tool.tbv\] must be a table"),
    ],
)
def test_non_table_sections_raise_config_error(tmp_path: Path, body: str, match: str) -> None:
    manifest = tmp_path / "pyproject.toml"
    manifest.write_text(body)
    with pytest.raises(ConfigError, match=match):
        Settings.from_pyproject(manifest)
