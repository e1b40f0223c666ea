"""Pytest fixtures shared by the tbv test suite."""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from tbv.engine import PipelineEngine
from tbv.exceptions import ProcessError

SHASUM = "deadbeef" * 5
OTHER_SHASUM = "b" * 40
GIT_HEAD = "abc1234def5678abc1234def5678abc1234def56"


class ScriptedRunner:
    """
    Stands in for `run_command`. Commands whose joined text starts with a key
    of `failures` raise ProcessError; `outputs` supplies stdout by prefix.
    A list value is consumed one entry per call.
    """

    def __init__(
        self,
        outputs: dict[str, Any] | None = None,
        failures: dict[str, Any] | None = None,
    ) -> None:
        self.outputs = outputs or {}
        self.failures = failures or {}
        self.calls: list[tuple[list[str], str]] = []

    @staticmethod
    def _take(table: dict[str, Any], text: str) -> Any:
        for prefix, value in table.items():
            if text.startswith(prefix):
                if isinstance(value, list):
                    return value.pop(0) if value else None
                return value
        return None

    def __call__(
        self,
        command: list[str],
        cwd: Path | str | None = None,
        timeout: float | None = None,
        merge_stderr: bool = False,
    ) -> str:
        text = " ".join(command)
        self.calls.append((command, str(cwd)))
        if self._take(self.failures, text):
            raise ProcessError(
                f"Command failed: {text}", command=command, returncode=1, stderr="boom"
            )
        return self._take(self.outputs, text) or ""

    @property
    def commands(self) -> list[str]:
        return [" ".join(command) for command, _ in self.calls]


def make_document(
    version_info: dict[str, Any] | None = None,
    version: str = "1.2.3",
    dist_tags: dict[str, str] | None = None,
) -> dict[str, Any]:
    if version_info is None:
        version_info = {
            "repository": {"type": "git", "url": "git+https://github.com/o/r.git"},
            "gitHead": GIT_HEAD,
            "dist": {"shasum": SHASUM},
        }
    return {
        "dist-tags": {"latest": version} if dist_tags is None else dist_tags,
        "versions": {version: version_info},
    }


class FakeRegistry:
    """Stands in for `http_get_json`, recording the URLs requested."""

    def __init__(self, document: Any = None, error: Exception | None = None) -> None:
        self.document = make_document() if document is None else document
        self.error = error
        self.requested: list[str] = []

    def __call__(self, url: str) -> Any:
        self.requested.append(url)
        if self.error is not None:
            raise self.error
        return self.document


@pytest.fixture
def make_engine(tmp_path: Path) -> Callable[..., PipelineEngine]:
    """Factory for engines wired to in-memory collaborators."""
    counter = iter(range(1000))

    def fake_temp_dir() -> str:
        path = tmp_path / f"checkout-{next(counter)}"
        path.mkdir()
        return str(path)

    def _make(
        registry: FakeRegistry | None = None,
        runner: ScriptedRunner | None = None,
        render: Callable | None = None,
        make_temp_dir: Callable[[], str] | None = None,
    ) -> PipelineEngine:
        return PipelineEngine(
            http_get_json_fn=registry or FakeRegistry(),
            run_command_fn=runner or ScriptedRunner(),
            make_temp_dir_fn=make_temp_dir or fake_temp_dir,
            render=render,
        )

    return _make
