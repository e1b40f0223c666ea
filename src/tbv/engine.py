"""The generic step-reporting engine the verification phases run on."""

from collections.abc import Callable
from pathlib import Path
from typing import Any

from attrs import define, field

from pyvider.telemetry import logger

from . import capabilities
from .models import ProgressState, Step, StepStatus

RenderHook = Callable[[ProgressState], None]
HttpGetJson = Callable[[str], Any]
RunCommand = Callable[..., str]
MakeTempDir = Callable[[], str]
RemoveTempDir = Callable[[str], None]


@define(slots=True)
class PipelineEngine:
    """
    Holds the progress of one verification run together with the injected
    collaborators it may call. Phases receive the engine explicitly.
    """

    http_get_json_fn: HttpGetJson = field(default=capabilities.http_get_json)
    run_command_fn: RunCommand = field(default=capabilities.run_command)
    make_temp_dir_fn: MakeTempDir = field(default=capabilities.make_temp_dir)
    remove_temp_dir_fn: RemoveTempDir = field(default=capabilities.remove_temp_dir)
    render: RenderHook | None = None
    command_timeout: float | None = None
    progress: ProgressState = field(factory=ProgressState.create)
    temp_dirs: list[str] = field(factory=list)

    def reset(self) -> None:
        self.progress = ProgressState.create()
        self.temp_dirs = []
        reset_render = getattr(self.render, "reset", None)
        if callable(reset_render):
            reset_render()

    @property
    def failed(self) -> bool:
        return self.progress.failed

    def update_step(
        self, step_id: str, status: StepStatus, message: str | None = None
    ) -> Step:
        step = self.progress.transition(step_id, status, message)
        if status is StepStatus.FAIL:
            logger.error(f"Step '{step_id}' failed", detail=message)
        elif status is StepStatus.WARN:
            logger.warning(f"Step '{step_id}' warning", detail=message)
        else:
            logger.debug(f"Step '{step_id}' -> {status}", detail=message)
        if self.render is not None:
            self.render(self.progress)
        return step

    def open_step(self) -> str | None:
        """Returns the working step, or else the first step that never ran."""
        for step_id, step in self.progress:
            if step.status is StepStatus.WORKING:
                return step_id
        for step_id, step in self.progress:
            if step.status is StepStatus.PENDING:
                return step_id
        return None

    def http_get_json(self, url: str) -> Any:
        return self.http_get_json_fn(url)

    def run_command(
        self, command: list[str], cwd: Path | str, merge_stderr: bool = False
    ) -> str:
        return self.run_command_fn(
            command, cwd=cwd, timeout=self.command_timeout, merge_stderr=merge_stderr
        )

    def make_temp_dir(self) -> str:
        path = self.make_temp_dir_fn()
        self.temp_dirs.append(path)
        return path

    def cleanup(self) -> None:
        for path in self.temp_dirs:
            logger.debug("Removing temporary directory", path=path)
            self.remove_temp_dir_fn(path)
        self.temp_dirs = []
