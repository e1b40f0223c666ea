"""Terminal rendering of verification progress."""

import json

import click

from .models import ProgressState, Step, StepStatus

STATUS_SYMBOLS: dict[StepStatus, tuple[str, str | None]] = {
    StepStatus.PENDING: ("·", None),
    StepStatus.WORKING: ("…", "cyan"),
    StepStatus.PASS: ("✅", "green"),
    StepStatus.FAIL: ("❌", "red"),
    StepStatus.WARN: ("⚠️ ", "yellow"),
    StepStatus.SKIPPED: ("⏭️ ", "bright_black"),
}


def format_step(step: Step) -> str:
    symbol, _ = STATUS_SYMBOLS[step.status]
    line = f"{symbol} {step.title}"
    if step.message:
        line += f" ({step.message})"
    return line


class ProgressPrinter:
    """
    Render hook that prints a line whenever a step's status changes. Working
    lines are suppressed unless `verbose` is set.
    """

    def __init__(self, verbose: bool = False, err: bool = False) -> None:
        self.verbose = verbose
        self.err = err
        self._printed: dict[str, tuple[StepStatus, str | None]] = {}

    def reset(self) -> None:
        self._printed = {}

    def __call__(self, progress: ProgressState) -> None:
        for step_id, step in progress:
            last = self._printed.get(step_id)
            current = (step.status, step.message)
            if step.status is StepStatus.PENDING and step.message is None:
                continue
            if last == current:
                continue
            self._printed[step_id] = current
            if step.status is StepStatus.WORKING and not self.verbose:
                continue
            _, colour = STATUS_SYMBOLS[step.status]
            click.secho(format_step(step), fg=colour, err=self.err)


def format_summary(progress: ProgressState, verified: bool) -> str:
    lines = [format_step(step) for _, step in progress]
    lines.append("")
    lines.append("Package verified." if verified else "Package could NOT be verified.")
    return "\n".join(lines)


def progress_to_json(progress: ProgressState, verified: bool) -> str:
    return json.dumps(
        {"verified": verified, "steps": progress.to_dict()}, indent=2, ensure_ascii=False
    )
