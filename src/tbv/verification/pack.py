"""Pack phase: reproduce the package archive digest from the checkout."""

import re
import shlex

from ..config import DEFAULT_INSTALL_COMMAND, DEFAULT_PACK_COMMAND
from ..engine import PipelineEngine
from ..exceptions import ParseError, ProcessError
from ..models import CheckoutResult, Continue, Halt, PackResult, StepStatus

SHASUM_PATTERN = re.compile(r"shasum:\s+([0-9a-f]{40})")


def extract_shasum(output: str) -> str:
    match = SHASUM_PATTERN.search(output)
    if match is None:
        raise ParseError("No shasum found in pack output")
    return match.group(1)


def run_pack_phase(
    engine: PipelineEngine,
    checkout: CheckoutResult,
    pack_command: str = DEFAULT_PACK_COMMAND,
    install_command: str = DEFAULT_INSTALL_COMMAND,
) -> Continue[PackResult] | Halt:
    engine.update_step("pack", StepStatus.WORKING)
    cwd = checkout.temp_dir
    pack_args = shlex.split(pack_command)

    try:
        output = engine.run_command(pack_args, cwd=cwd, merge_stderr=True)
    except ProcessError:
        output = None
    else:
        engine.update_step("install", StepStatus.SKIPPED)

    if output is None:
        # Packing usually fails here because prepack scripts need dependencies.
        engine.update_step("pack", StepStatus.PENDING, "Waiting for dependencies")
        engine.update_step("install", StepStatus.WORKING)
        try:
            engine.run_command(shlex.split(install_command), cwd=cwd)
        except ProcessError:
            engine.update_step("install", StepStatus.FAIL, "Error installing dependencies")
            return Halt("install", "Error installing dependencies")
        engine.update_step("install", StepStatus.PASS)

        engine.update_step("pack", StepStatus.WORKING)
        try:
            output = engine.run_command(pack_args, cwd=cwd, merge_stderr=True)
        except ProcessError as e:
            message = f"Error creating package from remote files: {e}"
            engine.update_step("pack", StepStatus.FAIL, message)
            return Halt("pack", message)

    try:
        remote_shasum = extract_shasum(output)
    except ParseError:
        message = "Error parsing shasum from pack output"
        engine.update_step("pack", StepStatus.FAIL, message)
        return Halt("pack", message)

    engine.update_step("pack", StepStatus.PASS)
    return Continue(PackResult(remote_shasum=remote_shasum))
