"""Checkout phase: materialise the claimed commit in a fresh directory."""

from pyvider.telemetry import logger

from ..engine import PipelineEngine
from ..exceptions import IoError, ProcessError
from ..models import CheckoutResult, Continue, Halt, ResolvedPackageInfo, StepStatus


def _fetch(engine: PipelineEngine, temp_dir: str, ref: str) -> None:
    engine.run_command(["git", "fetch", "--depth", "1", "origin", ref], cwd=temp_dir)


def candidate_tag_refs(resolved_version: str) -> list[str]:
    """Tag naming conventions tried in order when no commit is recorded."""
    return [f"tags/v{resolved_version}", f"tags/{resolved_version}"]


def _fetch_by_tag(
    engine: PipelineEngine, temp_dir: str, resolved_version: str
) -> str | None:
    for ref in candidate_tag_refs(resolved_version):
        try:
            _fetch(engine, temp_dir, ref)
        except ProcessError as e:
            logger.info(f"Tag {ref} could not be fetched", error=e.stderr.strip())
            continue
        return ref
    return None


def run_checkout_phase(
    engine: PipelineEngine, info: ResolvedPackageInfo
) -> Continue[CheckoutResult] | Halt:
    engine.update_step("checkout", StepStatus.WORKING)

    def fail(message: str) -> Halt:
        engine.update_step("checkout", StepStatus.FAIL, message)
        return Halt("checkout", message)

    try:
        temp_dir = engine.make_temp_dir()
    except IoError as e:
        logger.error("Temp directory allocation failed", error=str(e))
        return fail("Error creating temp directory")

    try:
        engine.run_command(["git", "init"], cwd=temp_dir)
        engine.run_command(["git", "remote", "add", "origin", info.repo_url], cwd=temp_dir)
    except ProcessError:
        return fail("Error initializing git repo in temp directory")

    if info.git_head:
        # The recorded commit is authoritative; tags are not consulted.
        try:
            _fetch(engine, temp_dir, info.git_head)
        except ProcessError:
            return fail(f"Unable to fetch commit from remote ({info.git_head[:7]})")
        refspec = info.git_head
    else:
        refspec = _fetch_by_tag(engine, temp_dir, info.resolved_version)
        if refspec is None:
            version = info.resolved_version
            return fail(
                f"Unable to fetch tag from remote (tags/{version} or tags/v{version})"
            )

    try:
        engine.run_command(["git", "checkout", "FETCH_HEAD"], cwd=temp_dir)
    except ProcessError:
        return fail("Unable to checkout FETCH_HEAD")

    engine.update_step("checkout", StepStatus.PASS)
    return Continue(CheckoutResult(temp_dir=temp_dir, refspec=refspec))
