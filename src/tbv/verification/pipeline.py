"""Chains the verification phases and converts every fault into a failed step."""

from attrs import define, field

from pyvider.telemetry import logger

from ..config import Settings
from ..engine import PipelineEngine
from ..models import Halt, ProgressState, StepStatus
from .checkout import run_checkout_phase
from .compare import run_compare_phase
from .pack import run_pack_phase
from .registry import run_registry_phase


def _run_phases(
    engine: PipelineEngine,
    package_name: str,
    version_spec: str | None,
    settings: Settings,
) -> bool:
    resolved = run_registry_phase(engine, package_name, version_spec, settings.registry_url)
    if isinstance(resolved, Halt):
        return False
    info = resolved.value

    checked_out = run_checkout_phase(engine, info)
    if isinstance(checked_out, Halt):
        return False
    logger.info(f"Checked out {checked_out.value.refspec}", path=checked_out.value.temp_dir)

    packed = run_pack_phase(
        engine,
        checked_out.value,
        pack_command=settings.pack_command,
        install_command=settings.install_command,
    )
    if isinstance(packed, Halt):
        return False

    compared = run_compare_phase(engine, info.shasum, packed.value.remote_shasum)
    return not isinstance(compared, Halt)


def _record_unexpected_error(engine: PipelineEngine, error: Exception) -> None:
    if engine.failed:
        return
    step_id = engine.open_step()
    if step_id is None:
        return
    try:
        engine.update_step(step_id, StepStatus.FAIL, f"Unexpected error: {error}")
    except Exception:
        # The transition is recorded before the render hook runs.
        logger.exception("Render hook failed while reporting an error")


def verify(
    engine: PipelineEngine,
    package_name: str,
    version_spec: str | None = None,
    settings: Settings | None = None,
) -> bool:
    """
    Verifies that `package_name` at `version_spec` was packed from the source
    it claims. Never raises; the outcome is the return value plus
    `engine.progress`.
    """
    settings = settings or Settings()
    engine.reset()
    logger.info(f"Verifying {package_name}@{version_spec or 'latest'}")
    try:
        verified = _run_phases(engine, package_name, version_spec, settings)
    except Exception as e:
        logger.exception("Unexpected error during verification")
        _record_unexpected_error(engine, e)
        verified = False
    finally:
        if not settings.keep_temp:
            engine.cleanup()

    verified = verified and not engine.failed
    logger.info(f"Verification {'succeeded' if verified else 'failed'}", package=package_name)
    return verified


@define
class Verifier:
    """Convenience wrapper binding an engine to a set of settings."""

    settings: Settings = field(factory=Settings)
    engine: PipelineEngine = field(factory=PipelineEngine)

    @classmethod
    def from_settings(cls, settings: Settings, render=None) -> "Verifier":
        return cls(settings=settings, engine=settings.build_engine(render=render))

    def verify(self, package_name: str, version_spec: str | None = None) -> bool:
        return verify(self.engine, package_name, version_spec, self.settings)

    @property
    def progress(self) -> ProgressState:
        return self.engine.progress
