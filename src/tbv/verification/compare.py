from ..engine import PipelineEngine
from ..models import Continue, Halt, StepStatus


def run_compare_phase(
    engine: PipelineEngine, registry_shasum: str | None, remote_shasum: str | None
) -> Continue[str] | Halt:
    engine.update_step("compare", StepStatus.WORKING)
    if registry_shasum is not None and registry_shasum == remote_shasum:
        engine.update_step("compare", StepStatus.PASS)
        return Continue(registry_shasum)
    engine.update_step("compare", StepStatus.FAIL, "Shasums do not match")
    return Halt("compare", "Shasums do not match")
