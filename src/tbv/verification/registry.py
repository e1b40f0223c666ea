"""Registry phase: resolve the published version and its source metadata."""

from pyvider.telemetry import logger

from ..config import DEFAULT_REGISTRY_URL
from ..engine import PipelineEngine
from ..exceptions import NetworkError, ResolutionError
from ..models import (
    Continue,
    Halt,
    RegistryDocument,
    ResolvedPackageInfo,
    StepStatus,
)

GIT_SCHEME_PREFIX = "git+"


def normalize_repo_url(url: str) -> str:
    """Strips a leading `git+` scheme prefix. Idempotent."""
    if url.startswith(GIT_SCHEME_PREFIX):
        return url[len(GIT_SCHEME_PREFIX) :]
    return url


def resolve_version(document: RegistryDocument, version_spec: str | None) -> str | None:
    """Maps a dist-tag to its version, falling back to the requested version."""
    tagged = document.dist_tags.get(version_spec or "latest")
    return tagged or version_spec or None


def _fail(engine: PipelineEngine, step_id: str, message: str) -> Halt:
    engine.update_step(step_id, StepStatus.FAIL, message)
    return Halt(step_id, message)


def run_registry_phase(
    engine: PipelineEngine,
    package_name: str,
    version_spec: str | None,
    registry_url: str = DEFAULT_REGISTRY_URL,
) -> Continue[ResolvedPackageInfo] | Halt:
    engine.update_step("registry", StepStatus.WORKING)

    url = f"{registry_url.rstrip('/')}/{package_name}"
    try:
        document = RegistryDocument.from_json(engine.http_get_json(url))
    except (NetworkError, ResolutionError) as e:
        logger.error("Registry request failed", url=url, error=str(e))
        return _fail(engine, "registry", "Error fetching package data from registry")

    resolved_version = resolve_version(document, version_spec)
    if not resolved_version:
        return _fail(engine, "registry", f"Cannot resolve version {version_spec}")

    try:
        version_info = document.version_info(resolved_version)
    except ResolutionError as e:
        return _fail(engine, "registry", f"Malformed info for version {resolved_version}: {e}")
    if version_info is None:
        return _fail(engine, "registry", f"Cannot find info for version {resolved_version}")

    engine.update_step("registry", StepStatus.PASS)
    engine.update_step("repo", StepStatus.WORKING)

    repository = version_info.repository
    if repository is None:
        return _fail(
            engine, "repo", f"Repository is not specified for version {resolved_version}"
        )
    if repository.type != "git":
        return _fail(
            engine,
            "repo",
            f"Non-git ({repository.type}) repository specified for version {resolved_version}",
        )
    if not repository.url:
        return _fail(
            engine, "repo", f"Repository URL is not specified for version {resolved_version}"
        )
    repo_url = normalize_repo_url(repository.url)

    engine.update_step("repo", StepStatus.PASS)
    engine.update_step("gitHead", StepStatus.WORKING)

    # A missing gitHead is reported but never blocks the run.
    if not version_info.git_head:
        engine.update_step(
            "gitHead",
            StepStatus.WARN,
            f"GitHead is not specified for version {resolved_version}",
        )
    engine.update_step("gitHead", StepStatus.PASS)

    return Continue(
        ResolvedPackageInfo(
            resolved_version=resolved_version,
            repo_url=repo_url,
            git_head=version_info.git_head,
            shasum=version_info.shasum,
        )
    )
