"""Data types shared by the engine and the verification phases."""

from enum import StrEnum
from typing import Any, Generic, Self, TypeVar

from attrs import define, evolve, field

from .exceptions import ResolutionError

T = TypeVar("T")


class StepStatus(StrEnum):
    PENDING = "pending"
    WORKING = "working"
    PASS = "pass"
    FAIL = "fail"
    WARN = "warn"
    SKIPPED = "skipped"


FINAL_STATUSES = frozenset({StepStatus.PASS, StepStatus.FAIL, StepStatus.SKIPPED})

STEP_IDS: tuple[str, ...] = (
    "registry",
    "repo",
    "gitHead",
    "checkout",
    "install",
    "pack",
    "compare",
)

STEP_TITLES: dict[str, str] = {
    "registry": "Fetch package data from registry",
    "repo": "Version contains repository URL",
    "gitHead": "Version contains gitHead",
    "checkout": "Shallow checkout",
    "install": "Install npm packages",
    "pack": "Create package",
    "compare": "Compare shasums",
}


@define(frozen=True, slots=True)
class Step:
    title: str
    status: StepStatus = StepStatus.PENDING
    message: str | None = None
    warned: bool = False

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"status": str(self.status), "title": self.title}
        if self.message is not None:
            data["message"] = self.message
        if self.warned:
            data["warned"] = True
        return data


@define(slots=True)
class ProgressState:
    """Ordered mapping of step id to `Step`. Steps are replaced, never mutated."""

    steps: dict[str, Step] = field(factory=dict)

    @classmethod
    def create(cls) -> Self:
        return cls({step_id: Step(title=STEP_TITLES[step_id]) for step_id in STEP_IDS})

    def __getitem__(self, step_id: str) -> Step:
        return self.steps[step_id]

    def __iter__(self):
        return iter(self.steps.items())

    def transition(
        self, step_id: str, status: StepStatus, message: str | None = None
    ) -> Step:
        if step_id not in self.steps:
            raise KeyError(f"Unknown step '{step_id}'")
        current = self.steps[step_id]
        if current.status in FINAL_STATUSES:
            raise ValueError(
                f"Step '{step_id}' is already {current.status}; cannot move to {status}."
            )

        warned = current.warned or status is StepStatus.WARN
        if message is None and current.status is StepStatus.WARN:
            message = current.message
        updated = evolve(current, status=status, message=message, warned=warned)
        self.steps[step_id] = updated
        return updated

    @property
    def failed(self) -> bool:
        return any(step.status is StepStatus.FAIL for step in self.steps.values())

    def statuses(self) -> dict[str, StepStatus]:
        return {step_id: step.status for step_id, step in self.steps.items()}

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {step_id: step.to_dict() for step_id, step in self.steps.items()}


# Phase outcomes


@define(frozen=True, slots=True)
class Continue(Generic[T]):
    value: T


@define(frozen=True, slots=True)
class Halt:
    step_id: str
    message: str


@define(frozen=True, slots=True)
class ResolvedPackageInfo:
    resolved_version: str
    repo_url: str
    git_head: str | None = None
    shasum: str | None = None


@define(frozen=True, slots=True)
class CheckoutResult:
    temp_dir: str
    refspec: str | None = None


@define(frozen=True, slots=True)
class PackResult:
    remote_shasum: str | None = None


# Registry document schema


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ResolutionError(f"Field '{key}' must be a string, got {type(value).__name__}")
    return value


@define(frozen=True, slots=True)
class RepositoryInfo:
    type: str | None
    url: str | None

    @classmethod
    def from_json(cls, data: Any) -> Self | None:
        # Shorthand string form carries a URL but no type.
        if isinstance(data, str) and data:
            return cls(type=None, url=data)
        if not isinstance(data, dict):
            return None
        return cls(type=_optional_str(data, "type"), url=_optional_str(data, "url"))


@define(frozen=True, slots=True)
class VersionInfo:
    version: str
    repository: RepositoryInfo | None = None
    git_head: str | None = None
    legacy_shasum: str | None = None
    dist_shasum: str | None = None

    @property
    def shasum(self) -> str | None:
        return self.legacy_shasum or self.dist_shasum

    @classmethod
    def from_json(cls, version: str, data: dict[str, Any]) -> Self:
        dist = data.get("dist")
        return cls(
            version=version,
            repository=RepositoryInfo.from_json(data.get("repository")),
            git_head=_optional_str(data, "gitHead"),
            legacy_shasum=_optional_str(data, "_shasum"),
            dist_shasum=_optional_str(dist, "shasum") if isinstance(dist, dict) else None,
        )


@define(frozen=True, slots=True)
class RegistryDocument:
    dist_tags: dict[str, str] = field(factory=dict)
    versions: dict[str, dict[str, Any]] = field(factory=dict)

    @classmethod
    def from_json(cls, data: Any) -> Self:
        if not isinstance(data, dict):
            raise ResolutionError("Registry document is not a JSON object")
        dist_tags = data.get("dist-tags")
        versions = data.get("versions")
        return cls(
            dist_tags=dist_tags if isinstance(dist_tags, dict) else {},
            versions=versions if isinstance(versions, dict) else {},
        )

    def version_info(self, version: str) -> VersionInfo | None:
        data = self.versions.get(version)
        if not isinstance(data, dict):
            return None
        return VersionInfo.from_json(version, data)
