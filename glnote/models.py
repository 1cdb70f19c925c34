"""Shared pydantic models: the contract between the GitLab provider, picker and orchestrator."""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr, ValidationError, field_validator


class Project(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: StrictInt  # GitLab numeric project ID
    name: StrictStr
    path_with_namespace: StrictStr  # group/subgroup/project
    description: str | None = None
    web_url: StrictStr

    @field_validator("description", mode="before")
    @classmethod
    def _blank_description_is_none(cls, value: Any) -> Any:
        return value or None

    @property
    def search_text(self) -> str:
        return f"{self.name} {self.path_with_namespace}"


class ConnectionResult(BaseModel):
    """Outcome of a "who am I" probe. Never an exception."""

    model_config = ConfigDict(frozen=True)

    success: bool
    message: str
    username: str | None = None


@dataclass(frozen=True)
class Valid:
    project: Project


@dataclass(frozen=True)
class Invalid:
    reason: str
    raw: Any


def check_project(raw: Any) -> Valid | Invalid:
    """Validate one item of a project listing."""
    if not isinstance(raw, dict):
        return Invalid(reason=f"expected an object, got {type(raw).__name__}", raw=raw)
    try:
        return Valid(Project.model_validate(raw))
    except ValidationError as exc:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
        return Invalid(reason=f"invalid or missing field(s): {fields}", raw=raw)


def partition_projects(items: list[Any]) -> tuple[list[Project], list[Invalid]]:
    """Split raw listing items into valid projects and rejected items, preserving order."""
    valid: list[Project] = []
    invalid: list[Invalid] = []
    for item in items:
        match check_project(item):
            case Valid(project=project):
                valid.append(project)
            case Invalid() as rejected:
                invalid.append(rejected)
    return valid, invalid
