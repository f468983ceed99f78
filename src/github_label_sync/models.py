"""Label and change-set value types.

`Label` and `ChangeRecord` are the exchanged representations (written to and
read from JSON files), so they are frozen pydantic models. Results and plans
only flow back to the caller and are plain frozen dataclasses.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from github_label_sync.errors import ErrorKind, InvalidInput

_COLOR_RE = re.compile(r"^[0-9a-f]{6}$")

ModelT = TypeVar("ModelT", bound=BaseModel)


def normalize_color(value: str) -> str:
    color = value.strip().lstrip("#").lower()
    if not _COLOR_RE.match(color):
        raise ValueError(f"color must be 6 hex digits, got {value!r}")
    return color


def label_key(name: str) -> str:
    """Lookup key for a label name; GitHub compares names case-insensitively."""

    return name.strip().casefold()


def parse_model(model: type[ModelT], data: Any) -> ModelT:
    """Validate `data` into `model`, raising InvalidInput instead of ValidationError."""

    try:
        return model.model_validate(data)
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or model.__name__}: {err['msg']}"
            for err in e.errors()
        )
        raise InvalidInput(f"Invalid {model.__name__}: {errors}") from e


class Label(BaseModel):
    """A named, colored tag in one repository."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    color: str
    description: str | None = Field(default=None)

    @field_validator("name")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        name = value.strip()
        if not name:
            raise ValueError("name must be non-empty")
        return name

    @field_validator("color", mode="before")
    @classmethod
    def _validate_color(cls, value: object) -> str:
        if not isinstance(value, str):
            raise ValueError("color must be a string")
        return normalize_color(value)

    @field_validator("description", mode="before")
    @classmethod
    def _validate_description(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def key(self) -> str:
        return label_key(self.name)

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)

    def __str__(self) -> str:
        return f"{self.name}#{self.color}"


class LabelRef(BaseModel):
    """A label identified by name only, as written in hand-made delete records."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str

    @field_validator("name")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        name = value.strip()
        if not name:
            raise ValueError("name must be non-empty")
        return name

    def __str__(self) -> str:
        return self.name


class LabelRename(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    new_name: str

    @field_validator("name", "new_name")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("must be non-empty")
        return stripped


class LabelRecolor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    color: str

    @field_validator("name")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("must be non-empty")
        return stripped

    @field_validator("color", mode="before")
    @classmethod
    def _validate_color(cls, value: object) -> str:
        if not isinstance(value, str):
            raise ValueError("color must be a string")
        return normalize_color(value)


class ChangeAction(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class ChangeRecord(BaseModel):
    """A single, self-contained create/update/delete against one repository.

    For deletes the planner records the observed label being removed, which is
    enough to recreate it by hand if the deletion turns out to be a mistake.
    Delete records loaded from a file may carry just `{"name": ...}`.
    """

    model_config = ConfigDict(frozen=True)

    repository: str
    action: ChangeAction
    label: Label | LabelRef
    previous_name: str | None = Field(default=None)

    @model_validator(mode="after")
    def _check_action_fields(self) -> ChangeRecord:
        if self.previous_name is not None and self.action is not ChangeAction.UPDATE:
            raise ValueError("previous_name is only valid for update records")
        if self.action is not ChangeAction.DELETE and not isinstance(self.label, Label):
            raise ValueError(f"{self.action} records need a label color")
        return self

    @property
    def target_name(self) -> str:
        """Name of the label as it currently exists on the remote."""

        return self.previous_name if self.previous_name is not None else self.label.name

    @property
    def is_rename(self) -> bool:
        return self.previous_name is not None and self.previous_name != self.label.name

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)

    def describe(self) -> str:
        if self.action is ChangeAction.CREATE:
            return f"{self.repository}: create {self.label}"
        if self.action is ChangeAction.DELETE:
            return f"{self.repository}: delete {self.label.name!r}"
        if self.is_rename:
            return f"{self.repository}: rename {self.previous_name!r} -> {self.label.name!r}"
        return f"{self.repository}: update {self.label}"


class ChangeOutcome(StrEnum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ChangeResult:
    """Outcome of applying one ChangeRecord."""

    change: ChangeRecord
    outcome: ChangeOutcome
    label: Label | None = None
    error_kind: ErrorKind | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is ChangeOutcome.SUCCEEDED

    def to_json(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"change": self.change.to_json(), "outcome": str(self.outcome)}
        if self.label is not None:
            payload["label"] = self.label.to_json()
        if self.error_kind is not None:
            payload["error_kind"] = str(self.error_kind)
        if self.message is not None:
            payload["message"] = self.message
        return payload


class SkipReason(StrEnum):
    ALREADY_EXISTS = "already_exists"
    NOT_FOUND = "not_found"
    UNCHANGED = "unchanged"
    RENAME_CONFLICT = "rename_conflict"
    REPOSITORY_UNAVAILABLE = "repository_unavailable"


@dataclass(frozen=True, slots=True)
class PlanSkip:
    """A requested change that produced no record, and why."""

    repository: str
    label_name: str
    reason: SkipReason
    detail: str = ""


@dataclass(frozen=True, slots=True)
class Plan:
    changes: tuple[ChangeRecord, ...] = ()
    skipped: tuple[PlanSkip, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.changes

    @property
    def conflicts(self) -> tuple[PlanSkip, ...]:
        return tuple(s for s in self.skipped if s.reason is SkipReason.RENAME_CONFLICT)

    @property
    def repositories(self) -> tuple[str, ...]:
        seen: dict[str, None] = {}
        for change in self.changes:
            seen.setdefault(change.repository, None)
        return tuple(seen)

    def merge(self, other: Plan) -> Plan:
        return Plan(changes=self.changes + other.changes, skipped=self.skipped + other.skipped)


@dataclass(slots=True)
class ExecutionSummary:
    succeeded: int = 0
    failed: int = 0
    failures: list[ChangeResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.succeeded + self.failed
