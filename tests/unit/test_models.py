"""Unit tests for label and change record values."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from github_label_sync.errors import ErrorKind, InvalidInput
from github_label_sync.models import (
    ChangeAction,
    ChangeOutcome,
    ChangeRecord,
    ChangeResult,
    Label,
    LabelRef,
    Plan,
    PlanSkip,
    SkipReason,
    parse_model,
)


def test_label_color_is_normalized() -> None:
    label = Label(name=" bug ", color="#D73A4A", description="")

    assert label.name == "bug"
    assert label.color == "d73a4a"
    assert label.description is None
    assert str(label) == "bug#d73a4a"


@pytest.mark.parametrize(
    "data",
    [
        {"name": "", "color": "d73a4a"},
        {"name": "bug", "color": "red"},
        {"name": "bug", "color": "d73a4"},
        {"color": "d73a4a"},
    ],
)
def test_invalid_labels_raise_invalid_input(data: dict[str, str]) -> None:
    with pytest.raises(InvalidInput) as exc_info:
        parse_model(Label, data)

    assert exc_info.value.kind is ErrorKind.INVALID_INPUT


def test_labels_are_immutable() -> None:
    label = Label(name="bug", color="d73a4a")

    with pytest.raises(ValidationError):
        label.color = "000000"  # type: ignore[misc]


def test_label_ignores_extra_api_fields() -> None:
    label = parse_model(
        Label,
        {
            "id": 208045946,
            "url": "https://api.github.com/repos/octocat/Hello-World/labels/bug",
            "name": "bug",
            "color": "f29513",
            "default": True,
            "description": "Something isn't working",
        },
    )

    assert label.to_json() == {
        "name": "bug",
        "color": "f29513",
        "description": "Something isn't working",
    }


def test_change_record_json_shape() -> None:
    rename = ChangeRecord(
        repository="org/repo",
        action=ChangeAction.UPDATE,
        label=Label(name="design", color="c7def8"),
        previous_name="ui",
    )
    create = ChangeRecord(
        repository="org/repo", action=ChangeAction.CREATE, label=Label(name="bug", color="d73a4a")
    )

    assert rename.to_json() == {
        "repository": "org/repo",
        "action": "update",
        "label": {"name": "design", "color": "c7def8"},
        "previous_name": "ui",
    }
    assert "previous_name" not in create.to_json()
    assert parse_model(ChangeRecord, rename.to_json()) == rename
    assert rename.is_rename
    assert rename.target_name == "ui"
    assert create.target_name == "bug"


def test_previous_name_only_allowed_on_update() -> None:
    with pytest.raises(InvalidInput):
        parse_model(
            ChangeRecord,
            {
                "repository": "org/repo",
                "action": "delete",
                "label": {"name": "bug", "color": "d73a4a"},
                "previous_name": "old",
            },
        )


def test_delete_record_accepts_name_only_label() -> None:
    record = parse_model(
        ChangeRecord, {"repository": "org/repo", "action": "delete", "label": {"name": "bug"}}
    )

    assert record.label == LabelRef(name="bug")
    assert record.target_name == "bug"
    assert record.describe() == "org/repo: delete 'bug'"
    assert record.to_json() == {
        "repository": "org/repo",
        "action": "delete",
        "label": {"name": "bug"},
    }


def test_delete_record_keeps_full_label_when_given() -> None:
    record = parse_model(
        ChangeRecord,
        {
            "repository": "org/repo",
            "action": "delete",
            "label": {"name": "bug", "color": "D73A4A"},
        },
    )

    assert record.label == Label(name="bug", color="d73a4a")


@pytest.mark.parametrize("action", ["create", "update"])
def test_create_and_update_records_need_a_color(action: str) -> None:
    with pytest.raises(InvalidInput):
        parse_model(
            ChangeRecord, {"repository": "org/repo", "action": action, "label": {"name": "bug"}}
        )


def test_change_result_json() -> None:
    change = ChangeRecord(
        repository="org/repo", action=ChangeAction.CREATE, label=Label(name="bug", color="d73a4a")
    )
    failed = ChangeResult(
        change=change,
        outcome=ChangeOutcome.FAILED,
        error_kind=ErrorKind.CONFLICT,
        message="already exists",
    )

    assert not failed.ok
    assert failed.to_json() == {
        "change": change.to_json(),
        "outcome": "failed",
        "error_kind": "conflict",
        "message": "already exists",
    }


def test_plan_helpers() -> None:
    change = ChangeRecord(
        repository="org/b", action=ChangeAction.CREATE, label=Label(name="bug", color="d73a4a")
    )
    conflict = PlanSkip("org/a", "ui", SkipReason.RENAME_CONFLICT, "label 'design' already exists")
    missing = PlanSkip("org/a", "docs", SkipReason.NOT_FOUND)

    plan = Plan(skipped=(conflict,)).merge(Plan(changes=(change, change), skipped=(missing,)))

    assert not plan.is_empty
    assert plan.conflicts == (conflict,)
    assert plan.repositories == ("org/b",)
    assert Plan().is_empty
