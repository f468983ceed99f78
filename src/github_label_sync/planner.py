"""Change-set planner.

Pure functions from (desired state, observed state) to a `Plan`. Observed
labels are passed in per repository; nothing here performs I/O.

Each repository is planned against a working copy of its observed labels and
every emitted record is applied to that copy, so requests later in the same
run see the effect of earlier ones (asking for the same label twice yields one
create; renaming a->b then b->c yields two updates that replay correctly).

Records come out repository-major, label-minor, in input order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence

from github_label_sync.models import (
    ChangeAction,
    ChangeRecord,
    Label,
    LabelRecolor,
    LabelRename,
    Plan,
    PlanSkip,
    SkipReason,
    label_key,
)

logger = logging.getLogger(__name__)


class _WorkingLabels:
    """Mutable per-repository view of labels used while planning."""

    def __init__(self, labels: Iterable[Label]) -> None:
        self._by_key: dict[str, Label] = {}
        for label in labels:
            self._by_key.setdefault(label.key, label)

    def find(self, name: str) -> Label | None:
        return self._by_key.get(label_key(name))

    def apply(self, change: ChangeRecord) -> None:
        if change.action is ChangeAction.CREATE:
            self._by_key[change.label.key] = change.label
        elif change.action is ChangeAction.DELETE:
            self._by_key.pop(change.label.key, None)
        else:
            self._by_key.pop(label_key(change.target_name), None)
            self._by_key[change.label.key] = change.label


class _PlanBuilder:
    def __init__(self, observed: Mapping[str, Sequence[Label]]) -> None:
        self._observed = observed
        self._changes: list[ChangeRecord] = []
        self._skipped: list[PlanSkip] = []

    def working_copy(self, repository: str) -> _WorkingLabels:
        try:
            labels = self._observed[repository]
        except KeyError:
            raise ValueError(f"No observed labels supplied for {repository!r}") from None
        return _WorkingLabels(labels)

    def emit(self, state: _WorkingLabels, change: ChangeRecord) -> None:
        state.apply(change)
        self._changes.append(change)

    def skip(self, repository: str, name: str, reason: SkipReason, detail: str = "") -> None:
        logger.debug(
            "Change skipped",
            extra={"repo": repository, "label": name, "reason": str(reason)},
        )
        self._skipped.append(
            PlanSkip(repository=repository, label_name=name, reason=reason, detail=detail)
        )

    def build(self) -> Plan:
        return Plan(changes=tuple(self._changes), skipped=tuple(self._skipped))


def _plan_missing(
    labels: Sequence[Label],
    repositories: Sequence[str],
    observed: Mapping[str, Sequence[Label]],
) -> Plan:
    builder = _PlanBuilder(observed)
    for repository in repositories:
        state = builder.working_copy(repository)
        for label in labels:
            existing = state.find(label.name)
            if existing is not None:
                detail = "" if existing == label else f"existing label is {existing}"
                builder.skip(repository, label.name, SkipReason.ALREADY_EXISTS, detail)
                continue
            builder.emit(
                state,
                ChangeRecord(repository=repository, action=ChangeAction.CREATE, label=label),
            )
    return builder.build()


def plan_duplicate(
    source_labels: Sequence[Label],
    destinations: Sequence[str],
    observed: Mapping[str, Sequence[Label]],
) -> Plan:
    """Create every source label missing from each destination.

    Labels that already exist in a destination are never touched, even when
    their color or description differ from the source.
    """

    return _plan_missing(source_labels, destinations, observed)


def plan_add(
    repositories: Sequence[str],
    labels: Sequence[Label],
    observed: Mapping[str, Sequence[Label]],
) -> Plan:
    return _plan_missing(labels, repositories, observed)


def plan_delete(
    repositories: Sequence[str],
    names: Sequence[str],
    observed: Mapping[str, Sequence[Label]],
) -> Plan:
    builder = _PlanBuilder(observed)
    for repository in repositories:
        state = builder.working_copy(repository)
        for name in names:
            existing = state.find(name)
            if existing is None:
                builder.skip(repository, name, SkipReason.NOT_FOUND)
                continue
            builder.emit(
                state,
                ChangeRecord(repository=repository, action=ChangeAction.DELETE, label=existing),
            )
    return builder.build()


def plan_rename(
    repositories: Sequence[str],
    renames: Sequence[LabelRename],
    observed: Mapping[str, Sequence[Label]],
) -> Plan:
    """Rename labels in place, keeping their color and description.

    A rename whose target name is already taken by a different label is
    reported as a `rename_conflict` skip rather than overwriting that label.
    """

    builder = _PlanBuilder(observed)
    for repository in repositories:
        state = builder.working_copy(repository)
        for rename in renames:
            existing = state.find(rename.name)
            if existing is None:
                builder.skip(repository, rename.name, SkipReason.NOT_FOUND)
                continue
            if existing.name == rename.new_name:
                builder.skip(repository, rename.name, SkipReason.UNCHANGED)
                continue

            occupant = state.find(rename.new_name)
            if occupant is not None and occupant.key != existing.key:
                builder.skip(
                    repository,
                    rename.name,
                    SkipReason.RENAME_CONFLICT,
                    f"label {occupant.name!r} already exists",
                )
                continue

            builder.emit(
                state,
                ChangeRecord(
                    repository=repository,
                    action=ChangeAction.UPDATE,
                    label=existing.model_copy(update={"name": rename.new_name}),
                    previous_name=existing.name,
                ),
            )
    return builder.build()


def plan_recolor(
    repositories: Sequence[str],
    recolors: Sequence[LabelRecolor],
    observed: Mapping[str, Sequence[Label]],
) -> Plan:
    builder = _PlanBuilder(observed)
    for repository in repositories:
        state = builder.working_copy(repository)
        for recolor in recolors:
            existing = state.find(recolor.name)
            if existing is None:
                builder.skip(repository, recolor.name, SkipReason.NOT_FOUND)
                continue
            if existing.color == recolor.color:
                builder.skip(repository, recolor.name, SkipReason.UNCHANGED)
                continue
            builder.emit(
                state,
                ChangeRecord(
                    repository=repository,
                    action=ChangeAction.UPDATE,
                    label=existing.model_copy(update={"color": recolor.color}),
                ),
            )
    return builder.build()
