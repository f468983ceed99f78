"""Plan/execute facade over a `LabelClient`.

The service fetches observed labels, hands them to the pure planner, and
applies approved plans through the executor. `plan_*` and `execute` are
separate calls so callers can put a review step in between.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from github_label_sync import executor, planner
from github_label_sync.errors import LabelSyncError
from github_label_sync.github.client import LabelClient
from github_label_sync.models import (
    ChangeRecord,
    ChangeResult,
    Label,
    LabelRecolor,
    LabelRename,
    Plan,
    PlanSkip,
    SkipReason,
)

logger = logging.getLogger(__name__)


def _repository_key(repository: str) -> str:
    # GitHub owner and repository names are case-insensitive.
    return repository.lower()


class LabelSyncService:
    def __init__(self, client: LabelClient) -> None:
        self._client = client

    def _observe(self, repositories: Sequence[str]) -> tuple[list[str], dict[str, list[Label]], Plan]:
        """Fetch labels for each repository.

        Returns the reachable repositories (input order), their labels, and a
        plan holding one `repository_unavailable` skip per unreachable one.
        """

        reachable: list[str] = []
        observed: dict[str, list[Label]] = {}
        skipped: list[PlanSkip] = []
        seen: set[str] = set()
        for repository in repositories:
            if _repository_key(repository) in seen:
                continue
            seen.add(_repository_key(repository))
            try:
                observed[repository] = self._client.list_labels(repository=repository)
            except LabelSyncError as e:
                logger.warning(
                    "Could not fetch labels; skipping repository",
                    extra={"repo": repository, "error_kind": str(e.kind), "error": e.message},
                )
                skipped.append(
                    PlanSkip(
                        repository=repository,
                        label_name="",
                        reason=SkipReason.REPOSITORY_UNAVAILABLE,
                        detail=f"{e.kind}: {e.message}",
                    )
                )
                continue
            reachable.append(repository)
        return reachable, observed, Plan(skipped=tuple(skipped))

    def _log_plan(self, operation: str, plan: Plan) -> Plan:
        logger.info(
            "Plan computed",
            extra={
                "operation": operation,
                "change_count": len(plan.changes),
                "skip_count": len(plan.skipped),
                "conflict_count": len(plan.conflicts),
            },
        )
        return plan

    def export(self, repository: str) -> list[Label]:
        """Return the repository's current labels; client errors propagate."""

        return self._client.list_labels(repository=repository)

    def plan_duplicate(self, source_labels: Sequence[Label], destinations: Sequence[str]) -> Plan:
        reachable, observed, unavailable = self._observe(destinations)
        plan = planner.plan_duplicate(source_labels, reachable, observed)
        return self._log_plan("duplicate", unavailable.merge(plan))

    def plan_duplicate_from(self, source_repository: str, destinations: Sequence[str]) -> Plan:
        """Duplicate the labels of `source_repository` onto `destinations`.

        The source itself is skipped if it also appears among the destinations.
        """

        source_labels = self.export(source_repository)
        source_key = _repository_key(source_repository)
        targets = [d for d in destinations if _repository_key(d) != source_key]
        return self.plan_duplicate(source_labels, targets)

    def plan_add(self, repositories: Sequence[str], labels: Sequence[Label]) -> Plan:
        reachable, observed, unavailable = self._observe(repositories)
        plan = planner.plan_add(reachable, labels, observed)
        return self._log_plan("add", unavailable.merge(plan))

    def plan_delete(self, repositories: Sequence[str], names: Sequence[str]) -> Plan:
        reachable, observed, unavailable = self._observe(repositories)
        plan = planner.plan_delete(reachable, names, observed)
        return self._log_plan("delete", unavailable.merge(plan))

    def plan_rename(self, repositories: Sequence[str], renames: Sequence[LabelRename]) -> Plan:
        reachable, observed, unavailable = self._observe(repositories)
        plan = planner.plan_rename(reachable, renames, observed)
        return self._log_plan("rename", unavailable.merge(plan))

    def plan_recolor(self, repositories: Sequence[str], recolors: Sequence[LabelRecolor]) -> Plan:
        reachable, observed, unavailable = self._observe(repositories)
        plan = planner.plan_recolor(reachable, recolors, observed)
        return self._log_plan("recolor", unavailable.merge(plan))

    def execute(self, changes: Sequence[ChangeRecord], *, max_workers: int = 1) -> list[ChangeResult]:
        return executor.execute(self._client, changes, max_workers=max_workers)
