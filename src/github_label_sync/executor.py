"""Apply change records through a `LabelClient`.

Failures are isolated per record: a `LabelSyncError` marks that record as
failed and execution moves on. Nothing is rolled back. Results always match
the input in length and order.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

from github_label_sync.errors import LabelSyncError
from github_label_sync.github.client import LabelClient
from github_label_sync.models import (
    ChangeAction,
    ChangeOutcome,
    ChangeRecord,
    ChangeResult,
    ExecutionSummary,
)

logger = logging.getLogger(__name__)


def apply_change(client: LabelClient, change: ChangeRecord) -> ChangeResult:
    """Apply one record, converting client errors into a failed result."""

    try:
        if change.action is ChangeAction.CREATE:
            label = client.create_label(repository=change.repository, label=change.label)
        elif change.action is ChangeAction.UPDATE:
            label = client.update_label(
                repository=change.repository,
                old_name=change.target_name,
                label=change.label,
            )
        else:
            client.delete_label(repository=change.repository, name=change.label.name)
            label = None
    except LabelSyncError as e:
        logger.warning(
            "Change failed",
            extra={
                "repo": change.repository,
                "action": str(change.action),
                "label": change.label.name,
                "error_kind": str(e.kind),
                "error": e.message,
            },
        )
        return ChangeResult(
            change=change,
            outcome=ChangeOutcome.FAILED,
            error_kind=e.kind,
            message=e.message,
        )

    return ChangeResult(change=change, outcome=ChangeOutcome.SUCCEEDED, label=label)


def _run_sequentially(
    client: LabelClient, indexed: Sequence[tuple[int, ChangeRecord]]
) -> list[tuple[int, ChangeResult]]:
    return [(index, apply_change(client, change)) for index, change in indexed]


def execute(
    client: LabelClient,
    changes: Sequence[ChangeRecord],
    *,
    max_workers: int = 1,
) -> list[ChangeResult]:
    """Apply `changes` and return one result per record, in input order.

    With `max_workers > 1` different repositories run concurrently on a
    bounded pool. Records targeting the same repository (names compared
    case-insensitively) always run one at a time, in input order.
    """

    if max_workers < 1:
        raise ValueError("max_workers must be >= 1")
    if not changes:
        return []

    by_repository: dict[str, list[tuple[int, ChangeRecord]]] = {}
    for index, change in enumerate(changes):
        by_repository.setdefault(change.repository.lower(), []).append((index, change))

    logger.info(
        "Executing changes",
        extra={"change_count": len(changes), "repo_count": len(by_repository)},
    )

    results: list[ChangeResult | None] = [None] * len(changes)
    if max_workers == 1 or len(by_repository) == 1:
        for index, result in _run_sequentially(client, list(enumerate(changes))):
            results[index] = result
    else:
        workers = min(max_workers, len(by_repository))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="label-sync") as pool:
            futures = [
                pool.submit(_run_sequentially, client, indexed)
                for indexed in by_repository.values()
            ]
            for future in futures:
                for index, result in future.result():
                    results[index] = result

    return [r for r in results if r is not None]


def summarize(results: Sequence[ChangeResult]) -> ExecutionSummary:
    summary = ExecutionSummary()
    for result in results:
        if result.ok:
            summary.succeeded += 1
        else:
            summary.failed += 1
            summary.failures.append(result)
    return summary
