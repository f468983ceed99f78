"""Opt-in rate-limit retries around a `LabelClient`."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TypeVar

from github_label_sync.errors import RateLimited
from github_label_sync.github.client import LabelClient
from github_label_sync.models import Label

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryingLabelClient:
    """Retry calls rejected with `RateLimited`, honouring the retry-after hint.

    Only rate-limit rejections are retried: GitHub refused those requests
    outright, so repeating them cannot create a label twice. Every other
    error is raised unchanged.
    """

    def __init__(
        self,
        inner: LabelClient,
        *,
        max_retries: int = 3,
        max_wait_seconds: float = 60.0,
        default_wait_seconds: float = 5.0,
    ) -> None:
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self._inner = inner
        self._max_retries = max_retries
        self._max_wait_seconds = max_wait_seconds
        self._default_wait_seconds = default_wait_seconds

    def _with_retries(self, operation: str, repository: str, fn: Callable[[], T]) -> T:
        attempt = 0
        while True:
            try:
                return fn()
            except RateLimited as e:
                if attempt >= self._max_retries:
                    raise
                attempt += 1
                wait = e.retry_after if e.retry_after is not None else self._default_wait_seconds
                wait = min(wait, self._max_wait_seconds)
                logger.warning(
                    "Rate limited; retrying",
                    extra={
                        "operation": operation,
                        "repo": repository,
                        "attempt": attempt,
                        "wait_seconds": wait,
                    },
                )
                time.sleep(wait)

    def list_labels(self, *, repository: str) -> list[Label]:
        return self._with_retries(
            "list", repository, lambda: self._inner.list_labels(repository=repository)
        )

    def create_label(self, *, repository: str, label: Label) -> Label:
        return self._with_retries(
            "create",
            repository,
            lambda: self._inner.create_label(repository=repository, label=label),
        )

    def update_label(self, *, repository: str, old_name: str, label: Label) -> Label:
        return self._with_retries(
            "update",
            repository,
            lambda: self._inner.update_label(
                repository=repository, old_name=old_name, label=label
            ),
        )

    def delete_label(self, *, repository: str, name: str) -> None:
        self._with_retries(
            "delete", repository, lambda: self._inner.delete_label(repository=repository, name=name)
        )
