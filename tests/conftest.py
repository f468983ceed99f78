"""Test configuration and fixtures."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

import pytest

from github_label_sync.errors import Conflict, LabelSyncError, NotFound
from github_label_sync.logging import JsonFormatter
from github_label_sync.models import Label, label_key


class FakeLabelClient:
    """In-memory `LabelClient` with scriptable failures.

    `failures` maps (operation, repository, label name) to the error raised on
    that call; use "*" as the label name to fail every call of that operation
    on the repository.
    """

    def __init__(self, repos: dict[str, Iterable[Label]] | None = None) -> None:
        self.repos: dict[str, list[Label]] = {
            repo: list(labels) for repo, labels in (repos or {}).items()
        }
        self.failures: dict[tuple[str, str, str], LabelSyncError] = {}
        self.calls: list[tuple[str, str, str]] = []
        self.closed = False

    def _maybe_fail(self, operation: str, repository: str, name: str) -> None:
        self.calls.append((operation, repository, name))
        for key in ((operation, repository, name), (operation, repository, "*")):
            if key in self.failures:
                raise self.failures[key]
        if repository not in self.repos:
            raise NotFound(f"repository {repository} not found")

    def _index(self, repository: str, name: str) -> int:
        for i, label in enumerate(self.repos[repository]):
            if label.key == label_key(name):
                return i
        raise NotFound(f"label {name!r} not found in {repository}")

    def list_labels(self, *, repository: str) -> list[Label]:
        self._maybe_fail("list", repository, "*")
        return list(self.repos[repository])

    def create_label(self, *, repository: str, label: Label) -> Label:
        self._maybe_fail("create", repository, label.name)
        if any(existing.key == label.key for existing in self.repos[repository]):
            raise Conflict(f"label {label.name!r} already exists")
        self.repos[repository].append(label)
        return label

    def update_label(self, *, repository: str, old_name: str, label: Label) -> Label:
        self._maybe_fail("update", repository, old_name)
        index = self._index(repository, old_name)
        self.repos[repository][index] = label
        return label

    def delete_label(self, *, repository: str, name: str) -> None:
        self._maybe_fail("delete", repository, name)
        del self.repos[repository][self._index(repository, name)]

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def bug() -> Label:
    return Label(name="bug", color="d73a4a", description="Something isn't working")


@pytest.fixture
def docs() -> Label:
    return Label(name="docs", color="00ff00")


@pytest.fixture
def fake_client(bug: Label) -> FakeLabelClient:
    """Two repositories: one with a `bug` label, one empty."""

    return FakeLabelClient(
        {
            "octo-org/app": [bug],
            "octo-org/web": [],
        }
    )


@pytest.fixture(autouse=True)
def _clean_settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "LABEL_SYNC_GITHUB_TOKEN",
        "GITHUB_BASE_URL",
        "LABEL_SYNC_VERBOSE",
        "LABEL_SYNC_EXECUTE",
        "LOG_LEVEL",
        "LABEL_SYNC_TIMEOUT",
        "LABEL_SYNC_MAX_WORKERS",
        "LABEL_SYNC_MAX_RETRIES",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_client() -> type[FakeLabelClient]:
    """Build a `FakeLabelClient` with custom repositories."""

    return FakeLabelClient


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    """Drop JSON handlers installed by `configure_logging` during a test."""

    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if isinstance(handler.formatter, JsonFormatter):
            root.removeHandler(handler)
    root.setLevel(level)
