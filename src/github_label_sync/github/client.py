"""Remote label client.

This wraps PyGithub to keep GitHub calls out of the planner/executor and make
tests easy: everything else depends only on the `LabelClient` protocol, and
every PyGithub/requests failure is translated into the typed error set in
`github_label_sync.errors`.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from typing import Any, Protocol, TypeVar

import requests
from github import (
    Auth,
    BadCredentialsException,
    Github,
    GithubException,
    RateLimitExceededException,
    UnknownObjectException,
)
from github.GithubObject import NotSet
from github.Repository import Repository

from github_label_sync.errors import (
    Conflict,
    InvalidInput,
    LabelSyncError,
    NotFound,
    RateLimited,
    TransportError,
    Unauthorized,
)
from github_label_sync.models import Label

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.github.com"

T = TypeVar("T")


class LabelClient(Protocol):
    """Label operations scoped to one repository per call."""

    def list_labels(self, *, repository: str) -> list[Label]: ...

    def create_label(self, *, repository: str, label: Label) -> Label: ...

    def update_label(self, *, repository: str, old_name: str, label: Label) -> Label: ...

    def delete_label(self, *, repository: str, name: str) -> None: ...


def _header(headers: Mapping[str, Any] | None, name: str) -> str | None:
    if not headers:
        return None
    lowered = name.lower()
    for key, value in headers.items():
        if str(key).lower() == lowered:
            return str(value)
    return None


def _retry_after_seconds(headers: Mapping[str, Any] | None) -> float | None:
    retry_after = _header(headers, "retry-after")
    if retry_after is not None:
        try:
            return max(float(retry_after), 0.0)
        except ValueError:
            return None

    reset = _header(headers, "x-ratelimit-reset")
    if reset is not None:
        try:
            return max(float(reset) - time.time(), 0.0)
        except ValueError:
            return None
    return None


def _error_message(e: GithubException) -> str:
    data = e.data
    if isinstance(data, dict):
        message = data.get("message")
        if isinstance(message, str) and message.strip():
            return message
    return str(e)


def _is_already_exists(e: GithubException) -> bool:
    data = e.data
    if not isinstance(data, dict):
        return False
    errors = data.get("errors")
    if not isinstance(errors, list):
        return False
    return any(isinstance(err, dict) and err.get("code") == "already_exists" for err in errors)


def translate_github_error(e: GithubException, *, context: str) -> LabelSyncError:
    """Map a PyGithub exception onto the typed error set."""

    status = e.status
    message = f"{context}: {_error_message(e)}"
    headers = e.headers

    is_rate_limited = (
        isinstance(e, RateLimitExceededException)
        or status == 429
        or (status == 403 and _header(headers, "x-ratelimit-remaining") == "0")
        or (status == 403 and _header(headers, "retry-after") is not None)
    )
    if is_rate_limited:
        return RateLimited(message, retry_after=_retry_after_seconds(headers))
    if isinstance(e, UnknownObjectException) or status == 404:
        return NotFound(message)
    if isinstance(e, BadCredentialsException) or status in (401, 403):
        return Unauthorized(message)
    if status == 422:
        if _is_already_exists(e):
            return Conflict(message)
        return InvalidInput(message)
    return TransportError(f"{message} (HTTP {status})")


def _to_label(raw: Any) -> Label:
    return Label(
        name=raw.name,
        color=raw.color,
        description=getattr(raw, "description", None),
    )


class GitHubLabelClient:
    """PyGithub-backed `LabelClient`.

    PyGithub's built-in retry is disabled so rate limiting is surfaced as
    `RateLimited` instead of being slept through; wrap this client in
    `RetryingLabelClient` to opt into retries.
    """

    def __init__(
        self,
        *,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        github_api: Github | None = None,
    ) -> None:
        if not token:
            raise ValueError("GitHub token is required")

        self._base_url = base_url.rstrip("/")
        if github_api is not None:
            self._github = github_api
            logger.debug("Using injected Github instance")
            return

        self._github = Github(
            auth=Auth.Token(token),
            base_url=self._base_url,
            timeout=max(int(timeout), 1),
            retry=None,
            per_page=100,
        )
        logger.debug("GitHub label client ready", extra={"base_url": self._base_url})

    def _repo(self, repository: str) -> Repository:
        # Lazy: no request is made until a label endpoint is called.
        return self._github.get_repo(repository, lazy=True)

    def _call(self, context: str, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except GithubException as e:
            raise translate_github_error(e, context=context) from e
        except requests.exceptions.Timeout as e:
            raise TransportError(f"{context}: request timed out") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"{context}: {e}") from e

    def list_labels(self, *, repository: str) -> list[Label]:
        def fetch() -> list[Label]:
            return [_to_label(raw) for raw in self._repo(repository).get_labels()]

        labels: list[Label] = self._call(f"list labels of {repository}", fetch)
        logger.debug(
            "Labels fetched", extra={"repo": repository, "label_count": len(labels)}
        )
        return labels

    def create_label(self, *, repository: str, label: Label) -> Label:
        def create() -> Label:
            created = self._repo(repository).create_label(
                name=label.name,
                color=label.color,
                description=label.description if label.description is not None else NotSet,
            )
            return _to_label(created)

        result: Label = self._call(f"create label {label.name!r} in {repository}", create)
        logger.info("Label created", extra={"repo": repository, "label": result.name})
        return result

    def update_label(self, *, repository: str, old_name: str, label: Label) -> Label:
        def update() -> Label:
            existing = self._repo(repository).get_label(old_name)
            existing.edit(
                name=label.name,
                color=label.color,
                description=label.description if label.description is not None else NotSet,
            )
            return _to_label(existing)

        result: Label = self._call(f"update label {old_name!r} in {repository}", update)
        logger.info(
            "Label updated",
            extra={"repo": repository, "previous_name": old_name, "label": result.name},
        )
        return result

    def delete_label(self, *, repository: str, name: str) -> None:
        def delete() -> None:
            self._repo(repository).get_label(name).delete()

        self._call(f"delete label {name!r} in {repository}", delete)
        logger.info("Label deleted", extra={"repo": repository, "label": name})

    def close(self) -> None:
        self._github.close()
