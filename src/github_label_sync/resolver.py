"""Normalize loosely-shaped inputs into canonical tuples for the planner.

Inputs arrive either as a single literal or as a decoded JSON structure; the
CLI has already turned any file path into its decoded content. Nothing here
touches the filesystem or the network.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, TypeVar
from urllib.parse import urlparse

from github_label_sync.errors import InvalidInput
from github_label_sync.models import Label, LabelRecolor, LabelRename, parse_model

_REPO_PART_RE = re.compile(r"^[A-Za-z0-9_.-]+$")

T = TypeVar("T")


def normalize_repository(value: str) -> str:
    """Return `owner/name` for a repository string or GitHub URL."""

    raw = value.strip()
    if not raw:
        raise InvalidInput("Repository must be non-empty")

    if "://" in raw:
        path = urlparse(raw).path
    elif raw.startswith("git@") and ":" in raw:
        path = raw.split(":", 1)[1]
    else:
        path = raw

    parts = [p for p in path.strip("/").split("/") if p]
    if len(parts) != 2:
        raise InvalidInput(f"Repository must be in the form 'owner/name', got {value!r}")

    owner, name = parts
    if name.endswith(".git"):
        name = name[: -len(".git")]
    if not _REPO_PART_RE.match(owner) or not _REPO_PART_RE.match(name):
        raise InvalidInput(f"Repository must be in the form 'owner/name', got {value!r}")
    return f"{owner}/{name}"


def _as_items(value: Any) -> list[Any]:
    """A single literal becomes a one-item list; sequences pass through."""

    if value is None:
        return []
    if isinstance(value, (str, Mapping, Label, LabelRename, LabelRecolor)):
        return [value]
    if isinstance(value, Iterable):
        return list(value)
    raise InvalidInput(f"Unsupported input type: {type(value).__name__}")


def _dedupe(items: Iterable[T], key: Any) -> tuple[T, ...]:
    seen: set[Any] = set()
    out: list[T] = []
    for item in items:
        k = key(item)
        if k in seen:
            continue
        seen.add(k)
        out.append(item)
    return tuple(out)


def resolve_repositories(value: str | Sequence[str] | None) -> tuple[str, ...]:
    """Repositories in input order, without duplicates.

    A single string may hold several comma-separated repositories.
    """

    raw: list[str] = []
    for item in _as_items(value):
        if not isinstance(item, str):
            raise InvalidInput(f"Repository must be a string, got {type(item).__name__}")
        raw.extend(part for part in item.split(",") if part.strip())

    repositories = _dedupe((normalize_repository(r) for r in raw), key=lambda r: r.lower())
    if not repositories:
        raise InvalidInput("At least one repository is required")
    return repositories


def _split_name_color(literal: str) -> tuple[str, str]:
    name, sep, color = literal.rpartition("#")
    if not sep or not name.strip():
        raise InvalidInput(f"Expected 'name#color', got {literal!r}")
    return name, color


def _labels_from_mapping(item: Mapping[str, Any]) -> list[Label]:
    if "name" in item:
        return [parse_model(Label, dict(item))]

    # {"bug": "d73a4a"} or {"bug": {"color": "d73a4a", "description": "..."}}
    labels: list[Label] = []
    for name, definition in item.items():
        if isinstance(definition, str):
            labels.append(parse_model(Label, {"name": name, "color": definition}))
        elif isinstance(definition, Mapping):
            labels.append(parse_model(Label, {**definition, "name": name}))
        else:
            raise InvalidInput(f"Invalid label definition for {name!r}")
    return labels


def resolve_labels(value: Any) -> tuple[Label, ...]:
    labels: list[Label] = []
    for item in _as_items(value):
        if isinstance(item, Label):
            labels.append(item)
        elif isinstance(item, str):
            name, color = _split_name_color(item)
            labels.append(parse_model(Label, {"name": name, "color": color}))
        elif isinstance(item, Mapping):
            labels.extend(_labels_from_mapping(item))
        else:
            raise InvalidInput(f"Unsupported label definition: {item!r}")

    if not labels:
        raise InvalidInput("At least one label is required")
    return _dedupe(labels, key=lambda label: label.key)


def resolve_label_names(value: Any) -> tuple[str, ...]:
    """Label names in input order, without duplicates.

    Only a bare string is split on commas; strings inside a list are taken
    whole, so names containing a comma can be given as a JSON list.
    """

    if isinstance(value, str):
        value = value.split(",")

    names: list[str] = []
    for item in _as_items(value):
        if isinstance(item, Label):
            names.append(item.name)
        elif isinstance(item, str):
            names.append(item.strip())
        elif isinstance(item, Mapping) and isinstance(item.get("name"), str):
            names.append(item["name"].strip())
        else:
            raise InvalidInput(f"Unsupported label name: {item!r}")

    names = [n for n in names if n]
    if not names:
        raise InvalidInput("At least one label name is required")
    return _dedupe(names, key=lambda n: n.casefold())


def resolve_renames(value: Any) -> tuple[LabelRename, ...]:
    renames: list[LabelRename] = []
    for item in _as_items(value):
        if isinstance(item, LabelRename):
            renames.append(item)
        elif isinstance(item, str):
            old, sep, new = item.partition("=")
            if not sep:
                raise InvalidInput(f"Expected 'old=new', got {item!r}")
            renames.append(parse_model(LabelRename, {"name": old, "new_name": new}))
        elif isinstance(item, Mapping) and "name" in item:
            renames.append(parse_model(LabelRename, dict(item)))
        elif isinstance(item, Mapping):
            for old, new in item.items():
                renames.append(parse_model(LabelRename, {"name": old, "new_name": new}))
        else:
            raise InvalidInput(f"Unsupported rename: {item!r}")

    if not renames:
        raise InvalidInput("At least one rename is required")
    return tuple(renames)


def resolve_recolors(value: Any) -> tuple[LabelRecolor, ...]:
    recolors: list[LabelRecolor] = []
    for item in _as_items(value):
        if isinstance(item, LabelRecolor):
            recolors.append(item)
        elif isinstance(item, Label):
            recolors.append(LabelRecolor(name=item.name, color=item.color))
        elif isinstance(item, str):
            name, color = _split_name_color(item)
            recolors.append(parse_model(LabelRecolor, {"name": name, "color": color}))
        elif isinstance(item, Mapping) and "name" in item:
            recolors.append(
                parse_model(LabelRecolor, {"name": item["name"], "color": item.get("color")})
            )
        elif isinstance(item, Mapping):
            for name, color in item.items():
                recolors.append(parse_model(LabelRecolor, {"name": name, "color": color}))
        else:
            raise InvalidInput(f"Unsupported recolor: {item!r}")

    if not recolors:
        raise InvalidInput("At least one recolor is required")
    return tuple(recolors)
