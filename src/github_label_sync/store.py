"""JSON-file stores for exported label sets and saved plans."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from github_label_sync.errors import InvalidInput
from github_label_sync.models import ChangeRecord, Label, parse_model

logger = logging.getLogger(__name__)


def _read_json_list(path: Path) -> list[Any]:
    if not path.exists():
        raise InvalidInput(f"File not found: {path}")
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise InvalidInput(f"{path} is not valid JSON: {e}") from e
    if not isinstance(raw, list):
        raise InvalidInput(f"{path} must contain a JSON list")
    return raw


def _write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


class LabelSetStore:
    """A JSON list of `{"name", "color", "description"?}` objects."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[Label]:
        return [parse_model(Label, item) for item in _read_json_list(self._path)]

    def save(self, labels: Sequence[Label]) -> None:
        _write_json(self._path, [label.to_json() for label in labels])
        logger.info("Labels written", extra={"path": str(self._path), "label_count": len(labels)})


class PlanStore:
    """A JSON list of change records, so a plan can be reviewed and applied later."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[ChangeRecord]:
        return [parse_model(ChangeRecord, item) for item in _read_json_list(self._path)]

    def save(self, changes: Sequence[ChangeRecord]) -> None:
        _write_json(self._path, [change.to_json() for change in changes])
        logger.info("Plan written", extra={"path": str(self._path), "change_count": len(changes)})
