"""GitHub label sync.

Plan-then-apply synchronization of issue labels across repositories:
- a pure planner that diffs desired labels against observed labels
- an executor that applies change records with per-record fault isolation
- a PyGithub-backed client with a small typed error set
"""

__version__ = "0.1.0"

from github_label_sync.models import (
    ChangeAction,
    ChangeOutcome,
    ChangeRecord,
    ChangeResult,
    Label,
    LabelRef,
    LabelRecolor,
    LabelRename,
    Plan,
)
from github_label_sync.service import LabelSyncService

__all__ = [
    "__version__",
    "ChangeAction",
    "ChangeOutcome",
    "ChangeRecord",
    "ChangeResult",
    "Label",
    "LabelRef",
    "LabelRecolor",
    "LabelRename",
    "LabelSyncService",
    "Plan",
]
