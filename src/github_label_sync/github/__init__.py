"""GitHub-facing label client and its retry wrapper."""

from github_label_sync.github.client import GitHubLabelClient, LabelClient
from github_label_sync.github.retry import RetryingLabelClient

__all__ = [
    "GitHubLabelClient",
    "LabelClient",
    "RetryingLabelClient",
]
