"""CLI entrypoint for github-label-sync.

This is the boundary layer: it decodes arguments (literal, inline JSON, or a
path to a JSON file), resolves them, shows the computed plan, asks for
confirmation, and only then executes.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from github_label_sync import __version__
from github_label_sync.config import LabelSyncSettings
from github_label_sync.errors import InvalidInput, LabelSyncError
from github_label_sync.executor import summarize
from github_label_sync.github.client import GitHubLabelClient, LabelClient
from github_label_sync.github.retry import RetryingLabelClient
from github_label_sync.logging import configure_logging
from github_label_sync.models import ChangeAction, ChangeResult, Label, Plan, SkipReason
from github_label_sync.resolver import (
    normalize_repository,
    resolve_label_names,
    resolve_labels,
    resolve_recolors,
    resolve_renames,
    resolve_repositories,
)
from github_label_sync.service import LabelSyncService
from github_label_sync.store import LabelSetStore, PlanStore

logger = logging.getLogger(__name__)

Confirm = Callable[[Plan], bool]

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2
EXIT_ABORTED = 3

_ACTION_MARKERS = {
    ChangeAction.CREATE: "+",
    ChangeAction.UPDATE: "~",
    ChangeAction.DELETE: "-",
}


def load_argument(value: str) -> Any:
    """Decode a CLI value: inline JSON, a path to a JSON file, or the literal itself."""

    stripped = value.strip()
    if stripped.startswith(("[", "{")):
        try:
            return json.loads(stripped)
        except json.JSONDecodeError as e:
            raise InvalidInput(f"Invalid inline JSON: {e}") from e

    path = Path(stripped)
    if path.suffix.lower() == ".json" or path.is_file():
        if not path.is_file():
            raise InvalidInput(f"File not found: {path}")
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise InvalidInput(f"{path} is not valid JSON: {e}") from e
    return value


def _load_all(values: Sequence[str] | None) -> list[Any]:
    items: list[Any] = []
    for value in values or []:
        decoded = load_argument(value)
        if isinstance(decoded, list):
            items.extend(decoded)
        else:
            items.append(decoded)
    return items


def prompt_confirmation(plan: Plan) -> bool:
    question = (
        f"Apply {len(plan.changes)} change(s) to {len(plan.repositories)} repository(ies)? [y/N] "
    )
    try:
        answer = input(question)
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--token", default=None, help="GitHub token (overrides LABEL_SYNC_GITHUB_TOKEN)")
    common.add_argument("--base-url", default=None, help="GitHub API base URL")
    common.add_argument(
        "-v", "--verbose", action="store_true", default=None, help="Verbose logging and output"
    )
    common.add_argument(
        "--timeout", type=float, default=None, help="Timeout in seconds for each API call"
    )
    common.add_argument(
        "--max-retries",
        type=int,
        default=None,
        help="Retry rate-limited calls this many times (default 0: report as failures)",
    )

    changes = argparse.ArgumentParser(add_help=False)
    changes.add_argument(
        "-y", "--yes", action="store_true", default=None, help="Apply without asking for confirmation"
    )
    changes.add_argument(
        "--dry-run", action="store_true", help="Only print the plan; never apply it"
    )
    changes.add_argument(
        "--plan-out", default=None, help="Write the computed plan to this JSON file"
    )
    changes.add_argument(
        "--max-workers",
        type=int,
        default=None,
        help="Repositories to update concurrently",
    )

    repo_help = (
        "Target repository 'owner/name' (repeatable, comma-separated, "
        "inline JSON list, or a JSON file)"
    )

    parser = argparse.ArgumentParser(
        prog="github-label-sync",
        description="Synchronize GitHub issue labels across repositories",
    )
    parser.add_argument("--version", action="version", version=f"github-label-sync {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    duplicate = subparsers.add_parser(
        "duplicate",
        parents=[common, changes],
        help="Create every label of a source that is missing from the destinations",
    )
    duplicate.add_argument(
        "--source",
        required=True,
        help="Source repository 'owner/name', or a JSON file written by 'export'",
    )
    duplicate.add_argument("--repo", action="append", required=True, help=repo_help)

    export = subparsers.add_parser(
        "export", parents=[common], help="Write a repository's labels as JSON"
    )
    export.add_argument("--repo", required=True, help="Repository 'owner/name'")
    export.add_argument("--output", default=None, help="Output file (default: stdout)")

    add = subparsers.add_parser("add", parents=[common, changes], help="Add missing labels")
    add.add_argument("--repo", action="append", required=True, help=repo_help)
    add.add_argument(
        "--labels",
        action="append",
        required=True,
        help="'name#color', inline JSON, or a JSON file of labels",
    )

    delete = subparsers.add_parser("delete", parents=[common, changes], help="Delete labels")
    delete.add_argument("--repo", action="append", required=True, help=repo_help)
    delete.add_argument(
        "--labels",
        action="append",
        required=True,
        help="Label names (comma-separated), inline JSON, or a JSON file",
    )

    rename = subparsers.add_parser(
        "rename", parents=[common, changes], help="Rename labels, keeping their colors"
    )
    rename.add_argument("--repo", action="append", required=True, help=repo_help)
    rename.add_argument(
        "--labels",
        action="append",
        required=True,
        help="'old=new', inline JSON, or a JSON file of {name, new_name} objects",
    )

    recolor = subparsers.add_parser("recolor", parents=[common, changes], help="Recolor labels")
    recolor.add_argument("--repo", action="append", required=True, help=repo_help)
    recolor.add_argument(
        "--labels",
        action="append",
        required=True,
        help="'name#color', inline JSON, or a JSON file of {name, color} objects",
    )

    apply = subparsers.add_parser(
        "apply", parents=[common, changes], help="Apply a plan saved with --plan-out"
    )
    apply.add_argument("--plan", required=True, help="Plan JSON file")

    return parser


def _settings_overrides(args: argparse.Namespace) -> dict[str, Any]:
    mapping = {
        "token": "github_token",
        "base_url": "github_base_url",
        "verbose": "verbose",
        "timeout": "request_timeout",
        "max_retries": "max_retries",
        "yes": "execute",
        "max_workers": "max_workers",
    }
    overrides: dict[str, Any] = {}
    for arg_name, field_name in mapping.items():
        value = getattr(args, arg_name, None)
        if value is not None:
            overrides[field_name] = value
    return overrides


def _build_client(settings: LabelSyncSettings) -> GitHubLabelClient:
    return GitHubLabelClient(
        token=settings.github_token,
        base_url=settings.github_base_url,
        timeout=settings.request_timeout,
    )


def _compute_plan(args: argparse.Namespace, service: LabelSyncService) -> Plan:
    if args.command == "apply":
        return Plan(changes=tuple(PlanStore(Path(args.plan)).load()))

    repositories = resolve_repositories(_load_all(args.repo))

    if args.command == "duplicate":
        source = Path(args.source)
        if source.is_file():
            return service.plan_duplicate(LabelSetStore(source).load(), repositories)
        return service.plan_duplicate_from(normalize_repository(args.source), repositories)

    labels = _load_all(args.labels)
    if args.command == "add":
        return service.plan_add(repositories, resolve_labels(labels))
    if args.command == "delete":
        return service.plan_delete(repositories, resolve_label_names(labels))
    if args.command == "rename":
        return service.plan_rename(repositories, resolve_renames(labels))
    if args.command == "recolor":
        return service.plan_recolor(repositories, resolve_recolors(labels))
    raise InvalidInput(f"Unknown command: {args.command}")


def _print_plan(plan: Plan, *, verbose: bool) -> None:
    for change in plan.changes:
        print(f"{_ACTION_MARKERS[change.action]} {change.describe()}")

    for skip in plan.skipped:
        if skip.reason is SkipReason.RENAME_CONFLICT:
            print(f"! {skip.repository}: cannot rename {skip.label_name!r}: {skip.detail}")
        elif skip.reason is SkipReason.REPOSITORY_UNAVAILABLE:
            print(f"! {skip.repository}: skipped ({skip.detail})")
        elif verbose:
            suffix = f" ({skip.detail})" if skip.detail else ""
            print(f"  {skip.repository}: {skip.label_name!r} {skip.reason}{suffix}")


def _print_results(results: Sequence[ChangeResult]) -> None:
    for result in results:
        if result.ok:
            print(f"ok     {result.change.describe()}")
        else:
            print(f"FAILED {result.change.describe()}: {result.error_kind}: {result.message}")


def _export(args: argparse.Namespace, service: LabelSyncService) -> None:
    labels: list[Label] = service.export(normalize_repository(args.repo))
    if args.output:
        LabelSetStore(Path(args.output)).save(labels)
        print(f"Exported {len(labels)} label(s) to {args.output}")
        return
    print(json.dumps([label.to_json() for label in labels], indent=2, ensure_ascii=False))


def main(argv: list[str] | None = None, *, confirm: Confirm | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = LabelSyncSettings(**_settings_overrides(args))
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return EXIT_USAGE

    configure_logging(settings.effective_log_level)

    github = _build_client(settings)
    client: LabelClient = github
    if settings.max_retries > 0:
        client = RetryingLabelClient(github, max_retries=settings.max_retries)
    service = LabelSyncService(client)

    try:
        if args.command == "export":
            _export(args, service)
            return EXIT_OK

        plan = _compute_plan(args, service)
        _print_plan(plan, verbose=settings.verbose)

        if getattr(args, "plan_out", None):
            PlanStore(Path(args.plan_out)).save(plan.changes)
            print(f"Plan written to {args.plan_out}")

        if plan.is_empty:
            print("Nothing to do.")
            return EXIT_OK
        if args.dry_run:
            return EXIT_OK

        gate = confirm or prompt_confirmation
        if not settings.execute and not gate(plan):
            print("Aborted; no changes applied.")
            return EXIT_ABORTED

        results = service.execute(plan.changes, max_workers=settings.max_workers)
        _print_results(results)
        summary = summarize(results)
        print(f"{summary.succeeded} succeeded, {summary.failed} failed")
        return EXIT_OK if summary.failed == 0 else EXIT_FAILED

    except InvalidInput as e:
        logger.error("Invalid input", extra={"error": e.message})
        print(f"Invalid input: {e.message}", file=sys.stderr)
        return EXIT_USAGE

    except LabelSyncError as e:
        logger.error("Command failed", extra={"error_kind": str(e.kind), "error": e.message})
        print(f"{e.kind}: {e.message}", file=sys.stderr)
        return EXIT_FAILED

    except Exception:
        logger.exception("Command failed")
        return EXIT_FAILED

    finally:
        github.close()


if __name__ == "__main__":
    raise SystemExit(main())
