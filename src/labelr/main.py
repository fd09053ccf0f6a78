"""CLI entrypoint for labelr."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from labelr import __version__
from labelr.config import LabelrSettings, resolve_value
from labelr.driver import run
from labelr.errors import LabelFileError, ReconciliationError, TargetResolutionError
from labelr.labels import DEFAULT_LABEL_FILE, load_labels
from labelr.logging import configure_logging, level_for_verbosity
from labelr.reconcile import Action, ReconcileMode, ReconciliationEngine
from labelr.remote.github_client import GitHubClient
from labelr.repo_info import infer_repo_info
from labelr.targets import resolve_targets

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="labelr",
        description="Manage GitHub labels from a YAML file",
    )
    parser.add_argument("--version", action="version", version=f"labelr {__version__}")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug)",
    )
    parser.add_argument(
        "--organization",
        default=None,
        help="Organization name (env: GITHUB_ORGANIZATION)",
    )
    parser.add_argument(
        "--owner",
        default=None,
        help="Owner name (env: GITHUB_USER)",
    )
    parser.add_argument(
        "--repository",
        type=Path,
        default=None,
        help="Local repository directory (env: GITHUB_REPOSITORY, default: .)",
    )
    parser.add_argument(
        "--token",
        default=None,
        help="GitHub token (env: GITHUB_TOKEN)",
    )
    parser.add_argument(
        "--sync",
        action="store_true",
        help="Delete every existing label before creating the ones from the file",
    )
    parser.add_argument(
        "--org",
        action="store_true",
        help="Apply the labels to every repository of the owner",
    )
    parser.add_argument(
        "--update-existing",
        action="store_true",
        help="Update labels that already exist instead of skipping them",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only report what would change; no label is modified",
    )
    parser.add_argument(
        "file",
        nargs="?",
        type=Path,
        default=DEFAULT_LABEL_FILE,
        help="File containing the labels (default: labels.yml)",
    )
    return parser


def _mode_from_args(args: argparse.Namespace) -> ReconcileMode:
    if args.sync:
        return ReconcileMode.full_sync()
    return ReconcileMode.incremental(update_existing=args.update_existing)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = LabelrSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your environment or .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(level_for_verbosity(args.verbose, settings.log_level))

    token = resolve_value(args.token, lambda: settings.github_token)
    if token is None:
        print("A GitHub token is required (--token or GITHUB_TOKEN)", file=sys.stderr)
        return 2

    try:
        desired = load_labels(args.file)

        path = resolve_value(args.repository, lambda: settings.github_repository, Path("."))
        assert path is not None
        repository, owner = infer_repo_info(
            path,
            owner=resolve_value(args.owner, lambda: settings.github_user),
            organization=resolve_value(args.organization, lambda: settings.github_organization),
            env=settings.env_lookup,
        )

        github = GitHubClient(token=token, base_url=settings.github_base_url)
        try:
            targets = resolve_targets(
                owner=owner,
                repository=repository,
                fan_out=args.org,
                lister=github,
            )
            engine = ReconciliationEngine(mode=_mode_from_args(args), dry_run=args.dry_run)
            reports = run(
                targets=targets,
                desired=desired,
                engine=engine,
                service_for=github.labels_for,
            )
        finally:
            github.close()

        prefix = "[dry-run] " if args.dry_run else ""
        for report in reports:
            print(
                f"{prefix}{report.target}: created={report.count(Action.CREATE)} "
                f"updated={report.count(Action.UPDATE)} deleted={report.count(Action.DELETE)} "
                f"skipped={report.count(Action.SKIP)}"
            )
        return 0

    except LabelFileError as e:
        logger.error(str(e), extra={"path": str(args.file)})
        print(str(e), file=sys.stderr)
        return 2

    except TargetResolutionError as e:
        logger.error(str(e))
        print(str(e), file=sys.stderr)
        return 3

    except ReconciliationError as e:
        extra: dict[str, object] = {}
        if e.target is not None:
            extra["repo"] = e.target.full_name
        if e.operation is not None:
            extra["action"] = str(e.operation.action)
            extra["label"] = e.operation.name
        logger.error(str(e), extra=extra)
        print(str(e), file=sys.stderr)
        return 4

    except Exception:
        logger.exception("Command failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
