#!/usr/bin/env python3
"""Programmatic label reconciliation example.

This demonstrates using the labelr components directly:

* load settings from `.env`
* load a label file
* reconcile one repository incrementally, updating labels that already exist

The repository is passed as an argument (not inferred from a git checkout).
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

from labelr.config import LabelrSettings
from labelr.driver import run
from labelr.labels import load_labels
from labelr.logging import configure_logging
from labelr.reconcile import Action, ReconcileMode, ReconciliationEngine
from labelr.remote.github_client import GitHubClient
from labelr.targets import resolve_targets


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Apply a label file (programmatic example).")
    parser.add_argument("--repo", required=True, help='Target repository in the form "owner/repo"')
    parser.add_argument("--file", default="labels.yml", help="Label file")
    parser.add_argument("--dry-run", action="store_true", help="Only report changes")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = LabelrSettings()
    configure_logging("INFO")

    owner, _, repository = args.repo.partition("/")
    desired = load_labels(Path(args.file))
    targets = resolve_targets(owner=owner, repository=repository)

    github = GitHubClient(token=settings.github_token, base_url=settings.github_base_url)
    try:
        reports = run(
            targets=targets,
            desired=desired,
            engine=ReconciliationEngine(
                mode=ReconcileMode.incremental(update_existing=True),
                dry_run=args.dry_run,
            ),
            service_for=github.labels_for,
        )
    finally:
        github.close()

    for report in reports:
        print(
            f"{report.target}: {report.count(Action.CREATE)} created, "
            f"{report.count(Action.UPDATE)} updated, {report.count(Action.SKIP)} unchanged"
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
