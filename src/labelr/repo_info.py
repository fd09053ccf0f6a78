"""Repository name and owner inference from a local checkout."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable
from pathlib import Path
from urllib.parse import urlparse

from labelr.config import resolve_value
from labelr.errors import TargetResolutionError

logger = logging.getLogger(__name__)

EnvLookup = Callable[[str], str | None]


def parse_remote_url(url: str) -> tuple[str, str | None]:
    """Split a git remote URL into ``(repository, owner)``.

    Supports https/ssh URLs (``https://github.com/owner/repo.git``,
    ``ssh://git@github.com/owner/repo``) and the scp-like form
    (``git@github.com:owner/repo.git``). The owner is ``None`` when the path has a
    single component.
    """

    url = url.strip()
    if not url:
        raise ValueError("empty remote URL")

    if "://" in url:
        path = urlparse(url).path
    elif ":" in url:
        # scp-like syntax: [user@]host:path
        path = url.split(":", 1)[1]
    else:
        path = url

    parts = [p for p in path.strip("/").split("/") if p]
    if not parts:
        raise ValueError(f"cannot find a repository name in {url!r}")

    name = parts[-1].removesuffix(".git")
    if not name:
        raise ValueError(f"cannot find a repository name in {url!r}")
    owner = parts[-2] if len(parts) >= 2 else None
    return name, owner


def get_repo_info_from_remote(path: Path) -> tuple[str, str | None]:
    """Read the ``origin`` remote of the git repository containing ``path``."""

    try:
        result = subprocess.run(
            ["git", "-C", str(path), "config", "--get", "remote.origin.url"],
            capture_output=True,
            text=True,
            check=True,
            timeout=5,
        )
    except (OSError, subprocess.SubprocessError) as e:
        raise ValueError(f"cannot read the origin remote of {path}: {e}") from e

    return parse_remote_url(result.stdout)


def infer_repo_info(
    path: Path,
    *,
    owner: str | None = None,
    organization: str | None = None,
    env: EnvLookup | None = None,
) -> tuple[str, str]:
    """Return ``(repository, owner)`` for the checkout at ``path``.

    Lookup order:
    1. both values from the git ``origin`` remote
    2. otherwise the repository is the directory name, and the owner comes from
       ``GITHUB_USER`` then ``owner``
    3. if there is still no owner: ``GITHUB_ORGANIZATION`` then ``organization``

    Raises:
        TargetResolutionError: If the path does not exist or no owner can be found.
    """

    lookup: EnvLookup = env or (lambda _name: None)

    try:
        repository, inferred_owner = get_repo_info_from_remote(path)
        logger.debug(
            "Repository inferred from git remote",
            extra={"repository": repository, "owner": inferred_owner},
        )
    except ValueError as e:
        logger.debug("Falling back to directory name", extra={"reason": str(e)})
        try:
            resolved = path.resolve(strict=True)
        except OSError as exc:
            raise TargetResolutionError(f"the repository path does not exist: {exc}") from exc
        if not resolved.name:
            raise TargetResolutionError("invalid repository path")
        repository = resolved.name
        inferred_owner = resolve_value(None, lambda: lookup("GITHUB_USER"), owner)

    resolved_owner = resolve_value(
        inferred_owner, lambda: lookup("GITHUB_ORGANIZATION"), organization
    )
    if resolved_owner is None:
        raise TargetResolutionError("no owner name or organization was found")

    return repository, resolved_owner
