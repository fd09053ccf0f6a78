"""Expansion of the command-line selection into concrete repositories."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from labelr.errors import RemoteError, TargetResolutionError
from labelr.remote.provider import RepositoryLister

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Target:
    """One repository that labels are reconciled against."""

    owner: str
    repository: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repository}"

    def __str__(self) -> str:
        return self.full_name


def resolve_targets(
    *,
    owner: str | None,
    repository: str | None = None,
    fan_out: bool = False,
    lister: RepositoryLister | None = None,
) -> tuple[Target, ...]:
    """Return the ordered, non-empty list of targets for this run.

    With ``fan_out`` every repository returned by ``lister`` for ``owner`` becomes a
    target; otherwise ``repository`` is the single target.

    Raises:
        TargetResolutionError: If the owner or repository is missing, or if listing
            the owner's repositories fails or returns nothing.
    """

    owner = (owner or "").strip()
    if not owner:
        raise TargetResolutionError("no owner name or organization was found")

    if not fan_out:
        name = (repository or "").strip()
        if not name:
            raise TargetResolutionError("no repository name was found")
        return (Target(owner=owner, repository=name),)

    if lister is None:
        raise TargetResolutionError("a repository lister is required to expand an owner")

    try:
        names = lister.list_repositories(owner)
    except RemoteError as e:
        raise TargetResolutionError(f"cannot list repositories of {owner!r}: {e}") from e

    if not names:
        raise TargetResolutionError(f"owner {owner!r} has no repositories")

    targets = tuple(Target(owner=owner, repository=name) for name in names)
    logger.info(
        "Resolved owner repositories",
        extra={"owner": owner, "repositories": [t.repository for t in targets]},
    )
    return targets
