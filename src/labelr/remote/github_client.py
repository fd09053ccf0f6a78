"""GitHub implementation of the remote label interfaces.

This wraps PyGithub to keep GitHub calls out of the engine and CLI code and make tests easy.
Label edits and deletions go straight to the REST endpoints so that each operation is a
single request addressed by label name.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import requests
from github import Auth, Github, GithubException, UnknownObjectException
from github.Repository import Repository

from labelr import __version__
from labelr.errors import RemoteError
from labelr.labels import Label
from labelr.remote.provider import LabelService, RepositoryLister
from labelr.targets import Target

logger = logging.getLogger(__name__)

_USER_AGENT = f"labelr/{__version__}"


def _remote_error(action: str, subject: str, exc: Exception) -> RemoteError:
    status: int | None = None
    detail: object = exc
    if isinstance(exc, GithubException):
        status = exc.status
        detail = exc.data.get("message") if isinstance(exc.data, dict) else exc.data
    elif isinstance(exc, requests.HTTPError) and exc.response is not None:
        status = exc.response.status_code
        detail = exc.response.text
    prefix = f"{status} " if status is not None else ""
    return RemoteError(f"{action} {subject!r} failed: {prefix}{detail}", status=status)


def _label_from_api(name: str, color: str, description: str | None) -> Label:
    return Label(name=name, color=color, description=description or "")


class GitHubLabelService(LabelService):
    """Label operations for one GitHub repository."""

    def __init__(
        self,
        *,
        target: Target,
        repo: Repository,
        session: requests.Session,
        base_url: str = "https://api.github.com",
    ) -> None:
        self._target = target
        self._repo = repo
        self._session = session
        self._rest_base_url = base_url.rstrip("/")

    @property
    def target(self) -> Target:
        return self._target

    def _label_url(self, name: str) -> str:
        return (
            f"{self._rest_base_url}/repos/{self._target.full_name}/labels/"
            f"{quote(name, safe='')}"
        )

    def list_labels(self) -> list[Label]:
        try:
            labels = [
                _label_from_api(item.name, item.color, item.description)
                for item in self._repo.get_labels()
            ]
        except (GithubException, requests.RequestException) as e:
            raise _remote_error("listing labels of", self._target.full_name, e) from e

        logger.debug(
            "Labels listed", extra={"repo": self._target.full_name, "count": len(labels)}
        )
        return labels

    def create_label(self, label: Label) -> Label:
        try:
            created = self._repo.create_label(
                name=label.name,
                color=label.normalized_color,
                description=label.description,
            )
        except (GithubException, requests.RequestException) as e:
            raise _remote_error("creating label", label.name, e) from e
        return _label_from_api(created.name, created.color, created.description)

    def update_label(self, name: str, label: Label) -> Label:
        payload = {
            "new_name": label.name,
            "color": label.normalized_color,
            "description": label.description,
        }
        try:
            resp = self._session.patch(self._label_url(name), json=payload, timeout=30)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise _remote_error("updating label", name, e) from e

        data: dict[str, Any] = resp.json()
        return _label_from_api(
            str(data.get("name", label.name)),
            str(data.get("color", label.normalized_color)),
            data.get("description"),
        )

    def delete_label(self, name: str) -> None:
        try:
            resp = self._session.delete(self._label_url(name), timeout=30)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise _remote_error("deleting label", name, e) from e


class GitHubClient(RepositoryLister):
    """Owns the authenticated GitHub connection and hands out per-repository label services."""

    def __init__(
        self,
        *,
        token: str,
        base_url: str = "https://api.github.com",
        github_api: Github | None = None,
        session: requests.Session | None = None,
    ) -> None:
        if not token:
            raise ValueError("GitHub token is required")

        self._rest_base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": _USER_AGENT,
            }
        )

        if github_api is not None:
            self._github = github_api
            logger.debug("Using injected Github instance")
            return

        auth = Auth.Token(token)
        self._github = Github(auth=auth, base_url=self._rest_base_url, user_agent=_USER_AGENT)

    def labels_for(self, target: Target) -> GitHubLabelService:
        """Return the label service for ``target``; no request is made until it is used."""

        repo = self._github.get_repo(target.full_name, lazy=True)
        return GitHubLabelService(
            target=target,
            repo=repo,
            session=self._session,
            base_url=self._rest_base_url,
        )

    def list_repositories(self, owner: str) -> list[str]:
        """List repositories of an organization, or of a user when ``owner`` is not one."""

        try:
            try:
                repos = list(self._github.get_organization(owner).get_repos())
                kind = "organization"
            except UnknownObjectException:
                repos = list(self._github.get_user(owner).get_repos())
                kind = "user"
        except (GithubException, requests.RequestException) as e:
            raise _remote_error("listing repositories of", owner, e) from e

        names = [repo.name for repo in repos]
        logger.info(
            "Repositories listed", extra={"owner": owner, "kind": kind, "count": len(names)}
        )
        return names

    def close(self) -> None:
        self._session.close()
        self._github.close()
