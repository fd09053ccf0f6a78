"""Abstract interfaces for the remote label host.

The reconciliation engine only talks to these interfaces, so any hosting platform
that can list, create, update and delete labels can be plugged in.
"""

from abc import ABC, abstractmethod

from labelr.labels import Label


class LabelService(ABC):
    """Label operations scoped to a single repository.

    Implementations raise `labelr.errors.RemoteError` for any failed call.
    """

    @abstractmethod
    def list_labels(self) -> list[Label]:
        """Return every label currently defined on the repository."""

    @abstractmethod
    def create_label(self, label: Label) -> Label:
        """Create ``label`` and return it as stored remotely."""

    @abstractmethod
    def update_label(self, name: str, label: Label) -> Label:
        """Replace the label currently called ``name`` with ``label``."""

    @abstractmethod
    def delete_label(self, name: str) -> None:
        """Delete the label called ``name``."""


class RepositoryLister(ABC):
    """Enumerates the repositories belonging to an owner."""

    @abstractmethod
    def list_repositories(self, owner: str) -> list[str]:
        """Return repository names (without the owner prefix) owned by ``owner``."""
