"""Exception hierarchy shared by the label loader, target resolver and engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from labelr.reconcile import BatchResult, Operation
    from labelr.targets import Target


class LabelrError(Exception):
    """Base class for all errors raised by labelr."""


class LabelFileError(LabelrError):
    """The label file could not be read or does not match the expected schema."""


class TargetResolutionError(LabelrError):
    """The owner/repository could not be determined, or repository listing failed."""


class RemoteError(LabelrError):
    """A single call to the remote label service failed."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ReconciliationError(LabelrError):
    """A batch of operations against one target settled with at least one failure.

    The error wraps the first failure (in dispatch order). By the time it is raised
    every sibling operation in the batch has already been sent; nothing is rolled back.
    """

    def __init__(
        self,
        message: str,
        *,
        target: Target | None = None,
        operation: Operation | None = None,
        result: BatchResult | None = None,
    ) -> None:
        super().__init__(message)
        self.target = target
        self.operation = operation
        self.result = result


class DuplicateLabelError(ReconciliationError):
    """The desired label set contains the same name more than once."""
