"""Label reconciliation engine.

For one target repository the engine:
- fetches the current labels once (a read-only snapshot)
- plans the operations for the selected mode
- dispatches each batch concurrently and waits for the whole batch to settle

Modes:
- full sync: delete every existing label, then create every desired label
- incremental: create missing labels, optionally update existing ones, never delete

A batch is never cancelled part-way. When at least one operation of a batch fails, the
whole target fails with a `ReconciliationError` wrapping the first failure, after every
sibling has settled. Nothing is rolled back; re-running converges.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import StrEnum

from labelr.errors import DuplicateLabelError, ReconciliationError, RemoteError
from labelr.labels import Label, LabelSet, duplicate_names
from labelr.remote.provider import LabelService
from labelr.targets import Target

logger = logging.getLogger(__name__)


class Action(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    SKIP = "skip"


@dataclass(frozen=True, slots=True)
class Create:
    target: Target
    label: Label

    action = Action.CREATE

    @property
    def name(self) -> str:
        return self.label.name


@dataclass(frozen=True, slots=True)
class Update:
    target: Target
    name: str
    label: Label

    action = Action.UPDATE


@dataclass(frozen=True, slots=True)
class Delete:
    target: Target
    name: str

    action = Action.DELETE


Operation = Create | Update | Delete


class SyncMode(StrEnum):
    FULL_SYNC = "full-sync"
    INCREMENTAL = "incremental"


@dataclass(frozen=True, slots=True)
class ReconcileMode:
    """Policy used to converge a target.

    ``update_existing`` only matters for incremental mode.
    """

    sync: SyncMode = SyncMode.INCREMENTAL
    update_existing: bool = False

    @classmethod
    def full_sync(cls) -> ReconcileMode:
        return cls(sync=SyncMode.FULL_SYNC)

    @classmethod
    def incremental(cls, *, update_existing: bool = False) -> ReconcileMode:
        return cls(sync=SyncMode.INCREMENTAL, update_existing=update_existing)


@dataclass(frozen=True, slots=True)
class OperationOutcome:
    operation: Operation
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class BatchResult:
    """Every outcome of one batch, in dispatch order."""

    outcomes: tuple[OperationOutcome, ...] = ()

    @property
    def failures(self) -> tuple[OperationOutcome, ...]:
        return tuple(o for o in self.outcomes if not o.ok)

    @property
    def first_failure(self) -> OperationOutcome | None:
        failures = self.failures
        return failures[0] if failures else None

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass(frozen=True, slots=True)
class Plan:
    """Operations computed for a target, grouped into batches dispatched in order."""

    batches: tuple[tuple[Operation, ...], ...]
    skipped: tuple[str, ...] = ()

    @property
    def operations(self) -> tuple[Operation, ...]:
        return tuple(op for batch in self.batches for op in batch)


@dataclass(slots=True)
class ReconciliationReport:
    target: Target
    plan: Plan
    results: list[BatchResult] = field(default_factory=list)
    dry_run: bool = False

    @property
    def operations(self) -> tuple[Operation, ...]:
        return self.plan.operations

    @property
    def outcomes(self) -> tuple[OperationOutcome, ...]:
        return tuple(o for result in self.results for o in result.outcomes)

    def count(self, action: Action) -> int:
        """Planned operations of ``action`` in a dry run, otherwise the ones that succeeded."""

        if action == Action.SKIP:
            return len(self.plan.skipped)
        if self.dry_run:
            return sum(1 for op in self.plan.operations if op.action == action)
        return sum(1 for o in self.outcomes if o.ok and o.operation.action == action)


def _matches(current: Label, desired: Label) -> bool:
    # GitHub reports colors in lowercase.
    return (
        current.name == desired.name
        and current.normalized_color.lower() == desired.normalized_color.lower()
        and current.description == desired.description
    )


def plan_full_sync(target: Target, desired: LabelSet, remote: Sequence[Label]) -> Plan:
    """Delete everything on the remote, then create every desired label in order."""

    deletes = tuple(Delete(target=target, name=label.name) for label in remote)
    creates = tuple(Create(target=target, label=label) for label in desired)
    return Plan(batches=(deletes, creates))


def plan_incremental(
    target: Target,
    desired: LabelSet,
    remote: Sequence[Label],
    *,
    update_existing: bool = False,
) -> Plan:
    """Create missing labels and, if requested, update existing ones.

    Names are matched exactly (case-sensitive). An existing label that already has the
    desired color and description is left alone even with ``update_existing``.
    """

    existing = {label.name: label for label in remote}
    operations: list[Operation] = []
    skipped: list[str] = []
    for label in desired:
        current = existing.get(label.name)
        if current is None:
            operations.append(Create(target=target, label=label))
        elif update_existing and not _matches(current, label):
            operations.append(Update(target=target, name=label.name, label=label))
        else:
            skipped.append(label.name)
    return Plan(batches=(tuple(operations),), skipped=tuple(skipped))


def plan(
    target: Target, desired: LabelSet, remote: Sequence[Label], mode: ReconcileMode
) -> Plan:
    if mode.sync == SyncMode.FULL_SYNC:
        return plan_full_sync(target, desired, remote)
    return plan_incremental(target, desired, remote, update_existing=mode.update_existing)


def apply_operation(service: LabelService, operation: Operation) -> None:
    """Send one operation to the remote service (blocking)."""

    if isinstance(operation, Create):
        service.create_label(operation.label)
    elif isinstance(operation, Update):
        service.update_label(operation.name, operation.label)
    elif isinstance(operation, Delete):
        service.delete_label(operation.name)
    else:
        raise TypeError(f"Unsupported operation: {operation!r}")


def _log_intent(operation: Operation) -> None:
    extra = {"repo": operation.target.full_name, "label": operation.name}
    if isinstance(operation, Create):
        logger.info(f'Creating label: "{operation.name}"', extra=extra)
    elif isinstance(operation, Update):
        logger.info(f'Updating existing label: "{operation.name}"', extra=extra)
    else:
        logger.info(f'Deleting label: "{operation.name}"', extra=extra)


async def dispatch_batch(service: LabelService, operations: Sequence[Operation]) -> BatchResult:
    """Issue every operation without waiting on its siblings, then wait for all of them.

    Each operation gets its own worker thread, so a batch is never throttled by the size of
    the default executor. Each outcome is logged as soon as it completes. Failures are
    captured, not raised.
    """

    loop = asyncio.get_running_loop()

    async def _run(operation: Operation) -> OperationOutcome:
        _log_intent(operation)
        extra = {
            "repo": operation.target.full_name,
            "label": operation.name,
            "action": str(operation.action),
        }
        try:
            await loop.run_in_executor(executor, apply_operation, service, operation)
        except Exception as e:  # captured and surfaced once the batch settles
            logger.error(f"Label {operation.action} failed: {e}", extra=extra)
            return OperationOutcome(operation=operation, error=e)
        logger.debug("Label operation succeeded", extra=extra)
        return OperationOutcome(operation=operation)

    with ThreadPoolExecutor(
        max_workers=max(len(operations), 1), thread_name_prefix="labelr-dispatch"
    ) as executor:
        outcomes = await asyncio.gather(*(_run(op) for op in operations))
    return BatchResult(outcomes=tuple(outcomes))


def _batch_error(
    target: Target, result: BatchResult, first: OperationOutcome
) -> ReconciliationError:
    operation = first.operation
    others = len(result.failures) - 1
    suffix = f" ({others} more failed)" if others else ""
    return ReconciliationError(
        f"{target.full_name}: {operation.action} label {operation.name!r} failed: "
        f"{first.error}{suffix}",
        target=target,
        operation=operation,
        result=result,
    )


class ReconciliationEngine:
    """Converges the labels of one target at a time toward a desired label set."""

    def __init__(self, *, mode: ReconcileMode | None = None, dry_run: bool = False) -> None:
        self.mode = mode or ReconcileMode()
        self.dry_run = dry_run

    async def reconcile(
        self, target: Target, service: LabelService, desired: LabelSet
    ) -> ReconciliationReport:
        """Fetch the target's labels once, then plan and apply."""

        self._check_desired(target, desired)
        try:
            remote = tuple(await asyncio.to_thread(service.list_labels))
        except RemoteError as e:
            raise ReconciliationError(
                f"{target.full_name}: listing labels failed: {e}", target=target
            ) from e
        return await self.apply(target, service, desired, remote)

    async def apply(
        self,
        target: Target,
        service: LabelService,
        desired: LabelSet,
        remote: Sequence[Label],
    ) -> ReconciliationReport:
        """Plan against the ``remote`` snapshot and dispatch the batches in order."""

        self._check_desired(target, desired)
        computed = plan(target, desired, remote, self.mode)
        report = ReconciliationReport(target=target, plan=computed, dry_run=self.dry_run)

        for name in computed.skipped:
            logger.info(
                f'Skipping existing label: "{name}"',
                extra={"repo": target.full_name, "label": name},
            )

        if self.dry_run:
            for operation in computed.operations:
                _log_intent(operation)
            return report

        for batch in computed.batches:
            if not batch:
                continue
            result = await dispatch_batch(service, batch)
            report.results.append(result)
            first = result.first_failure
            if first is not None:
                raise _batch_error(target, result, first) from first.error

        logger.info(
            "Target reconciled",
            extra={
                "repo": target.full_name,
                "mode": str(self.mode.sync),
                "labels_created": report.count(Action.CREATE),
                "labels_updated": report.count(Action.UPDATE),
                "labels_deleted": report.count(Action.DELETE),
                "labels_skipped": report.count(Action.SKIP),
            },
        )
        return report

    @staticmethod
    def _check_desired(target: Target, desired: LabelSet) -> None:
        duplicates = duplicate_names(desired)
        if duplicates:
            raise DuplicateLabelError(
                f"{target.full_name}: duplicate desired label names: {', '.join(duplicates)}",
                target=target,
            )
