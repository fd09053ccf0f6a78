"""Runs the reconciliation engine over every target, one after the other."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence

from labelr.errors import ReconciliationError
from labelr.labels import LabelSet
from labelr.reconcile import ReconciliationEngine, ReconciliationReport
from labelr.remote.provider import LabelService
from labelr.targets import Target

logger = logging.getLogger(__name__)

ServiceFactory = Callable[[Target], LabelService]


async def run_async(
    *,
    targets: Sequence[Target],
    desired: LabelSet,
    engine: ReconciliationEngine,
    service_for: ServiceFactory,
) -> list[ReconciliationReport]:
    """Reconcile targets sequentially; the first failing target aborts the run."""

    reports: list[ReconciliationReport] = []
    for index, target in enumerate(targets):
        logger.info("Reconciling target", extra={"repo": target.full_name})
        try:
            report = await engine.reconcile(target, service_for(target), desired)
        except ReconciliationError:
            remaining = len(targets) - index - 1
            if remaining:
                logger.warning(
                    "Aborting run; remaining targets were not processed",
                    extra={"repo": target.full_name, "remaining": remaining},
                )
            raise
        reports.append(report)
    return reports


def run(
    *,
    targets: Sequence[Target],
    desired: LabelSet,
    engine: ReconciliationEngine,
    service_for: ServiceFactory,
) -> list[ReconciliationReport]:
    return asyncio.run(
        run_async(targets=targets, desired=desired, engine=engine, service_for=service_for)
    )
