"""Unit tests for the multi-target driver."""

from __future__ import annotations

import pytest

from labelr.driver import run
from labelr.errors import ReconciliationError
from labelr.labels import Label
from labelr.reconcile import ReconcileMode, ReconciliationEngine
from labelr.targets import Target

DESIRED = (Label("bug", "#d73a4a"), Label("docs", "0075ca"))


def test_targets_are_reconciled_in_order(make_service) -> None:
    targets = [Target("octo-org", name) for name in ("one", "two", "three")]
    services = {t: make_service([Label("bug", "000000")]) for t in targets}
    order: list[str] = []

    def service_for(target: Target):
        order.append(target.repository)
        return services[target]

    reports = run(
        targets=targets,
        desired=DESIRED,
        engine=ReconciliationEngine(mode=ReconcileMode.incremental()),
        service_for=service_for,
    )

    assert order == ["one", "two", "three"]
    assert [r.target for r in reports] == targets
    for service in services.values():
        assert service.calls == [("create", "docs")]


def test_first_failing_target_aborts_the_run(make_service) -> None:
    targets = [Target("octo-org", name) for name in ("one", "two", "three")]
    services = {
        targets[0]: make_service(),
        targets[1]: make_service(failing={"docs"}),
        targets[2]: make_service(),
    }

    with pytest.raises(ReconciliationError) as excinfo:
        run(
            targets=targets,
            desired=DESIRED,
            engine=ReconciliationEngine(),
            service_for=services.__getitem__,
        )

    assert excinfo.value.target == targets[1]
    assert len(services[targets[0]].calls) == 2
    assert sorted(services[targets[1]].calls) == [("create", "bug"), ("create", "docs")]
    assert services[targets[2]].calls == []
    assert services[targets[2]].list_calls == 0
