"""Test configuration and fixtures."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from pathlib import Path

import pytest

from labelr.errors import RemoteError
from labelr.labels import Label
from labelr.logging import JsonFormatter
from labelr.remote.provider import LabelService
from labelr.targets import Target


class FakeLabelService(LabelService):
    """In-memory label service recording every call it receives."""

    def __init__(self, labels: list[Label] | None = None, *, failing: set[str] | None = None):
        self.labels: dict[str, Label] = {label.name: label for label in labels or []}
        self.failing = failing or set()
        self.calls: list[tuple[str, str]] = []
        self.list_calls = 0
        self._lock = threading.Lock()

    def _record(self, action: str, name: str) -> None:
        with self._lock:
            self.calls.append((action, name))
        if name in self.failing:
            raise RemoteError(f"{action} {name!r} failed: 422 Validation Failed", status=422)

    def list_labels(self) -> list[Label]:
        self.list_calls += 1
        return list(self.labels.values())

    def create_label(self, label: Label) -> Label:
        self._record("create", label.name)
        stored = Label(label.name, label.normalized_color, label.description)
        with self._lock:
            self.labels[label.name] = stored
        return stored

    def update_label(self, name: str, label: Label) -> Label:
        self._record("update", name)
        stored = Label(label.name, label.normalized_color, label.description)
        with self._lock:
            self.labels.pop(name, None)
            self.labels[label.name] = stored
        return stored

    def delete_label(self, name: str) -> None:
        self._record("delete", name)
        with self._lock:
            self.labels.pop(name, None)


@pytest.fixture
def make_service() -> type[FakeLabelService]:
    """Provide the in-memory label service class."""
    return FakeLabelService


@pytest.fixture
def target() -> Target:
    """Provide a test target repository."""
    return Target(owner="octo-org", repository="octo-repo")


@pytest.fixture
def label_file(tmp_path: Path) -> Path:
    """Provide a label file with two labels."""
    path = tmp_path / "labels.yml"
    path.write_text(
        "\n".join(
            [
                "---",
                "labels:",
                '  - color: "#d73a4a"',
                "    name: bug",
                "    description: Something isn't working",
                "  - color: a2eeef",
                "    name: enhancement",
                "",
            ]
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    """Undo `configure_logging` calls made by CLI tests."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if isinstance(handler.formatter, JsonFormatter):
            root.removeHandler(handler)
    root.setLevel(level)
