"""Desired label definitions and the YAML label file loader.

A label file looks like::

    labels:
      - name: bug
        color: "#d73a4a"
        description: Something isn't working
      - name: question
        color: d876e3

``description`` is optional and defaults to an empty string. Colors may carry a
leading ``#``; it is stripped only when the label is sent to GitHub.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from labelr.errors import LabelFileError

logger = logging.getLogger(__name__)

DEFAULT_LABEL_FILE = Path("labels.yml")


@dataclass(frozen=True, slots=True)
class Label:
    name: str
    color: str
    description: str = ""

    @property
    def normalized_color(self) -> str:
        """Color as transmitted to GitHub: one leading ``#`` removed, nothing else."""

        return self.color.removeprefix("#")


LabelSet = tuple[Label, ...]


class LabelRecord(BaseModel):
    """Schema of a single entry in the ``labels`` list."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(min_length=1)
    color: str = Field(min_length=1)
    description: str | None = Field(default=None)

    def to_label(self) -> Label:
        return Label(name=self.name, color=self.color, description=self.description or "")


class LabelDocument(BaseModel):
    """Schema of a whole label file."""

    model_config = ConfigDict(extra="ignore")

    labels: list[LabelRecord]


def duplicate_names(labels: Iterable[Label]) -> list[str]:
    """Return names that occur more than once, in first-seen order."""

    counts = Counter(label.name for label in labels)
    return [name for name, count in counts.items() if count > 1]


def parse_labels(text: str, *, source: str = "<string>") -> LabelSet:
    """Parse a YAML label document into an ordered, immutable label set."""

    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise LabelFileError(f"{source}: invalid YAML: {e}") from e

    if not isinstance(raw, dict):
        raise LabelFileError(f"{source}: expected a mapping with a 'labels' key")

    try:
        document = LabelDocument.model_validate(raw)
    except ValidationError as e:
        raise LabelFileError(f"{source}: invalid label file: {e}") from e

    labels = tuple(record.to_label() for record in document.labels)

    duplicates = duplicate_names(labels)
    if duplicates:
        raise LabelFileError(f"{source}: duplicate label names: {', '.join(duplicates)}")

    return labels


def load_labels(path: Path) -> LabelSet:
    """Load the label file at ``path``."""

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise LabelFileError(f"cannot read label file {path}: {e}") from e

    labels = parse_labels(text, source=str(path))
    logger.debug("Label file loaded", extra={"path": str(path), "count": len(labels)})
    return labels
