"""labelr.

Reconciles a declarative label file against the labels of one GitHub repository,
or of every repository owned by a user or organization:
- configuration loaded from the environment and `.env`
- structured logging
- concurrent create/update/delete of labels per repository
"""

__version__ = "0.1.0"

from labelr.config import LabelrSettings

__all__ = ["__version__", "LabelrSettings"]
