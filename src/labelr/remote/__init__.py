"""Remote label host package initialization.

The GitHub implementation lives in `labelr.remote.github_client`.
"""

from labelr.remote.provider import LabelService, RepositoryLister

__all__ = [
    "LabelService",
    "RepositoryLister",
]
