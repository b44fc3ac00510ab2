"""
RESPONSIBILITIES
- Hand persistence modules a child of the application logger.
- Only touch the filesystem when a caller names an explicit data root.
PROCESS OVERVIEW
1. With a root, ensure_structure() creates <root>/logs and the application
   logger is configured there (first caller wins).
2. Without a root, the already configured application logger is reused as is.
3. The child logger is returned under dispatchboard.<name>.
"""

from __future__ import annotations

import logging
from pathlib import Path

from dispatchboard.core.logger import get_logger as core_get_logger

from .paths import ensure_structure


def get_logger(name: str, root: Path | None = None) -> logging.Logger:
    """Return a namespaced logger for persistence modules."""

    if root is None:
        return core_get_logger().getChild(name)
    directories = ensure_structure(root)
    return core_get_logger(directories["logs"]).getChild(name)
