"""Deployment mode detection.

Two layouts are recognised, checked in order:

1. Repository: ``framework/CLAUDE.md`` under the working directory
   (prefix ``framework/``)
2. Installed: ``CLAUDE.md`` directly in the working directory (empty prefix)

Detection runs once per validation run and produces an immutable
ExecutionContext that is passed explicitly to every reader call.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from csf.validator.errors import ModeDetectionError

logger = logging.getLogger(__name__)

FRAMEWORK_DIR = "framework"
ROOT_INSTRUCTIONS = "CLAUDE.md"


class ExecutionMode(str, Enum):
    """Deployment context of the framework being validated."""

    REPOSITORY = "repository"
    INSTALLED = "installed"

    @property
    def prefix(self) -> str:
        """Path prefix every relative path is composed with."""
        if self is ExecutionMode.REPOSITORY:
            return f"{FRAMEWORK_DIR}/"
        return ""


@dataclass(frozen=True)
class ExecutionContext:
    """Active mode plus the directory it was detected from."""

    mode: ExecutionMode
    root: Path

    @property
    def prefix(self) -> str:
        return self.mode.prefix


def _is_readable_dir(path: Path) -> bool:
    return path.is_dir() and os.access(path, os.R_OK | os.X_OK)


def detect_mode(cwd: Optional[Path] = None) -> ExecutionContext:
    """Select the execution mode from the layout of ``cwd``.

    Args:
        cwd: Directory to inspect (defaults to the process working directory).

    Returns:
        ExecutionContext for the first layout that matches.

    Raises:
        ModeDetectionError: If neither layout is present.
    """
    root = Path(cwd) if cwd is not None else Path.cwd()

    framework_dir = root / FRAMEWORK_DIR
    if _is_readable_dir(framework_dir) and (framework_dir / ROOT_INSTRUCTIONS).is_file():
        context = ExecutionContext(mode=ExecutionMode.REPOSITORY, root=root)
    elif (root / ROOT_INSTRUCTIONS).is_file():
        context = ExecutionContext(mode=ExecutionMode.INSTALLED, root=root)
    else:
        raise ModeDetectionError(str(root))

    logger.info("Detected %s mode in %s", context.mode.value, root)
    return context
