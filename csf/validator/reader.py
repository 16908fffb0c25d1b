"""Read-only filesystem access for validation checks.

FrameworkReader is the only object that touches framework files. Each call
composes its relative path through build_safe_path() first, so a rejected
path aborts the run before any I/O happens.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from csf.validator.mode import ExecutionContext
from csf.validator.path_security import build_safe_path

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"


@dataclass(frozen=True)
class TargetSnapshot:
    """What a check sees of its target.

    Attributes:
        relative_path: Target path relative to the framework root.
        exists: True if the path exists.
        is_dir: True if the path is a directory.
        text: File content for readable files, None otherwise.
        entries: Markdown file names inside a directory (sorted).
        read_error: Why ``text`` is None for an existing file, if it is.
    """

    relative_path: str
    exists: bool
    is_dir: bool = False
    text: Optional[str] = None
    entries: Tuple[str, ...] = ()
    read_error: Optional[str] = None

    @property
    def is_file(self) -> bool:
        return self.exists and not self.is_dir

    @property
    def stem(self) -> str:
        name = self.relative_path.rsplit("/", 1)[-1]
        return name[: -len(MARKDOWN_SUFFIX)] if name.endswith(MARKDOWN_SUFFIX) else name


class FrameworkReader:
    """Resolve and read framework paths for one execution context."""

    def __init__(self, context: ExecutionContext):
        self.context = context

    def resolve(self, relative: str) -> Path:
        """Turn a relative path into a filesystem path under the root.

        The built path is joined segment by segment so that it always stays
        below ``context.root``.
        """
        built = build_safe_path(self.context, relative)
        segments = [segment for segment in built.split("/") if segment]
        return self.context.root.joinpath(*segments)

    def exists(self, relative: str) -> bool:
        return self.resolve(relative).exists()

    def is_file(self, relative: str) -> bool:
        return self.resolve(relative).is_file()

    def is_dir(self, relative: str) -> bool:
        return self.resolve(relative).is_dir()

    def read_text(self, relative: str) -> str:
        """Read a framework file as UTF-8 text."""
        return self.resolve(relative).read_text(encoding="utf-8")

    def list_markdown(self, relative: str) -> Tuple[str, ...]:
        """List markdown files directly inside a directory.

        Symlinks and sub-directories are skipped. Returns an empty tuple if
        the directory does not exist or cannot be listed.
        """
        try:
            return self._list_markdown(relative)
        except OSError as e:
            logger.debug("Could not list %s: %s", relative, e)
            return ()

    def _list_markdown(self, relative: str) -> Tuple[str, ...]:
        directory = self.resolve(relative)
        if not directory.is_dir():
            return ()

        names = []
        for path in directory.iterdir():
            if path.is_symlink():
                # Skip symlinks: validation only applies to real files
                logger.debug("Skipping symlink %s", path)
                continue
            if path.is_file() and path.name.endswith(MARKDOWN_SUFFIX):
                names.append(path.name)
        return tuple(sorted(names))

    def snapshot(self, relative: str) -> TargetSnapshot:
        """Capture the state of one target for a pure assertion.

        Filesystem errors are recorded in ``read_error`` instead of raised.
        """
        try:
            if self.is_dir(relative):
                return TargetSnapshot(
                    relative_path=relative,
                    exists=True,
                    is_dir=True,
                    entries=self._list_markdown(relative),
                )
            if not self.exists(relative):
                return TargetSnapshot(relative_path=relative, exists=False)
            if not self.is_file(relative):
                return TargetSnapshot(
                    relative_path=relative, exists=True, read_error="not a regular file"
                )
            text = self.read_text(relative)
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Could not read %s: %s", relative, e)
            is_dir = self._probe_is_dir(relative)
            return TargetSnapshot(relative_path=relative, exists=True, is_dir=is_dir, read_error=str(e))

        return TargetSnapshot(relative_path=relative, exists=True, text=text)

    def _probe_is_dir(self, relative: str) -> bool:
        try:
            return self.is_dir(relative)
        except OSError:
            return False
