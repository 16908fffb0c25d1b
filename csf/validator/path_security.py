"""Path security rules and the safe path builder.

Every filesystem read performed by a check goes through build_safe_path().
Rejection rules, checked in this order:

- ``..`` anywhere (traversal)
- ``//`` anywhere (doubled separator)
- ``/./`` anywhere (dot segment)
- a null byte
- any of the shell metacharacters ``;`` ``|`` backtick ``$``

Candidates are never normalised. A rejected candidate aborts the run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Tuple, Union

from csf.validator.errors import SecurityError

if TYPE_CHECKING:
    from csf.validator.mode import ExecutionContext

logger = logging.getLogger(__name__)

SHELL_METACHARACTERS = (";", "|", "`", "$")

# (substring, reason) pairs, checked in order so the reported reason is stable
_FORBIDDEN_SUBSTRINGS: Tuple[Tuple[str, str], ...] = (
    ("..", "path traversal sequence '..'"),
    ("//", "doubled separator '//'"),
    ("/./", "dot segment '/./'"),
    ("\x00", "null byte"),
) + tuple(
    (char, f"shell metacharacter {char!r}") for char in SHELL_METACHARACTERS
)


@dataclass(frozen=True)
class Accepted:
    """Candidate passed every rule; ``path`` is the unchanged input."""

    path: str

    @property
    def accepted(self) -> bool:
        return True


@dataclass(frozen=True)
class Rejected:
    """Candidate broke a rule."""

    path: str
    reason: str

    @property
    def accepted(self) -> bool:
        return False


SecurityVerdict = Union[Accepted, Rejected]


def validate_path(candidate: Any) -> SecurityVerdict:
    """Decide whether a relative path candidate is safe to use.

    Total over all inputs: never raises, always returns a verdict.

    Examples:
        >>> validate_path("agents/spec-analyst.md")
        Accepted(path='agents/spec-analyst.md')
        >>> validate_path("framework/../etc/passwd").accepted
        False
    """
    if not isinstance(candidate, str):
        return Rejected(path=repr(candidate), reason="path is not a string")

    for needle, reason in _FORBIDDEN_SUBSTRINGS:
        if needle in candidate:
            return Rejected(path=candidate, reason=reason)

    return Accepted(path=candidate)


def build_safe_path(context: "ExecutionContext", relative: str) -> str:
    """Compose the mode prefix with a relative path, or abort the run.

    Args:
        context: Execution context produced by mode detection.
        relative: Path relative to the framework root.

    Returns:
        ``context.prefix + relative``, unchanged.

    Raises:
        SecurityError: If the composed path is rejected.
    """
    verdict = validate_path(context.prefix + relative)
    if isinstance(verdict, Rejected):
        logger.debug("Rejected path %r: %s", verdict.path, verdict.reason)
        raise SecurityError(verdict.path, verdict.reason)
    return verdict.path
