# csf/validator/errors.py
"""Exception hierarchy for the framework validator.

Three fatal classes abort a run before (or instead of) reporting:

- SecurityError: a path candidate failed the path security rules
- ModeDetectionError: no framework root could be found from the working directory
- ConfigError: the validator configuration could not be loaded

FrontmatterError is never fatal; checks recover it into a failed outcome.
"""

from __future__ import annotations

from typing import Optional

# Error message template: ERROR: KIND: detail
ERROR_TEMPLATE = "ERROR: {kind}: {detail}"


class FrameworkValidationError(Exception):
    """Base class for errors that stop a validation run."""

    kind = "VALIDATOR"

    def format(self) -> str:
        """Format as the single line printed before exiting."""
        return ERROR_TEMPLATE.format(kind=self.kind, detail=str(self))


class SecurityError(FrameworkValidationError):
    """A path candidate was rejected by the path security validator."""

    kind = "SECURITY"

    def __init__(self, candidate: str, reason: str):
        self.candidate = candidate
        self.reason = reason
        super().__init__(f"rejected path {candidate!r}: {reason}")


class ModeDetectionError(FrameworkValidationError):
    """Neither repository nor installed layout was found."""

    kind = "MODE"

    def __init__(self, cwd: str, detail: Optional[str] = None):
        self.cwd = cwd
        message = (
            f"no framework found in {cwd}: expected framework/CLAUDE.md "
            f"(repository mode) or ./CLAUDE.md (installed mode)"
        )
        if detail:
            message = f"{message}; {detail}"
        super().__init__(message)


class ConfigError(FrameworkValidationError):
    """Validator configuration is missing or malformed."""

    kind = "CONFIG"


class FrontmatterError(ValueError):
    """Front-matter block is missing, unterminated or not a YAML mapping."""
