"""Framework integrity validator.

Components, leaves first:

- path_security: path rules and the safe path builder
- mode: repository/installed mode detection
- reader: read-only framework file access
- frontmatter: YAML front-matter parsing
- catalog: check definitions and catalog expansion
- orchestrator: check execution
- report: aggregation, rendering and exit codes
"""

from csf.validator.catalog import (
    Catalog,
    Category,
    CheckDefinition,
    Discovery,
    Severity,
    build_catalog,
    discover,
)
from csf.validator.errors import (
    ConfigError,
    FrameworkValidationError,
    FrontmatterError,
    ModeDetectionError,
    SecurityError,
)
from csf.validator.frontmatter import Frontmatter, parse_frontmatter, parse_tools
from csf.validator.mode import ExecutionContext, ExecutionMode, detect_mode
from csf.validator.orchestrator import (
    CheckOutcome,
    CheckStatus,
    ValidatorRunner,
    execute_check,
    run_validation,
)
from csf.validator.path_security import (
    Accepted,
    Rejected,
    SecurityVerdict,
    build_safe_path,
    validate_path,
)
from csf.validator.reader import FrameworkReader, TargetSnapshot
from csf.validator.report import (
    EXIT_FATAL_ERROR,
    EXIT_SUCCESS,
    EXIT_VALIDATION_FAILED,
    RunSummary,
    exit_code,
    summarize,
)

__all__ = [
    "Accepted",
    "Catalog",
    "Category",
    "CheckDefinition",
    "CheckOutcome",
    "CheckStatus",
    "ConfigError",
    "Discovery",
    "EXIT_FATAL_ERROR",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_FAILED",
    "ExecutionContext",
    "ExecutionMode",
    "FrameworkReader",
    "FrameworkValidationError",
    "Frontmatter",
    "FrontmatterError",
    "ModeDetectionError",
    "Rejected",
    "RunSummary",
    "SecurityError",
    "SecurityVerdict",
    "Severity",
    "TargetSnapshot",
    "ValidatorRunner",
    "build_catalog",
    "build_safe_path",
    "detect_mode",
    "discover",
    "execute_check",
    "exit_code",
    "parse_frontmatter",
    "parse_tools",
    "run_validation",
    "summarize",
    "validate_path",
]
