"""Validation orchestrator.

Runs the check catalog against one execution context and returns the
ordered, append-only sequence of outcomes. Category order:

    structure -> agent -> command -> integration -> documentation

A failed fatal Structure check ends the run after the fatal group; every
other failure is recorded and the run continues, so one invocation lists
every problem. SecurityError is never recovered.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Tuple

from csf.validator.catalog import Catalog, Category, CheckDefinition, Severity, build_catalog
from csf.validator.errors import SecurityError
from csf.validator.mode import ExecutionContext, detect_mode
from csf.validator.reader import FrameworkReader

if TYPE_CHECKING:
    from csf.config.framework_config import FrameworkConfig

logger = logging.getLogger(__name__)


class CheckStatus(str, Enum):
    """Outcome of a single check."""

    PASS = "pass"
    FAIL = "fail"
    WARN = "warn"


@dataclass(frozen=True)
class CheckOutcome:
    """Result of executing one CheckDefinition, created once per run.

    Attributes:
        check_id: Identifier of the check that produced this outcome.
        category: Check category.
        status: PASS, FAIL or WARN.
        description: What the check asserts.
        message: Problem description for FAIL/WARN, empty for PASS.
        fix: Suggested corrective action for FAIL/WARN.
        target: Path the check inspected.
    """

    check_id: str
    category: Category
    status: CheckStatus
    description: str
    message: str = ""
    fix: str = ""
    target: str = ""


def execute_check(check: CheckDefinition, reader: FrameworkReader) -> CheckOutcome:
    """Run one check and map its verdict through its declared severity."""
    try:
        problem = check.assertion(reader.snapshot(check.target))
    except SecurityError:
        raise
    except Exception as e:
        logger.exception("Check %s raised", check.check_id)
        problem = f"check raised {type(e).__name__}: {e}"

    if problem is None:
        return CheckOutcome(
            check_id=check.check_id,
            category=check.category,
            status=CheckStatus.PASS,
            description=check.description,
            target=check.target,
        )

    status = CheckStatus.FAIL if check.severity is Severity.CRITICAL else CheckStatus.WARN
    return CheckOutcome(
        check_id=check.check_id,
        category=check.category,
        status=status,
        description=check.description,
        message=problem,
        fix=check.fix,
        target=check.target,
    )


class ValidatorRunner:
    """
    Orchestrates validation checks for a framework.

    Attributes:
        context: Execution context from mode detection
        config: Validator configuration (required components, allow-list)
        reader: Read-only filesystem access for the context
    """

    def __init__(self, context: ExecutionContext, config: Optional[FrameworkConfig] = None):
        self.context = context
        if config is None:
            # Lazy import: csf.config depends on csf.validator.errors
            from csf.config.framework_config import get_framework_config

            config = get_framework_config()
        self.config = config
        self.reader = FrameworkReader(context)

    def _run_checks(self, checks: Tuple[CheckDefinition, ...], outcomes: List[CheckOutcome]) -> int:
        failed = 0
        for check in checks:
            outcome = execute_check(check, self.reader)
            outcomes.append(outcome)
            if outcome.status is CheckStatus.FAIL:
                failed += 1
        return failed

    def run(self, catalog: Optional[Catalog] = None) -> Tuple[CheckOutcome, ...]:
        """
        Run every check in catalog order.

        Args:
            catalog: Pre-built catalog (built from the filesystem if omitted)

        Returns:
            Ordered tuple of outcomes
        """
        start_time = time.time()
        if catalog is None:
            catalog = build_catalog(self.reader, self.config)

        outcomes: List[CheckOutcome] = []

        structure = catalog.by_category(Category.STRUCTURE)
        fatal = tuple(check for check in structure if check.fatal)
        if self._run_checks(fatal, outcomes):
            logger.debug("Framework root is incomplete; skipping remaining checks")
            return tuple(outcomes)

        remaining_structure = tuple(check for check in structure if not check.fatal)
        self._run_checks(remaining_structure, outcomes)

        for category in list(Category)[1:]:
            checks = catalog.by_category(category)
            failed = self._run_checks(checks, outcomes)
            logger.debug("%s checks: %d run, %d failed", category.value, len(checks), failed)

        elapsed = time.time() - start_time
        logger.debug("Validation completed in %.3fs (%d checks)", elapsed, len(outcomes))
        return tuple(outcomes)


def run_validation(
    cwd: Optional[Path] = None,
    config: Optional[FrameworkConfig] = None,
) -> Tuple[ExecutionContext, Tuple[CheckOutcome, ...]]:
    """
    Detect the execution mode once and run all checks.

    Args:
        cwd: Directory to validate from (defaults to the working directory)
        config: Validator configuration (defaults to the packaged config)

    Returns:
        The detected context and the ordered outcomes

    Raises:
        ModeDetectionError: If no framework layout is found
        SecurityError: If any path is rejected
    """
    context = detect_mode(cwd)
    runner = ValidatorRunner(context, config)
    return context, runner.run()
