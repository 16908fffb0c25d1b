"""Result aggregation and report rendering.

summarize() folds the outcome sequence into a RunSummary; the renderers
below only read outcomes and summaries. Counts are always derived from the
same sequence the per-check lines are printed from.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from csf.validator.catalog import Category
from csf.validator.mode import ExecutionContext
from csf.validator.orchestrator import CheckOutcome, CheckStatus

# Process exit codes
EXIT_SUCCESS = 0
EXIT_FATAL_ERROR = 1
EXIT_VALIDATION_FAILED = 2

# Outcome line template: [STATUS] CATEGORY: check_id description
OUTCOME_TEMPLATE = "[{status}] {category}: {check_id} {description}"
STATUS_LABELS = {
    CheckStatus.PASS: "PASS",
    CheckStatus.FAIL: "FAIL",
    CheckStatus.WARN: "WARN",
}


@dataclass(frozen=True)
class RunSummary:
    """Aggregate over all outcomes of one run."""

    passed: int = 0
    failed: int = 0
    warnings: int = 0
    failed_checks: Tuple[str, ...] = ()
    warned_checks: Tuple[str, ...] = ()

    @property
    def total(self) -> int:
        return self.passed + self.failed + self.warnings

    @property
    def status(self) -> str:
        return "FAILED" if self.failed else "PASSED"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "warnings": self.warnings,
            "failed_checks": list(self.failed_checks),
            "warned_checks": list(self.warned_checks),
        }


def summarize(outcomes: Sequence[CheckOutcome]) -> RunSummary:
    """Tally outcomes by status, preserving run order in the id lists."""
    passed = 0
    failed: List[str] = []
    warned: List[str] = []
    for outcome in outcomes:
        if outcome.status is CheckStatus.PASS:
            passed += 1
        elif outcome.status is CheckStatus.FAIL:
            failed.append(outcome.check_id)
        else:
            warned.append(outcome.check_id)
    return RunSummary(
        passed=passed,
        failed=len(failed),
        warnings=len(warned),
        failed_checks=tuple(failed),
        warned_checks=tuple(warned),
    )


def exit_code(summary: RunSummary) -> int:
    """0 when nothing failed (warnings allowed), otherwise the failure code."""
    return EXIT_VALIDATION_FAILED if summary.failed else EXIT_SUCCESS


# ============================================================================
# Text
# ============================================================================


def format_outcome(outcome: CheckOutcome) -> str:
    """Format one outcome; non-passing outcomes carry the problem and fix."""
    line = OUTCOME_TEMPLATE.format(
        status=STATUS_LABELS[outcome.status],
        category=outcome.category.value.upper(),
        check_id=outcome.check_id,
        description=f"({outcome.description})",
    )
    if outcome.status is CheckStatus.PASS:
        return line
    line = f"{line}\n  {outcome.message}"
    if outcome.fix:
        line = f"{line}\n  Fix: {outcome.fix}"
    return line


def render_text(outcomes: Sequence[CheckOutcome], summary: RunSummary) -> str:
    """Per-check lines in run order followed by the summary block."""
    lines: List[str] = [format_outcome(outcome) for outcome in outcomes]

    lines.append("")
    lines.append("Validation Summary")
    lines.append("=" * 70)
    lines.append(f"Passed:   {summary.passed}")
    lines.append(f"Failed:   {summary.failed}")
    lines.append(f"Warnings: {summary.warnings}")

    if summary.failed_checks:
        lines.append("")
        lines.append(f"Failed checks ({summary.failed}):")
        for check_id in summary.failed_checks:
            lines.append(f"  - {check_id}")

    lines.append("")
    if summary.failed:
        lines.append(f"Framework validation FAILED ({summary.failed} critical issues).")
    else:
        lines.append("Framework validation PASSED.")
        if summary.warnings:
            lines.append(f"Note: {summary.warnings} warnings found (design guidelines, not errors).")
    return "\n".join(lines)


# ============================================================================
# JSON / Markdown
# ============================================================================


def _outcome_dict(outcome: CheckOutcome) -> Dict[str, Any]:
    return {
        "id": outcome.check_id,
        "category": outcome.category.value,
        "status": outcome.status.value,
        "description": outcome.description,
        "target": outcome.target,
        "message": outcome.message or None,
        "fix": outcome.fix or None,
    }


def build_report_json(
    outcomes: Sequence[CheckOutcome],
    summary: RunSummary,
    context: Optional[ExecutionContext] = None,
) -> Dict[str, Any]:
    """Machine-readable report with every outcome in run order."""
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        "mode": context.mode.value if context is not None else None,
        "summary": summary.to_dict(),
        "checks": [_outcome_dict(outcome) for outcome in outcomes],
    }


def build_report_markdown(
    outcomes: Sequence[CheckOutcome],
    summary: RunSummary,
    context: Optional[ExecutionContext] = None,
) -> str:
    """Human-readable markdown report grouped by category."""
    lines: List[str] = []

    lines.append("# Framework Validation Report")
    lines.append("")
    lines.append(f"**Timestamp**: {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S UTC')}")
    if context is not None:
        lines.append(f"**Mode**: {context.mode.value}")
    lines.append(f"**Status**: {summary.status}")
    lines.append(
        f"**Checks**: {summary.total} ({summary.passed} passed, "
        f"{summary.failed} failed, {summary.warnings} warnings)"
    )
    lines.append("")

    by_category: Dict[Category, List[CheckOutcome]] = defaultdict(list)
    for outcome in outcomes:
        by_category[outcome.category].append(outcome)

    for category in Category:
        category_outcomes = by_category.get(category)
        if not category_outcomes:
            continue
        lines.append(f"## {category.value.title()}")
        lines.append("")
        lines.append("| Check | Status | Detail |")
        lines.append("|-------|--------|--------|")
        for outcome in category_outcomes:
            detail = outcome.message.replace("|", "\\|") if outcome.message else ""
            lines.append(f"| {outcome.check_id} | {STATUS_LABELS[outcome.status]} | {detail} |")
        lines.append("")

    lines.append(f"## Failed Checks ({summary.failed})")
    lines.append("")
    if not summary.failed_checks:
        lines.append("_No failed checks._")
    else:
        for check_id in summary.failed_checks:
            lines.append(f"- {check_id}")

    return "\n".join(lines)
