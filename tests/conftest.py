"""
Test fixtures and utilities for framework validator tests.

This module provides reusable fixtures for testing the framework validator,
including temporary framework trees in both layouts, agent/command files,
and helper functions.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

import pytest

from csf.config.framework_config import FrameworkConfig, load_framework_config
from csf.validator.mode import ExecutionContext, ExecutionMode
from csf.validator.orchestrator import CheckOutcome, CheckStatus
from csf.validator.reader import FrameworkReader
from csf.tools.validate_framework import main

# ============================================================================
# Framework Content
# ============================================================================

CLAUDE_MD = """# Specification-First Development Workflow

## Core Principles
- Specifications before implementation
- Test-driven approach

## Workflow
1. Specification Phase
2. Test Phase
3. Implementation Phase

## Instructions for Claude
- Always ask clarifying questions
"""

README_MD = """# Spec-First Framework

## Quick Start
Run /spec-init to begin.

## Command Reference
See commands/.
"""


def agent_text(name: str, tools: Optional[str] = "[Read, Write, Edit]", fields: Optional[Dict[str, str]] = None) -> str:
    """Build an agent definition; ``fields`` replaces the default front matter."""
    if fields is None:
        fields = {"name": name, "description": f"Test agent {name} for framework validation"}
        if tools is not None:
            fields["tools"] = tools
    lines = ["---"] + [f"{key}: {value}" for key, value in fields.items()] + ["---", ""]
    lines.append(f"# {name} Agent")
    lines.append("Test agent content")
    return "\n".join(lines) + "\n"


def command_text(name: str, body: Optional[str] = None, description: Optional[str] = "Test command") -> str:
    """Build a command definition delegating to spec-analyst."""
    lines = ["---"]
    if description is not None:
        lines.append(f"description: {description}")
    lines += ["---", "", f"# {name} Command"]
    lines.append(body if body is not None else "Use spec-analyst $ARGUMENTS")
    return "\n".join(lines) + "\n"


def write_agent(root: Path, name: str, content: Optional[str] = None) -> Path:
    path = root / "agents" / f"{name}.md"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content if content is not None else agent_text(name))
    return path


def write_command(root: Path, name: str, content: Optional[str] = None) -> Path:
    path = root / "commands" / f"{name}.md"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content if content is not None else command_text(name))
    return path


def build_framework(root: Path, config: FrameworkConfig) -> Path:
    """Write a complete, valid framework for ``config`` into ``root``."""
    root.mkdir(parents=True, exist_ok=True)
    (root / "CLAUDE.md").write_text(CLAUDE_MD)
    (root / "README.md").write_text(README_MD)

    for agent in config.required_agents:
        write_agent(root, agent)
    for command in config.required_commands:
        write_command(root, command)

    (root / "examples").mkdir(exist_ok=True)
    (root / "examples" / "sample-feature.md").write_text("# Sample feature walkthrough\n")

    templates = root / "templates"
    templates.mkdir(exist_ok=True)
    for subdir in config.template_dirs:
        (templates / subdir).mkdir(exist_ok=True)
    for template in config.core_templates:
        (templates / template).write_text(f"# {template}\n")
    return root


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def config() -> FrameworkConfig:
    """Packaged default configuration (six agents, six commands)."""
    return load_framework_config()


@pytest.fixture
def small_config() -> FrameworkConfig:
    """Reduced configuration for focused tests."""
    return FrameworkConfig(
        required_agents=("spec-analyst", "qa-validator"),
        required_commands=("spec-init", "qa-check"),
        valid_tools=("Read", "Write", "Edit", "Bash", "Grep", "Glob"),
        argument_placeholder="$ARGUMENTS",
        required_phrases=("Specification-First Development",),
        required_sections=("Core Principles", "Workflow", "Instructions for Claude"),
        readme_sections=("Quick Start", "Command Reference"),
        template_dirs=("technical",),
        core_templates=("documentation-structure.md",),
        source="tests",
    )


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep developer environment overrides out of the tests."""
    monkeypatch.delenv("CSF_VALIDATOR_CONFIG", raising=False)
    monkeypatch.delenv("CSF_VALID_TOOLS", raising=False)


# ============================================================================
# Framework Tree Fixtures
# ============================================================================


@pytest.fixture
def installed_framework(tmp_path, config) -> Path:
    """A complete framework in installed layout (CLAUDE.md at the root)."""
    return build_framework(tmp_path / "installed", config)


@pytest.fixture
def repository_checkout(tmp_path, config) -> Path:
    """A complete framework in repository layout (under framework/)."""
    checkout = tmp_path / "checkout"
    build_framework(checkout / "framework", config)
    return checkout


@pytest.fixture
def small_framework(tmp_path, small_config) -> Path:
    """A complete framework for ``small_config`` in installed layout."""
    return build_framework(tmp_path / "small", small_config)


@pytest.fixture
def installed_context(small_framework) -> ExecutionContext:
    return ExecutionContext(mode=ExecutionMode.INSTALLED, root=small_framework)


@pytest.fixture
def reader(installed_context) -> FrameworkReader:
    return FrameworkReader(installed_context)


# ============================================================================
# CLI Fixture
# ============================================================================


@dataclass
class CliResult:
    returncode: int
    stdout: str
    stderr: str


@pytest.fixture
def run_validator(capsys):
    """
    Fixture that returns a function to run the validator on a given directory.

    Returns:
        Function(path, flags=[]) -> CliResult
    """
    def _run(path: Path, flags: Optional[List[str]] = None) -> CliResult:
        argv = ["-C", str(path)] + (flags or [])
        returncode = main(argv)
        captured = capsys.readouterr()
        return CliResult(returncode=returncode, stdout=captured.out, stderr=captured.err)

    return _run


# ============================================================================
# Assertion Helpers
# ============================================================================


def outcome_for(outcomes: Sequence[CheckOutcome], check_id: str) -> CheckOutcome:
    matches = [outcome for outcome in outcomes if outcome.check_id == check_id]
    assert len(matches) == 1, f"Expected exactly one outcome for {check_id}, got {len(matches)}"
    return matches[0]


def assert_status(outcomes: Sequence[CheckOutcome], check_id: str, status: CheckStatus):
    """Assert that a check produced the given status."""
    outcome = outcome_for(outcomes, check_id)
    assert outcome.status is status, f"{check_id}: expected {status.value}, got {outcome.status.value} ({outcome.message})"


def failed_ids(outcomes: Iterable[CheckOutcome]) -> List[str]:
    return [outcome.check_id for outcome in outcomes if outcome.status is CheckStatus.FAIL]


def assert_validator_passed(result: CliResult):
    """Assert that validator passed (exit code 0)."""
    assert result.returncode == 0, f"Validator failed. Stdout: {result.stdout}\nStderr: {result.stderr}"


def assert_validator_failed(result: CliResult):
    """Assert that validator reported failed checks (exit code 2)."""
    assert result.returncode == 2, f"Expected exit 2, got {result.returncode}. Stdout: {result.stdout}"


def assert_fail_line(stdout: str, check_id: str):
    """Assert that stdout contains a FAIL line for the check."""
    assert any(
        line.startswith("[FAIL]") and f" {check_id} " in line for line in stdout.splitlines()
    ), f"Expected [FAIL] line for {check_id}. Got: {stdout}"
