"""
Test suite for the csf-validate command line.

Covers both execution modes, the three exit codes, the fatal error lines
and the alternative report formats.
"""

import json
import os
from pathlib import Path

import pytest

from conftest import (
    agent_text,
    assert_fail_line,
    assert_validator_failed,
    assert_validator_passed,
    write_agent,
)
from csf import __version__
from csf.tools.validate_framework import main

# ============================================================================
# Exit 0: complete frameworks
# ============================================================================


def test_installed_framework_passes(installed_framework, run_validator):
    result = run_validator(installed_framework)

    assert_validator_passed(result)
    assert result.stdout.startswith("Validating framework (installed mode)")
    assert "Framework validation PASSED." in result.stdout
    assert "[FAIL]" not in result.stdout


def test_repository_checkout_passes(repository_checkout, run_validator):
    result = run_validator(repository_checkout)

    assert_validator_passed(result)
    assert "(repository mode)" in result.stdout


def test_both_modes_report_same_checks(installed_framework, repository_checkout, run_validator):
    installed = run_validator(installed_framework, ["--report", "json"])
    repository = run_validator(repository_checkout, ["--report", "json"])

    installed_ids = [c["id"] for c in json.loads(installed.stdout)["checks"]]
    repository_ids = [c["id"] for c in json.loads(repository.stdout)["checks"]]
    assert installed_ids == repository_ids


def test_warnings_do_not_fail(installed_framework, run_validator):
    write_agent(installed_framework, "spec-analyst", agent_text("spec-analyst", tools=None))

    result = run_validator(installed_framework)

    assert_validator_passed(result)
    assert "[WARN] AGENT: agent:spec-analyst:tools-declared" in result.stdout
    assert "warnings found" in result.stdout


# ============================================================================
# Exit 2: failed checks
# ============================================================================


def test_missing_description_reported(installed_framework, run_validator):
    write_agent(
        installed_framework,
        "spec-analyst",
        agent_text("spec-analyst", fields={"name": "spec-analyst", "tools": "[Read]"}),
    )

    result = run_validator(installed_framework)

    assert_validator_failed(result)
    assert_fail_line(result.stdout, "agent:spec-analyst:description")
    assert "Failed checks (1):" in result.stdout
    assert "Fix: Add `description:" in result.stdout


def test_missing_directories_short_circuit(tmp_path, run_validator):
    (tmp_path / "CLAUDE.md").write_text("# Specification-First Development\n")

    result = run_validator(tmp_path)

    assert_validator_failed(result)
    assert_fail_line(result.stdout, "structure:agents-dir")
    assert_fail_line(result.stdout, "structure:commands-dir")
    assert "AGENT:" not in result.stdout
    assert "Failed:   2" in result.stdout


def test_missing_required_agent(installed_framework, run_validator):
    (installed_framework / "agents" / "doc-synthesizer.md").unlink()

    result = run_validator(installed_framework)

    assert_validator_failed(result)
    assert_fail_line(result.stdout, "integration:required-agents")
    assert "doc-synthesizer" in result.stdout


def test_custom_config(installed_framework, tmp_path, run_validator):
    custom = tmp_path / "custom.yaml"
    custom.write_text("required_agents: [spec-analyst, extra-agent]\nvalid_tools: [Read, Write, Edit]\n")

    result = run_validator(installed_framework, ["--config", str(custom)])

    assert_validator_failed(result)
    assert_fail_line(result.stdout, "integration:required-agents")
    assert "extra-agent" in result.stdout


# ============================================================================
# Exit 1: fatal errors
# ============================================================================


def test_no_framework_found(tmp_path, run_validator):
    result = run_validator(tmp_path)

    assert result.returncode == 1
    assert result.stdout == ""
    assert "ERROR: MODE:" in result.stderr
    assert "framework/CLAUDE.md" in result.stderr
    assert "./CLAUDE.md" in result.stderr


def test_rejected_path_aborts_without_report(installed_framework, run_validator):
    write_agent(installed_framework, "..evil")

    result = run_validator(installed_framework)

    assert result.returncode == 1
    assert result.stdout == ""
    assert "ERROR: SECURITY:" in result.stderr
    assert "Validation Summary" not in result.stderr


def test_metacharacter_filename_aborts(installed_framework, run_validator):
    write_agent(installed_framework, "evil$name")

    result = run_validator(installed_framework)

    assert result.returncode == 1
    assert "shell metacharacter" in result.stderr


def test_unreadable_config(installed_framework, tmp_path, run_validator):
    result = run_validator(installed_framework, ["--config", str(tmp_path / "missing.yaml")])

    assert result.returncode == 1
    assert "ERROR: CONFIG:" in result.stderr


# ============================================================================
# Report formats and flags
# ============================================================================


def test_json_report(installed_framework, run_validator):
    (installed_framework / "README.md").write_text("# Framework\n")

    result = run_validator(installed_framework, ["--report", "json"])

    assert_validator_failed(result)
    report = json.loads(result.stdout)
    assert report["mode"] == "installed"
    assert report["summary"]["failed"] == len(report["summary"]["failed_checks"])
    assert "documentation:readme-section:quick-start" in report["summary"]["failed_checks"]


def test_markdown_report(installed_framework, run_validator):
    result = run_validator(installed_framework, ["--report", "markdown"])

    assert_validator_passed(result)
    assert result.stdout.startswith("# Framework Validation Report")
    assert "**Status**: PASSED" in result.stdout


def test_version(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["--version"])

    assert exc_info.value.code == 0
    assert __version__ in capsys.readouterr().out


def test_unknown_report_format_rejected(installed_framework, capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["-C", str(installed_framework), "--report", "xml"])

    assert exc_info.value.code == 2


def test_validator_is_read_only(installed_framework, run_validator):
    before = {p: p.read_bytes() for p in installed_framework.rglob("*") if p.is_file()}

    run_validator(installed_framework)

    after = {p: p.read_bytes() for p in installed_framework.rglob("*") if p.is_file()}
    assert before == after


# ============================================================================
# Unreadable directories
# ============================================================================


@pytest.mark.skipif(
    not hasattr(os, "geteuid") or os.geteuid() == 0,
    reason="permission bits are not enforced for root or on this platform",
)
def test_unreadable_agents_directory_is_a_failed_check(installed_framework, run_validator):
    agents = installed_framework / "agents"
    agents.chmod(0o000)
    try:
        result = run_validator(installed_framework)
    finally:
        agents.chmod(0o755)

    assert_validator_failed(result)
    assert_fail_line(result.stdout, "structure:agents-dir")
    assert "not readable" in result.stdout


def test_unlistable_agents_directory_is_reported_not_raised(installed_framework, run_validator, monkeypatch):
    original = Path.iterdir

    def guarded(self):
        if self.name == "agents":
            raise PermissionError(13, "Permission denied", str(self))
        return original(self)

    monkeypatch.setattr(Path, "iterdir", guarded)

    result = run_validator(installed_framework)

    assert_validator_failed(result)
    assert_fail_line(result.stdout, "structure:agents-dir")
    assert "Permission denied" in result.stdout
    assert "Unexpected error" not in result.stderr


def test_mode_detected_before_config_is_read(tmp_path, run_validator):
    result = run_validator(tmp_path, ["--config", str(tmp_path / "missing.yaml")])

    assert result.returncode == 1
    assert "ERROR: MODE:" in result.stderr
    assert "CONFIG" not in result.stderr
