#!/usr/bin/env python3
"""
validate_framework.py - Framework integrity validator

Verifies that a spec-first agent/command framework is complete and
well-formed, without modifying anything.

## Execution Modes

Detected once from the working directory, first match wins:

  Repository   framework/CLAUDE.md exists  (paths resolve under framework/)
  Installed    ./CLAUDE.md exists          (paths resolve in place)

## What It Validates

**Structure**: CLAUDE.md, agents/ and commands/ exist; a missing root item
  stops the run after these checks
**Agent**: per agents/*.md: exists, front matter, name, description,
  tools declared (warning), tools approved, content structure
**Command**: per commands/*.md: exists, front matter, description, content,
  $ARGUMENTS placeholder, agent delegation (warning)
**Integration**: CLAUDE.md phrases and sections, commands reference agents,
  required agents and commands present
**Documentation**: README.md and its sections, examples/, templates/

## CLI Usage

  csf-validate
  csf-validate -C path/to/checkout
  csf-validate --report json
  csf-validate --config custom.yaml --debug

## Exit Codes

0   All critical checks passed (warnings permitted)
1   Fatal error (rejected path, no framework found, bad configuration)
2   One or more critical checks failed
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from csf import __version__
from csf.config.framework_config import load_framework_config
from csf.validator.errors import FrameworkValidationError
from csf.validator.mode import detect_mode
from csf.validator.orchestrator import ValidatorRunner
from csf.validator.report import (
    EXIT_FATAL_ERROR,
    build_report_json,
    build_report_markdown,
    exit_code,
    render_text,
    summarize,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="csf-validate",
        description="Framework integrity validator - check agents, commands and docs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit Codes:
  0 - All critical checks passed (warnings permitted)
  1 - Fatal error (rejected path, no framework found, bad configuration)
  2 - One or more critical checks failed

Examples:
  csf-validate
  csf-validate -C ~/.claude
  csf-validate --report markdown
        """
    )

    parser.add_argument(
        "-C", "--directory",
        type=Path,
        default=None,
        help="Run as if started in this directory"
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Validator configuration YAML (default: $CSF_VALIDATOR_CONFIG or packaged framework.yaml)"
    )

    parser.add_argument(
        "--report",
        choices=["text", "json", "markdown"],
        default="text",
        help="Output format for the validation report"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging with discovery counts and timing"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"csf-validate {__version__}"
    )

    return parser


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    configure_logging(args.debug)

    try:
        # Mode detection precedes every other filesystem access
        context = detect_mode(args.directory)
        config = load_framework_config(args.config)
        outcomes = ValidatorRunner(context, config).run()
    except FrameworkValidationError as e:
        print(e.format(), file=sys.stderr)
        return EXIT_FATAL_ERROR
    except Exception as e:
        print(f"ERROR: Unexpected error during validation: {e}", file=sys.stderr)
        if args.debug:
            import traceback
            traceback.print_exc(file=sys.stderr)
        return EXIT_FATAL_ERROR

    summary = summarize(outcomes)

    if args.report == "json":
        print(json.dumps(build_report_json(outcomes, summary, context), indent=2))
    elif args.report == "markdown":
        print(build_report_markdown(outcomes, summary, context))
    else:
        print(f"Validating framework ({context.mode.value} mode)")
        print(render_text(outcomes, summary))

    return exit_code(summary)


if __name__ == "__main__":
    sys.exit(main())
