"""Check catalog: every validation check, in run order.

The catalog is a static table whose per-item part is expanded from the
agent, command and example files actually present. Check shapes are fixed:

- Structure: root files and directories (fatal checks first)
- Agent: seven checks per discovered agent file
- Command: six checks per discovered command file
- Integration: CLAUDE.md sections and cross-component wiring
- Documentation: README, examples and templates

Assertions are pure: they receive a TargetSnapshot and return None when the
check holds, or a problem string when it does not.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import TYPE_CHECKING, Callable, Iterable, List, Optional, Sequence, Tuple

from csf.validator.errors import FrontmatterError, SecurityError
from csf.validator.frontmatter import Frontmatter, parse_frontmatter, parse_tools
from csf.validator.path_security import Rejected, validate_path
from csf.validator.reader import MARKDOWN_SUFFIX, FrameworkReader, TargetSnapshot

if TYPE_CHECKING:
    from csf.config.framework_config import FrameworkConfig

logger = logging.getLogger(__name__)

ROOT_INSTRUCTIONS = "CLAUDE.md"
AGENTS_DIR = "agents"
COMMANDS_DIR = "commands"
EXAMPLES_DIR = "examples"
TEMPLATES_DIR = "templates"
README = "README.md"

Assertion = Callable[[TargetSnapshot], Optional[str]]


class Category(str, Enum):
    """Check categories, declared in run order."""

    STRUCTURE = "structure"
    AGENT = "agent"
    COMMAND = "command"
    INTEGRATION = "integration"
    DOCUMENTATION = "documentation"


class Severity(str, Enum):
    """Fixed at authoring time; CRITICAL failures fail the run."""

    CRITICAL = "critical"
    WARNING = "warning"


@dataclass(frozen=True)
class CheckDefinition:
    """One atomic assertion against one target.

    Attributes:
        check_id: Stable identifier, e.g. ``agent:spec-analyst:description``.
        category: Check category.
        target: Path relative to the framework root.
        description: Human-readable statement of what must hold.
        assertion: Pure function over the target snapshot.
        severity: CRITICAL or WARNING.
        fix: Suggested corrective action.
        fatal: A failure stops the run after the fatal Structure checks.
    """

    check_id: str
    category: Category
    target: str
    description: str
    assertion: Assertion = field(compare=False, repr=False)
    severity: Severity = Severity.CRITICAL
    fix: str = ""
    fatal: bool = False

    def __post_init__(self) -> None:
        verdict = validate_path(self.target)
        if isinstance(verdict, Rejected):
            logger.debug("Check %s has unsafe target %r: %s", self.check_id, self.target, verdict.reason)
            raise SecurityError(verdict.path, verdict.reason)


@dataclass(frozen=True)
class Discovery:
    """Markdown stems found under the per-item directories (sorted)."""

    agents: Tuple[str, ...] = ()
    commands: Tuple[str, ...] = ()
    examples: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Catalog:
    """Ordered check definitions plus the discovery they were expanded from."""

    checks: Tuple[CheckDefinition, ...]
    discovery: Discovery

    def by_category(self, category: Category) -> Tuple[CheckDefinition, ...]:
        return tuple(check for check in self.checks if check.category is category)


# ============================================================================
# Assertions
# ============================================================================


def _slug(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


def _stems(names: Iterable[str]) -> Tuple[str, ...]:
    return tuple(name[: -len(MARKDOWN_SUFFIX)] for name in names if name.endswith(MARKDOWN_SUFFIX))


def _require_text(snapshot: TargetSnapshot) -> Tuple[Optional[str], Optional[str]]:
    """Return (text, problem) for a file target."""
    if not snapshot.exists:
        return None, f"{snapshot.relative_path} does not exist"
    if snapshot.is_dir:
        return None, f"{snapshot.relative_path} is a directory, expected a file"
    if snapshot.text is None:
        return None, f"{snapshot.relative_path} is not readable: {snapshot.read_error}"
    return snapshot.text, None


def _require_frontmatter(snapshot: TargetSnapshot) -> Tuple[Optional[Frontmatter], Optional[str]]:
    text, problem = _require_text(snapshot)
    if problem:
        return None, problem
    try:
        return parse_frontmatter(text), None
    except FrontmatterError as e:
        return None, f"{snapshot.relative_path} front matter unavailable: {e}"


def _has_heading(text: str, title: str) -> bool:
    pattern = re.compile(r"^#{1,6}\s+" + re.escape(title), re.MULTILINE)
    return pattern.search(text) is not None


def _mentions_any(text: str, names: Sequence[str]) -> List[str]:
    found = []
    for name in names:
        if re.search(r"(?<![\w-])" + re.escape(name) + r"(?![\w-])", text):
            found.append(name)
    return found


def file_non_empty(snapshot: TargetSnapshot) -> Optional[str]:
    text, problem = _require_text(snapshot)
    if problem:
        return problem
    if not text.strip():
        return f"{snapshot.relative_path} is empty"
    return None


def directory_exists(snapshot: TargetSnapshot) -> Optional[str]:
    if not snapshot.exists:
        return f"{snapshot.relative_path}/ directory does not exist"
    if not snapshot.is_dir:
        return f"{snapshot.relative_path} is not a directory"
    if snapshot.read_error:
        return f"{snapshot.relative_path}/ is not readable: {snapshot.read_error}"
    return None


def directory_populated(snapshot: TargetSnapshot) -> Optional[str]:
    problem = directory_exists(snapshot)
    if problem:
        return problem
    if not snapshot.entries:
        return f"{snapshot.relative_path}/ contains no markdown files"
    return None


def file_exists(snapshot: TargetSnapshot) -> Optional[str]:
    if not snapshot.is_file:
        return f"{snapshot.relative_path} does not exist"
    return None


def frontmatter_parses(snapshot: TargetSnapshot) -> Optional[str]:
    _, problem = _require_frontmatter(snapshot)
    return problem


def name_matches_file(snapshot: TargetSnapshot) -> Optional[str]:
    fm, problem = _require_frontmatter(snapshot)
    if problem:
        return problem
    name = fm.get_stripped("name")
    if not name:
        return f"{snapshot.relative_path} missing required field 'name'"
    if name != snapshot.stem:
        return f"{snapshot.relative_path} 'name' field '{name}' does not match filename '{snapshot.stem}'"
    return None


def has_description(snapshot: TargetSnapshot) -> Optional[str]:
    fm, problem = _require_frontmatter(snapshot)
    if problem:
        return problem
    if not fm.get_stripped("description"):
        return f"{snapshot.relative_path} missing required field 'description'"
    return None


def declares_tools(snapshot: TargetSnapshot) -> Optional[str]:
    fm, problem = _require_frontmatter(snapshot)
    if problem:
        return problem
    if not parse_tools(fm.fields.get("tools")):
        return f"{snapshot.relative_path} declares no 'tools' (optional but recommended)"
    return None


def tools_allowed(snapshot: TargetSnapshot, valid_tools: Tuple[str, ...] = ()) -> Optional[str]:
    fm, problem = _require_frontmatter(snapshot)
    if problem:
        return problem
    invalid = [tool for tool in parse_tools(fm.fields.get("tools")) if tool not in valid_tools]
    if invalid:
        return (
            f"{snapshot.relative_path} declares unapproved tools {invalid} "
            f"(allowed: {', '.join(valid_tools) or 'none'})"
        )
    return None


def agent_content(snapshot: TargetSnapshot) -> Optional[str]:
    fm, problem = _require_frontmatter(snapshot)
    if problem:
        return problem
    if not fm.body.strip():
        return f"{snapshot.relative_path} has an empty body"
    if not re.search(r"^# \S", fm.body, re.MULTILINE):
        return f"{snapshot.relative_path} body has no top-level '# ' heading"
    return None


def command_content(snapshot: TargetSnapshot) -> Optional[str]:
    fm, problem = _require_frontmatter(snapshot)
    if problem:
        return problem
    if not fm.body.strip():
        return f"{snapshot.relative_path} has an empty body"
    return None


def uses_placeholder(snapshot: TargetSnapshot, placeholder: str = "$ARGUMENTS") -> Optional[str]:
    fm, problem = _require_frontmatter(snapshot)
    if problem:
        return problem
    if placeholder not in fm.body:
        return f"{snapshot.relative_path} body does not use the {placeholder} placeholder"
    return None


def references_agent(snapshot: TargetSnapshot, agent_names: Tuple[str, ...] = ()) -> Optional[str]:
    text, problem = _require_text(snapshot)
    if problem:
        return problem
    if not _mentions_any(text, agent_names):
        return f"{snapshot.relative_path} does not delegate to any known agent"
    return None


def contains_phrase(snapshot: TargetSnapshot, phrase: str = "") -> Optional[str]:
    text, problem = _require_text(snapshot)
    if problem:
        return problem
    if phrase not in text:
        return f"{snapshot.relative_path} does not mention '{phrase}'"
    return None


def has_section(snapshot: TargetSnapshot, title: str = "") -> Optional[str]:
    text, problem = _require_text(snapshot)
    if problem:
        return problem
    if not _has_heading(text, title):
        return f"{snapshot.relative_path} has no '{title}' section"
    return None


def contains_all(snapshot: TargetSnapshot, names: Tuple[str, ...] = (), kind: str = "file") -> Optional[str]:
    problem = directory_exists(snapshot)
    if problem:
        return problem
    missing = [name for name in names if f"{name}{MARKDOWN_SUFFIX}" not in snapshot.entries]
    if missing:
        return f"{snapshot.relative_path}/ is missing required {kind} files: {', '.join(missing)}"
    return None


def commands_reference_agents(snapshot: TargetSnapshot, texts: Tuple[str, ...] = (), agent_names: Tuple[str, ...] = ()) -> Optional[str]:
    problem = directory_populated(snapshot)
    if problem:
        return problem
    if not any(_mentions_any(text, agent_names) for text in texts):
        return f"no file in {snapshot.relative_path}/ references a known agent"
    return None


# ============================================================================
# Discovery and expansion
# ============================================================================


def discover(reader: FrameworkReader) -> Discovery:
    """Find the agent, command and example files that are present."""
    discovery = Discovery(
        agents=_stems(reader.list_markdown(AGENTS_DIR)),
        commands=_stems(reader.list_markdown(COMMANDS_DIR)),
        examples=_stems(reader.list_markdown(EXAMPLES_DIR)),
    )
    logger.debug(
        "Discovered %d agents, %d commands, %d examples",
        len(discovery.agents),
        len(discovery.commands),
        len(discovery.examples),
    )
    return discovery


def structure_checks() -> List[CheckDefinition]:
    """Root files and directories. Fatal checks come first."""
    return [
        CheckDefinition(
            "structure:root-instructions",
            Category.STRUCTURE,
            ROOT_INSTRUCTIONS,
            "CLAUDE.md exists and is not empty",
            file_non_empty,
            fix="Create CLAUDE.md at the framework root",
            fatal=True,
        ),
        CheckDefinition(
            "structure:agents-dir",
            Category.STRUCTURE,
            AGENTS_DIR,
            "agents/ directory exists",
            directory_exists,
            fix="Create the agents/ directory",
            fatal=True,
        ),
        CheckDefinition(
            "structure:commands-dir",
            Category.STRUCTURE,
            COMMANDS_DIR,
            "commands/ directory exists",
            directory_exists,
            fix="Create the commands/ directory",
            fatal=True,
        ),
        CheckDefinition(
            "structure:agents-populated",
            Category.STRUCTURE,
            AGENTS_DIR,
            "agents/ contains agent definitions",
            directory_populated,
            fix="Add at least one agents/<name>.md definition",
        ),
        CheckDefinition(
            "structure:commands-populated",
            Category.STRUCTURE,
            COMMANDS_DIR,
            "commands/ contains command definitions",
            directory_populated,
            fix="Add at least one commands/<name>.md definition",
        ),
    ]


def agent_checks(agent: str, config: FrameworkConfig) -> List[CheckDefinition]:
    """The fixed per-agent check set."""
    target = f"{AGENTS_DIR}/{agent}{MARKDOWN_SUFFIX}"
    prefix = f"agent:{agent}"
    return [
        CheckDefinition(
            f"{prefix}:exists", Category.AGENT, target,
            f"{agent}.md exists", file_non_empty,
            fix=f"Create {target} with front matter and a prompt body",
        ),
        CheckDefinition(
            f"{prefix}:frontmatter", Category.AGENT, target,
            f"{agent} has YAML front matter", frontmatter_parses,
            fix="Open the file with '---', close the block with '---', use 'key: value' lines",
        ),
        CheckDefinition(
            f"{prefix}:name", Category.AGENT, target,
            f"{agent} has correct name field", name_matches_file,
            fix=f"Add `name: {agent}` to front matter",
        ),
        CheckDefinition(
            f"{prefix}:description", Category.AGENT, target,
            f"{agent} has description field", has_description,
            fix="Add `description: <one-line description>` to front matter",
        ),
        CheckDefinition(
            f"{prefix}:tools-declared", Category.AGENT, target,
            f"{agent} declares tools", declares_tools,
            severity=Severity.WARNING,
            fix="Add `tools: [Read, Grep, Glob]` (or the tools the agent needs)",
        ),
        CheckDefinition(
            f"{prefix}:tools-allowed", Category.AGENT, target,
            f"{agent} tools are approved", partial(tools_allowed, valid_tools=config.valid_tools),
            fix=f"Use only: {', '.join(config.valid_tools)}",
        ),
        CheckDefinition(
            f"{prefix}:content", Category.AGENT, target,
            f"{agent} has proper content structure", agent_content,
            fix="Add a '# <Agent Title>' heading and prompt text after the front matter",
        ),
    ]


def command_checks(command: str, agent_names: Tuple[str, ...], config: FrameworkConfig) -> List[CheckDefinition]:
    """The fixed per-command check set."""
    target = f"{COMMANDS_DIR}/{command}{MARKDOWN_SUFFIX}"
    prefix = f"command:{command}"
    placeholder = config.argument_placeholder
    return [
        CheckDefinition(
            f"{prefix}:exists", Category.COMMAND, target,
            f"{command}.md exists", file_non_empty,
            fix=f"Create {target} with front matter and instructions",
        ),
        CheckDefinition(
            f"{prefix}:frontmatter", Category.COMMAND, target,
            f"{command} has YAML front matter", frontmatter_parses,
            fix="Open the file with '---', close the block with '---', use 'key: value' lines",
        ),
        CheckDefinition(
            f"{prefix}:description", Category.COMMAND, target,
            f"{command} has description field", has_description,
            fix="Add `description: <one-line description>` to front matter",
        ),
        CheckDefinition(
            f"{prefix}:content", Category.COMMAND, target,
            f"{command} has instructions", command_content,
            fix="Add command instructions after the front matter",
        ),
        CheckDefinition(
            f"{prefix}:arguments-placeholder", Category.COMMAND, target,
            f"{command} uses {placeholder} placeholder", partial(uses_placeholder, placeholder=placeholder),
            fix=f"Pass user input through with {placeholder} in the command body",
        ),
        CheckDefinition(
            f"{prefix}:agent-reference", Category.COMMAND, target,
            f"{command} delegates to agents", partial(references_agent, agent_names=agent_names),
            severity=Severity.WARNING,
            fix="Name the agent this command delegates to",
        ),
    ]


def integration_checks(
    reader: FrameworkReader,
    discovery: Discovery,
    agent_names: Tuple[str, ...],
    config: FrameworkConfig,
) -> List[CheckDefinition]:
    """CLAUDE.md structure and cross-component wiring."""
    checks: List[CheckDefinition] = []

    for phrase in config.required_phrases:
        checks.append(CheckDefinition(
            f"integration:phrase:{_slug(phrase)}", Category.INTEGRATION, ROOT_INSTRUCTIONS,
            f"CLAUDE.md contains '{phrase}'", partial(contains_phrase, phrase=phrase),
            fix=f"Describe the framework as '{phrase}' in CLAUDE.md",
        ))

    for title in config.required_sections:
        checks.append(CheckDefinition(
            f"integration:section:{_slug(title)}", Category.INTEGRATION, ROOT_INSTRUCTIONS,
            f"CLAUDE.md has '{title}' section", partial(has_section, title=title),
            fix=f"Add a '## {title}' section to CLAUDE.md",
        ))

    command_texts = tuple(
        reader.snapshot(f"{COMMANDS_DIR}/{command}{MARKDOWN_SUFFIX}").text or ""
        for command in discovery.commands
    )
    checks.append(CheckDefinition(
        "integration:commands-reference-agents", Category.INTEGRATION, COMMANDS_DIR,
        "Commands integrate with agents",
        partial(commands_reference_agents, texts=command_texts, agent_names=agent_names),
        fix="Reference at least one agent by name from a command",
    ))
    checks.append(CheckDefinition(
        "integration:required-agents", Category.INTEGRATION, AGENTS_DIR,
        "All required agents are present",
        partial(contains_all, names=config.required_agents, kind="agent"),
        fix="Add the missing agents/<name>.md definitions",
    ))
    checks.append(CheckDefinition(
        "integration:workflow-chain", Category.INTEGRATION, COMMANDS_DIR,
        "Complete workflow chain available",
        partial(contains_all, names=config.required_commands, kind="command"),
        fix="Add the missing commands/<name>.md definitions",
    ))
    return checks


def documentation_checks(discovery: Discovery, config: FrameworkConfig) -> List[CheckDefinition]:
    """README, examples and templates."""
    checks: List[CheckDefinition] = [
        CheckDefinition(
            "documentation:readme", Category.DOCUMENTATION, README,
            "README.md exists", file_non_empty,
            fix="Add a README.md describing the framework",
        ),
    ]

    for title in config.readme_sections:
        checks.append(CheckDefinition(
            f"documentation:readme-section:{_slug(title)}", Category.DOCUMENTATION, README,
            f"README.md mentions '{title}'", partial(contains_phrase, phrase=title),
            fix=f"Document '{title}' in README.md",
        ))

    checks.append(CheckDefinition(
        "documentation:examples", Category.DOCUMENTATION, EXAMPLES_DIR,
        "examples/ contains examples", directory_populated,
        severity=Severity.WARNING,
        fix="Add worked examples under examples/",
    ))
    for example in discovery.examples:
        checks.append(CheckDefinition(
            f"documentation:example:{example}", Category.DOCUMENTATION,
            f"{EXAMPLES_DIR}/{example}{MARKDOWN_SUFFIX}",
            f"example {example}.md is not empty", file_non_empty,
            severity=Severity.WARNING,
            fix="Fill in the example or remove it",
        ))

    checks.append(CheckDefinition(
        "documentation:templates", Category.DOCUMENTATION, TEMPLATES_DIR,
        "templates/ directory exists", directory_exists,
        severity=Severity.WARNING,
        fix="Add templates/ (used by documentation generation)",
    ))
    for subdir in config.template_dirs:
        checks.append(CheckDefinition(
            f"documentation:template-dir:{subdir}", Category.DOCUMENTATION,
            f"{TEMPLATES_DIR}/{subdir}",
            f"templates/{subdir}/ directory exists", directory_exists,
            severity=Severity.WARNING,
            fix=f"Add templates/{subdir}/",
        ))
    for template in config.core_templates:
        checks.append(CheckDefinition(
            f"documentation:template:{template}", Category.DOCUMENTATION,
            f"{TEMPLATES_DIR}/{template}",
            f"{template} template exists", file_exists,
            severity=Severity.WARNING,
            fix=f"Add templates/{template}",
        ))
    return checks


def build_catalog(reader: FrameworkReader, config: FrameworkConfig) -> Catalog:
    """Discover per-item files and expand the full, ordered catalog."""
    discovery = discover(reader)
    agent_names = tuple(sorted(set(discovery.agents) | set(config.required_agents)))

    checks: List[CheckDefinition] = []
    checks.extend(structure_checks())
    for agent in discovery.agents:
        checks.extend(agent_checks(agent, config))
    for command in discovery.commands:
        checks.extend(command_checks(command, agent_names, config))
    checks.extend(integration_checks(reader, discovery, agent_names, config))
    checks.extend(documentation_checks(discovery, config))

    logger.debug("Catalog expanded to %d checks", len(checks))
    return Catalog(checks=tuple(checks), discovery=discovery)
