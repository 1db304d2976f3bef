"""Turn captured terminal output into prompts for the classifier."""

import re
from typing import Iterable, Optional

from relay_agent.pipeline.catalog import DEFAULT_CATALOG, PromptPatternCatalog
from relay_agent.pipeline.types import ClassifiedPrompt, SourceContext

PROMPT_TRIGGERS: tuple[str, ...] = (
    "Do you want to",
    "Would you like to",
    "Proceed with",
    "Continue with",
    "Are you sure",
    "[y/n]",
    "(y/n)",
    "yes/no",
    "Please select:",
    "Enter your API key",
    "provide your password",
    "Authentication token",
    "Delete file",
    "Remove file",
    "Force push",
)

# Checked in order; the first marker present in the buffer wins.
CONTEXT_MARKERS: tuple[tuple[str, SourceContext], ...] = (
    ("claude init", SourceContext.INITIALIZATION),
    ("claude commit", SourceContext.GIT_COMMIT),
    ("/review", SourceContext.CODE_REVIEW),
    ("/doctor", SourceContext.DIAGNOSTICS),
)

_BRACKET_OPTIONS = re.compile(r"\[([^\]]+)\]")
_PAREN_OPTIONS = re.compile(r"\(([^)]+)\)")


def last_non_empty_line(buffer: str) -> str:
    for line in reversed(buffer.splitlines()):
        if line.strip():
            return line
    return ""


def infer_source_context(buffer: str) -> SourceContext:
    for marker, context in CONTEXT_MARKERS:
        if marker in buffer:
            return context
    return SourceContext.GENERAL


def extract_possible_responses(line: str) -> tuple[str, ...]:
    """Pull option tokens out of ``[y/n]`` or ``(1/2/3)`` style groups.

    Square brackets take precedence over parentheses.
    """
    match = _BRACKET_OPTIONS.search(line) or _PAREN_OPTIONS.search(line)
    if match is None:
        return ()
    tokens = (token.strip() for token in match.group(1).split("/"))
    return tuple(token for token in tokens if token)


def build_prompt(
    line: str,
    context: SourceContext = SourceContext.GENERAL,
    catalog: PromptPatternCatalog = DEFAULT_CATALOG,
) -> ClassifiedPrompt:
    return ClassifiedPrompt(
        text=line,
        source_context=context,
        critical_impact=catalog.is_critical(line),
        possible_responses=extract_possible_responses(line),
    )


def extract_new_content(old_content: str, new_content: str) -> str:
    """Return the part of ``new_content`` not already seen in ``old_content``."""
    if new_content.startswith(old_content):
        return new_content[len(old_content):]

    old_lines = old_content.splitlines()
    new_lines = new_content.splitlines()
    diverge = 0
    limit = min(len(old_lines), len(new_lines))
    while diverge < limit and old_lines[diverge] == new_lines[diverge]:
        diverge += 1
    return "\n".join(new_lines[diverge:])


class PromptDetector:
    """Decides whether a terminal buffer currently ends in a prompt."""

    def __init__(
        self,
        catalog: PromptPatternCatalog = DEFAULT_CATALOG,
        triggers: Iterable[str] = PROMPT_TRIGGERS,
    ) -> None:
        self.catalog = catalog
        self.triggers = tuple(triggers)

    def is_prompt(self, line: str) -> bool:
        return any(trigger in line for trigger in self.triggers)

    def detect(self, buffer: str) -> Optional[ClassifiedPrompt]:
        """Build a prompt from the last non-empty line of the buffer.

        Args:
            buffer: Raw captured terminal output.

        Returns:
            ClassifiedPrompt if the line looks like a prompt, None otherwise.
        """
        line = last_non_empty_line(buffer)
        if not line or not self.is_prompt(line):
            return None
        return build_prompt(line.strip(), infer_source_context(buffer), self.catalog)
