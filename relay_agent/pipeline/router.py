"""Routing heuristic for free-text instructions."""

from typing import Iterable

from relay_agent.pipeline.types import RoutingTarget

ASSISTANT_PREFIXES: tuple[str, ...] = (
    "explain",
    "analyze",
    "summarize",
    "refactor",
    "optimize",
    "document",
    "find bug",
    "fix bug",
    "add test",
    "implement",
    "create function",
    "improve",
    "rewrite",
    "debug",
    "add comments",
)

CODE_KEYWORDS: tuple[str, ...] = (
    "function",
    "class",
    "method",
    "api",
    "interface",
    "code",
    "script",
)


class CommandRouter:
    """Sends an instruction either to the shell or to the coding assistant."""

    def __init__(
        self,
        prefixes: Iterable[str] = ASSISTANT_PREFIXES,
        keywords: Iterable[str] = CODE_KEYWORDS,
    ) -> None:
        self.prefixes = tuple(prefix.lower() for prefix in prefixes)
        self.keywords = tuple(keyword.lower() for keyword in keywords)

    def route(self, instruction: str) -> RoutingTarget:
        text = instruction.lower()
        if text.startswith(self.prefixes):
            return RoutingTarget.ASSISTANT_TASK
        if "how to" in text and any(keyword in text for keyword in self.keywords):
            return RoutingTarget.ASSISTANT_TASK
        return RoutingTarget.SHELL_COMMAND


_DEFAULT_ROUTER = CommandRouter()


def route(instruction: str) -> RoutingTarget:
    return _DEFAULT_ROUTER.route(instruction)
