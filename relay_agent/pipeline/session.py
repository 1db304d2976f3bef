"""Assistant session mode tracking."""

from dataclasses import dataclass, field

from relay_agent.pipeline.router import CommandRouter
from relay_agent.pipeline.types import RoutingTarget

ASSISTANT_MARKERS: tuple[str, ...] = (
    "Claude Code",
    "/bug",
    "/clear",
    "/compact",
    "/config",
    "/cost",
    "/doctor",
    "/help",
    "/init",
    "/login",
    "/logout",
    "/pr_comments",
    "/review",
    "/terminal-setup",
)

MAX_ASSISTANT_HISTORY = 50


@dataclass(slots=True)
class AssistantSession:
    """Caller-level state layered on top of the stateless router."""

    assistant_mode: bool = False
    history: list[str] = field(default_factory=list)

    def enter_assistant_mode(self) -> None:
        self.assistant_mode = True

    def exit_assistant_mode(self) -> None:
        self.assistant_mode = False

    def observe_output(self, buffer: str) -> bool:
        """Switch into assistant mode when the assistant CLI shows up in output.

        Observation only ever turns the mode on.
        """
        if not self.assistant_mode and any(marker in buffer for marker in ASSISTANT_MARKERS):
            self.assistant_mode = True
        return self.assistant_mode

    def route(self, router: CommandRouter, instruction: str) -> RoutingTarget:
        if self.assistant_mode:
            return RoutingTarget.ASSISTANT_TASK
        return router.route(instruction)

    def track(self, instruction: str) -> None:
        self.history.append(instruction)
        if len(self.history) > MAX_ASSISTANT_HISTORY:
            del self.history[0]
