"""Shared decision pipeline models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import ClassVar, Union


class SourceContext(str, Enum):
    GENERAL = "general"
    INITIALIZATION = "initialization"
    GIT_COMMIT = "git_commit"
    CODE_REVIEW = "code_review"
    DIAGNOSTICS = "diagnostics"


class OutcomeKind(str, Enum):
    YES = "yes"
    NO = "no"
    ABORT = "abort"
    CUSTOM = "custom"


class RoutingTarget(str, Enum):
    SHELL_COMMAND = "shell_command"
    ASSISTANT_TASK = "assistant_task"


@dataclass(frozen=True, slots=True)
class ClassifiedPrompt:
    """One captured interactive prompt line."""

    text: str
    source_context: SourceContext = SourceContext.GENERAL
    critical_impact: bool = False
    possible_responses: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class DecisionOutcome:
    """Response decision for a prompt.

    ``text`` is only meaningful for ``OutcomeKind.CUSTOM``.
    """

    kind: OutcomeKind
    text: str = ""

    YES: ClassVar[DecisionOutcome]
    NO: ClassVar[DecisionOutcome]
    ABORT: ClassVar[DecisionOutcome]

    @classmethod
    def custom(cls, text: str) -> DecisionOutcome:
        return cls(OutcomeKind.CUSTOM, text)

    @property
    def is_automatic(self) -> bool:
        return self.kind != OutcomeKind.ABORT

    def __str__(self) -> str:
        if self.kind == OutcomeKind.CUSTOM:
            return f"custom({self.text})"
        return self.kind.value


DecisionOutcome.YES = DecisionOutcome(OutcomeKind.YES)
DecisionOutcome.NO = DecisionOutcome(OutcomeKind.NO)
DecisionOutcome.ABORT = DecisionOutcome(OutcomeKind.ABORT)


LoggedOutcome = Union[DecisionOutcome, RoutingTarget]


@dataclass(frozen=True, slots=True)
class DecisionLogEntry:
    input: str
    outcome: LoggedOutcome
    timestamp: datetime

    def to_dict(self) -> dict:
        if isinstance(self.outcome, RoutingTarget):
            outcome = {"type": "route", "target": self.outcome.value}
        else:
            outcome = {
                "type": "decision",
                "kind": self.outcome.kind.value,
                "text": self.outcome.text,
            }
        return {
            "input": self.input,
            "outcome": outcome,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> DecisionLogEntry:
        raw = data["outcome"]
        outcome: LoggedOutcome
        if raw["type"] == "route":
            outcome = RoutingTarget(raw["target"])
        else:
            outcome = DecisionOutcome(OutcomeKind(raw["kind"]), raw.get("text", ""))
        return cls(
            input=data["input"],
            outcome=outcome,
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )
