"""Decision service and terminal polling loop."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Protocol, Union

from relay_agent.config import Settings
from relay_agent.graph_builder import GraphBuilder, build_state
from relay_agent.pipeline.catalog import PromptPatternCatalog
from relay_agent.pipeline.decision_log import DecisionRecorder, create_decision_log
from relay_agent.pipeline.extraction import extract_new_content
from relay_agent.pipeline.session import AssistantSession
from relay_agent.pipeline.types import (
    ClassifiedPrompt,
    DecisionOutcome,
    OutcomeKind,
    RoutingTarget,
)

logger = logging.getLogger(__name__)


class Dispatcher(Protocol):
    """Performs the side effects decided by the service."""

    def send_yes(self) -> None: ...

    def send_no(self) -> None: ...

    def send_text(self, text: str) -> None: ...

    def escalate(self, prompt: ClassifiedPrompt) -> None: ...

    def run_shell(self, command: str) -> None: ...

    def send_to_assistant(self, instruction: str) -> None: ...


class LoggingDispatcher:
    """Dispatcher that only reports what it would have typed."""

    def send_yes(self) -> None:
        logger.info("would send keystroke", extra={"keys": "y"})

    def send_no(self) -> None:
        logger.info("would send keystroke", extra={"keys": "n"})

    def send_text(self, text: str) -> None:
        logger.info("would send text", extra={"keys": text})

    def escalate(self, prompt: ClassifiedPrompt) -> None:
        logger.warning(
            "prompt requires user input",
            extra={"prompt": prompt.text, "options": list(prompt.possible_responses)},
        )

    def run_shell(self, command: str) -> None:
        logger.info("would run shell command", extra={"command": command})

    def send_to_assistant(self, instruction: str) -> None:
        logger.info("would send to assistant", extra={"instruction": instruction})


class DecisionService:
    """Runs the decision graphs and hands their results to a dispatcher."""

    def __init__(
        self,
        settings: Settings,
        dispatcher: Dispatcher,
        catalog: Optional[PromptPatternCatalog] = None,
        decision_log: Optional[DecisionRecorder] = None,
        session: Optional[AssistantSession] = None,
    ):
        self.settings = settings
        self.dispatcher = dispatcher
        self.catalog = catalog if catalog is not None else settings.load_catalog()
        self.decision_log = (
            decision_log if decision_log is not None else create_decision_log(settings)
        )
        self.session = session or AssistantSession()
        self.last_buffer = ""
        self.last_prompt: Optional[str] = None

        builder = GraphBuilder(settings, self.decision_log, self.catalog)
        self.terminal_app = builder.build_terminal_graph().compile()
        self.instruction_app = builder.build_instruction_graph().compile()

    async def handle_terminal_output(self, buffer: str) -> Optional[DecisionOutcome]:
        """Classify the prompt at the end of ``buffer`` and act on it.

        Returns:
            The decision, or None when the buffer does not end in a prompt.
        """
        new_content = extract_new_content(self.last_buffer, buffer)
        self.last_buffer = buffer
        result = await self.terminal_app.ainvoke(
            build_state(
                buffer,
                self.session,
                new_content=new_content,
                last_prompt=self.last_prompt,
            )
        )
        if result.get("routing_outcome") == "handled":
            return None

        decision: Optional[DecisionOutcome] = result.get("decision")
        if decision is None:
            self.last_prompt = None
            return None

        self.last_prompt = result["prompt"].text
        self._dispatch_decision(result["prompt"], decision)
        return decision

    async def handle_instruction(self, instruction: str) -> RoutingTarget:
        result = await self.instruction_app.ainvoke(build_state(instruction, self.session))
        target: RoutingTarget = result["target"]

        try:
            if target == RoutingTarget.ASSISTANT_TASK:
                self.session.track(instruction)
                self.dispatcher.send_to_assistant(instruction)
            else:
                self.dispatcher.run_shell(instruction)
        except Exception as exc:  # noqa: BLE001
            logger.exception(
                "instruction dispatch failed",
                extra={"error_type": type(exc).__name__, "target": target.value},
            )
        return target

    def _dispatch_decision(self, prompt: ClassifiedPrompt, decision: DecisionOutcome) -> None:
        try:
            if not self.settings.auto_respond or decision.kind == OutcomeKind.ABORT:
                self.dispatcher.escalate(prompt)
            elif decision.kind == OutcomeKind.YES:
                self.dispatcher.send_yes()
            elif decision.kind == OutcomeKind.NO:
                self.dispatcher.send_no()
            else:
                self.dispatcher.send_text(decision.text)
        except Exception as exc:  # noqa: BLE001
            logger.exception(
                "decision dispatch failed",
                extra={"error_type": type(exc).__name__, "decision": str(decision)},
            )


Capture = Callable[[], Union[str, Awaitable[str]]]


class TerminalMonitor:
    """Polls a terminal capture and feeds changed content to the service."""

    def __init__(self, service: DecisionService, capture: Capture, interval: float = 0.5):
        self.service = service
        self.capture = capture
        self.interval = interval
        self.last_content: Optional[str] = None
        self._stopped = asyncio.Event()

    async def _read(self) -> str:
        content = self.capture()
        if asyncio.iscoroutine(content) or isinstance(content, asyncio.Future):
            content = await content
        return content

    async def poll_once(self) -> Optional[DecisionOutcome]:
        """Read the terminal once; unchanged content is skipped."""
        try:
            content = await self._read()
        except Exception as exc:  # noqa: BLE001
            logger.exception(
                "terminal capture failed", extra={"error_type": type(exc).__name__}
            )
            return None

        if content == self.last_content:
            return None
        self.last_content = content
        try:
            return await self.service.handle_terminal_output(content)
        except Exception as exc:  # noqa: BLE001
            logger.exception(
                "terminal processing failed", extra={"error_type": type(exc).__name__}
            )
            return None

    async def run(self) -> None:
        logger.info("terminal monitor started", extra={"interval": self.interval})
        try:
            while not self._stopped.is_set():
                await self.poll_once()
                try:
                    await asyncio.wait_for(self._stopped.wait(), timeout=self.interval)
                except asyncio.TimeoutError:
                    pass
        finally:
            logger.info("terminal monitor stopped")

    def stop(self) -> None:
        self._stopped.set()
