"""LangGraph orchestration for terminal prompts and user instructions."""

from __future__ import annotations

import logging
from typing import Optional, TypedDict

from langgraph.graph import END, START, StateGraph

from relay_agent.config import Settings
from relay_agent.pipeline.catalog import PromptPatternCatalog
from relay_agent.pipeline.classifier import PromptClassifier
from relay_agent.pipeline.decision_log import DecisionLogError, DecisionRecorder, make_entry
from relay_agent.pipeline.extraction import PromptDetector
from relay_agent.pipeline.router import CommandRouter
from relay_agent.pipeline.session import AssistantSession
from relay_agent.pipeline.types import ClassifiedPrompt, DecisionOutcome, RoutingTarget

logger = logging.getLogger(__name__)


class DecisionState(TypedDict):
    """
    State shared by both graphs.
    ``text`` is the terminal buffer or the instruction, depending on the graph.
    """
    # --- Inputs ---
    text: str
    session: AssistantSession
    # Terminal output not seen in the previous capture
    new_content: Optional[str]
    # Prompt line already handled; skipped while it stays on screen
    last_prompt: Optional[str]

    # --- Routing/Internal ---
    # outcome: "not_prompt", "handled", "prompt" or "routed"
    routing_outcome: Optional[str]
    prompt: Optional[ClassifiedPrompt]

    # --- Output ---
    decision: Optional[DecisionOutcome]
    target: Optional[RoutingTarget]
    logged: bool


def build_state(
    text: str,
    session: AssistantSession,
    *,
    new_content: Optional[str] = None,
    last_prompt: Optional[str] = None,
) -> DecisionState:
    return {
        "text": text,
        "session": session,
        "new_content": new_content,
        "last_prompt": last_prompt,
        "routing_outcome": None,
        "prompt": None,
        "decision": None,
        "target": None,
        "logged": False,
    }


class GraphBuilder:
    """Builds the terminal and instruction graphs."""

    def __init__(
        self,
        settings: Settings,
        decision_log: DecisionRecorder,
        catalog: PromptPatternCatalog,
        router: Optional[CommandRouter] = None,
    ):
        self.settings = settings
        self.decision_log = decision_log
        self.detector = PromptDetector(catalog)
        self.classifier = PromptClassifier(catalog)
        self.router = router or CommandRouter()

    # --- Nodes ---

    async def detect_node(self, state: DecisionState) -> dict:
        buffer = state["text"]
        session = state.get("session")
        if session is not None:
            new_content = state.get("new_content")
            session.observe_output(buffer if new_content is None else new_content)

        prompt = self.detector.detect(buffer)
        if prompt is None:
            return {"routing_outcome": "not_prompt"}

        # An answer echoed after the prompt keeps the same line on screen.
        last_prompt = state.get("last_prompt")
        if last_prompt and prompt.text.startswith(last_prompt):
            return {"routing_outcome": "handled", "prompt": prompt}
        return {"routing_outcome": "prompt", "prompt": prompt}

    async def classify_node(self, state: DecisionState) -> dict:
        prompt = state["prompt"]
        decision = self.classifier.classify(prompt)
        logger.info(
            "prompt classified",
            extra={
                "prompt": prompt.text,
                "decision": str(decision),
                "source_context": prompt.source_context.value,
                "critical_impact": prompt.critical_impact,
            },
        )
        return {"decision": decision}

    async def route_node(self, state: DecisionState) -> dict:
        instruction = state["text"]
        session = state.get("session")
        if session is not None:
            target = session.route(self.router, instruction)
        else:
            target = self.router.route(instruction)
        logger.info(
            "instruction routed",
            extra={"instruction": instruction, "target": target.value},
        )
        return {"routing_outcome": "routed", "target": target}

    async def record_node(self, state: DecisionState) -> dict:
        """Append the decision to the log. Failures never change the outcome."""
        if state.get("decision") is not None:
            entry = make_entry(state["prompt"].text, state["decision"])
        else:
            entry = make_entry(state["text"], state["target"])

        attempts = self.settings.decision_log_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                self.decision_log.append(entry)
                return {"logged": True}
            except DecisionLogError as exc:
                logger.warning(
                    "decision log append failed (attempt %d/%d): %s", attempt, attempts, exc
                )
            except Exception:  # noqa: BLE001
                logger.exception("decision log append failed: unexpected error")
                break
        logger.error("decision not recorded", extra={"input": entry.input})
        return {"logged": False}

    # --- Edges & Routing ---

    def route_detect(self, state: DecisionState) -> str:
        if state.get("routing_outcome") == "prompt":
            return "classify"
        return END

    # --- Graph Construction ---

    def build_terminal_graph(self) -> StateGraph:
        graph = StateGraph(DecisionState)
        graph.add_node("detect", self.detect_node)
        graph.add_node("classify", self.classify_node)
        graph.add_node("record", self.record_node)

        graph.add_edge(START, "detect")
        graph.add_conditional_edges("detect", self.route_detect)
        graph.add_edge("classify", "record")
        graph.add_edge("record", END)
        return graph

    def build_instruction_graph(self) -> StateGraph:
        graph = StateGraph(DecisionState)
        graph.add_node("route", self.route_node)
        graph.add_node("record", self.record_node)
        graph.add_edge(START, "route")
        graph.add_edge("route", "record")
        graph.add_edge("record", END)
        return graph
