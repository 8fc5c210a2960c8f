# =============================================================================
# LangGraph Orchestrator — Plan-then-Execute Pipeline
# =============================================================================
#
# Wires the four pipeline stages into a LangGraph StateGraph:
#
# GRAPH TOPOLOGY:
#   START ──▶ context ──▶ plan ──▶ execute ──▶ evaluate ──▶ END
#                           │         │
#                           └────┬────┘
#                                ▼
#                               END   (fatal stage error)
#
# DESIGN DECISION: Conditional edges only for short-circuiting.
# Planning and execution can fail fatally; when they do the node records
# `error` in the state and the router jumps straight to END so later
# stages never run. There is no branching beyond that and no retry loop.
#
# DESIGN DECISION: Stage errors stop here.
# Nodes catch PipelineError and store its message; run_pipeline() folds
# the final state into an ExecutionResult. Callers only ever see
# success/failure data, never a stage-specific exception.
#
# DESIGN DECISION: Graph compiled once at module level.
# The compiled graph holds no per-run data and is shared by concurrent
# requests. Dependencies (LLM, Prmtr client, fallback flag) travel in
# the state so each run can override them.
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from langgraph.graph import END, START, StateGraph
from typing_extensions import TypedDict

from app.agents.context import AgentContext, build_context
from app.agents.errors import PipelineError
from app.agents.evaluator import evaluate_response
from app.agents.executor import call_prmtr_api
from app.agents.planner import PlannerStep, create_plan
from app.config import settings
from app.services.llm import LLMProvider, get_llm_provider
from app.services.prmtr import PrmtrClient, PrmtrResult, get_prmtr_client

logger = logging.getLogger(__name__)

EXECUTION_FAILED = "Execution failed"


# ---------------------------------------------------------------------------
# Result & State Schemas
# ---------------------------------------------------------------------------


@dataclass
class ExecutionResult:
    """
    Outcome of one pipeline run.

    success=True  → `result` holds Prmtr's answer, `error` is None
    success=False → `result` is "", `assessment` is "Execution failed",
                    `error` explains why
    """

    success: bool
    result: str
    assessment: str
    metadata: dict[str, Any] = field(default_factory=dict)
    error: str | None = None


class PipelineState(TypedDict, total=False):
    """State that flows through the graph. Nodes return partial updates."""

    # --- Input (set by caller) ---
    prompt: str
    allow_fallback: bool

    # --- Dependency injection ---
    # Not JSON-serialisable. Safe as long as no checkpointer is
    # configured on the graph (current: no checkpointer).
    llm_override: LLMProvider | None
    prmtr_override: PrmtrClient | None

    # --- Set by nodes ---
    context: AgentContext
    plan: list[PlannerStep]
    prmtr_result: PrmtrResult
    assessment: str
    error: str


# ---------------------------------------------------------------------------
# Node Functions
# ---------------------------------------------------------------------------


async def context_node(state: PipelineState) -> dict:
    return {"context": build_context(state["prompt"])}


async def plan_node(state: PipelineState) -> dict:
    """Generate the evaluation plan. Failure is fatal for the run."""
    try:
        llm = state.get("llm_override") or get_llm_provider()
    except Exception as e:
        # Unknown provider, missing API key, or the SDK client itself failing
        logger.error("LLM provider unavailable: %s", e)
        return {"error": str(e) or type(e).__name__}

    try:
        plan = await create_plan(state["context"], llm)
    except PipelineError as e:
        logger.error("Planning stage failed: %s", e)
        return {"error": str(e)}

    return {"plan": plan}


async def execute_node(state: PipelineState) -> dict:
    """Query Prmtr. Fatal only when no fallback is allowed."""
    client = state.get("prmtr_override") or get_prmtr_client()
    try:
        result = await call_prmtr_api(
            state["context"].prompt,
            client=client,
            allow_fallback=state["allow_fallback"],
        )
    except PipelineError as e:
        logger.error("Execution stage failed: %s", e)
        return {"error": str(e)}

    logger.info(
        "Prmtr response received (fallback=%s)",
        bool(result.metadata.get("fallback")),
    )
    return {"prmtr_result": result}


async def evaluate_node(state: PipelineState) -> dict:
    """Assess Prmtr's answer. Never fails the run."""
    llm = state.get("llm_override") or get_llm_provider()
    assessment = await evaluate_response(
        state["context"].prompt,
        state["prmtr_result"].response,
        state["plan"],
        llm,
    )
    return {"assessment": assessment}


def _continue_unless_failed(next_node: str):
    """Router: go to next_node, or END when the last node set `error`."""

    def route(state: PipelineState) -> str:
        return END if state.get("error") else next_node

    return route


# ---------------------------------------------------------------------------
# Graph Assembly
# ---------------------------------------------------------------------------

_builder = StateGraph(PipelineState)
_builder.add_node("context", context_node)
_builder.add_node("plan", plan_node)
_builder.add_node("execute", execute_node)
_builder.add_node("evaluate", evaluate_node)

_builder.add_edge(START, "context")
_builder.add_edge("context", "plan")
_builder.add_conditional_edges(
    "plan", _continue_unless_failed("execute"), ["execute", END],
)
_builder.add_conditional_edges(
    "execute", _continue_unless_failed("evaluate"), ["evaluate", END],
)
_builder.add_edge("evaluate", END)

graph = _builder.compile()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def run_pipeline(
    prompt: str,
    llm: LLMProvider | None = None,
    prmtr: PrmtrClient | None = None,
    allow_fallback: bool | None = None,
) -> ExecutionResult:
    """
    Run context → plan → execute → evaluate for one prompt.

    Args:
        prompt: The business-intelligence query to evaluate.
        llm: Optional LLM provider override (defaults to the singleton).
        prmtr: Optional Prmtr client override (defaults to the singleton).
        allow_fallback: Allow a simulated Prmtr answer when Prmtr is
            unreachable. Defaults to True outside production.

    Returns:
        ExecutionResult. Never raises for stage failures.
    """
    if allow_fallback is None:
        allow_fallback = not settings.is_production

    initial_state: PipelineState = {
        "prompt": prompt,
        "allow_fallback": allow_fallback,
    }
    if llm is not None:
        initial_state["llm_override"] = llm
    if prmtr is not None:
        initial_state["prmtr_override"] = prmtr

    logger.info(
        "Invoking evaluation pipeline: prompt='%s', allow_fallback=%s",
        prompt[:80], allow_fallback,
    )

    state = await graph.ainvoke(initial_state)
    timestamp = datetime.now(UTC).isoformat()

    if state.get("error"):
        logger.info("Pipeline failed: %s", state["error"])
        return ExecutionResult(
            success=False,
            result="",
            assessment=EXECUTION_FAILED,
            error=state["error"],
            metadata={"errorTimestamp": timestamp},
        )

    prmtr_result: PrmtrResult = state["prmtr_result"]
    logger.info("Pipeline complete: %d plan steps", len(state["plan"]))

    return ExecutionResult(
        success=True,
        result=prmtr_result.response,
        assessment=state["assessment"],
        metadata={
            "planSteps": len(state["plan"]),
            "prmtrMetadata": prmtr_result.metadata,
            "executionTimestamp": timestamp,
        },
    )
