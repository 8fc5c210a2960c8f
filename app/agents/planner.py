# =============================================================================
# Planner Agent — Evaluation Plan Generation
# =============================================================================
#
# Asks the LLM for a numbered, step-by-step plan describing how a
# business-intelligence query should be run through Prmtr AI and judged.
#
# FLOW:
#   1. Render PLANNING_PROMPT with the agent context
#   2. LLM call (low temperature) → free text
#   3. parse_plan() → PlannerStep list, or None if nothing matched
#   4. None → DEFAULT_PLAN
#
# DESIGN DECISION: Line-oriented regex parsing over JSON output.
# The plan is only ever rendered back into the evaluation prompt, so a
# strict schema buys nothing. A numbered list is what models produce
# most reliably, and a line that does not fit the pattern is simply
# skipped instead of invalidating the whole plan.
#
# DESIGN DECISION: parse_plan() returns None on "no match" rather than
# raising. An unparseable plan is a normal outcome, and the caller
# substitutes the default plan.
#
# Step numbers are taken verbatim from the model output and kept in
# parse order. Duplicates and gaps are not corrected.
# =============================================================================

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from app.agents.context import AgentContext
from app.agents.errors import PlanCreationError
from app.services.llm import LLMProvider, generate_text

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data Structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PlannerStep:
    """One step of an evaluation plan."""

    step: int
    action: str
    description: str
    expected_output: str


DEFAULT_PLAN: tuple[PlannerStep, ...] = (
    PlannerStep(
        step=1,
        action="Analyze Query",
        description="Understand the business intelligence query requirements",
        expected_output="Query analysis completed",
    ),
    PlannerStep(
        step=2,
        action="Call Prmtr API",
        description="Execute the query using Prmtr AI API",
        expected_output="AI response received",
    ),
    PlannerStep(
        step=3,
        action="Evaluate Response",
        description="Assess the quality and relevance of the AI response",
        expected_output="Response evaluation completed",
    ),
)


# ---------------------------------------------------------------------------
# Planning Prompt
# ---------------------------------------------------------------------------

PLANNING_PROMPT = """\
You are an expert planning agent for evaluating business intelligence queries using Prmtr AI.

Context:
- Meama Products: {meama_context}
- Prmtr AI: {prmtr_context}
- User Query: {prompt}

Your task is to create a detailed step-by-step plan for evaluating this query using Prmtr AI.

Consider:
1. What specific data points need to be analyzed
2. How to structure the query for Prmtr AI
3. What metrics or KPIs are relevant
4. How to assess the quality and relevance of the response

Create a numbered list of steps that will guide the execution agent.

Response format:
1. Step 1: [Action] - [Description] - Expected: [Expected Output]
2. Step 2: [Action] - [Description] - Expected: [Expected Output]
...

Plan:
"""

# "3. Step 3: Action - Description - Expected: Output"
_STEP_PATTERN = re.compile(
    r"^(\d+)\.\s*Step\s*\d*:\s*(.+?)\s*-\s*(.+?)\s*-\s*Expected:\s*(.+)$",
    re.IGNORECASE,
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def render_planning_prompt(context: AgentContext) -> str:
    return PLANNING_PROMPT.format(
        meama_context=context.meama_context,
        prmtr_context=context.prmtr_context,
        prompt=context.prompt,
    )


def parse_plan(plan_text: str) -> list[PlannerStep] | None:
    """
    Parse numbered plan lines into PlannerStep records.

    Lines are stripped and blank lines ignored; each remaining line must
    match the full step pattern or it is dropped. Steps keep the order
    they appear in the text, not the order of their numbers.

    Returns:
        The parsed steps, or None if no line matched.
    """
    steps: list[PlannerStep] = []
    for line in plan_text.splitlines():
        line = line.strip()
        if not line:
            continue
        match = _STEP_PATTERN.match(line)
        if match is None:
            continue
        steps.append(PlannerStep(
            step=int(match.group(1)),
            action=match.group(2).strip(),
            description=match.group(3).strip(),
            expected_output=match.group(4).strip(),
        ))

    return steps or None


async def create_plan(
    context: AgentContext,
    llm: LLMProvider,
) -> list[PlannerStep]:
    """
    Generate the evaluation plan for a query.

    Always returns at least one step: output that yields no parseable
    lines falls back to DEFAULT_PLAN.

    Raises:
        PlanCreationError: If the LLM call itself fails.
    """
    try:
        plan_text = await generate_text(llm, render_planning_prompt(context))
    except Exception as e:
        logger.error("Planning LLM call failed: %s", e)
        raise PlanCreationError("Failed to create evaluation plan") from e

    steps = parse_plan(plan_text)

    if steps is None:
        logger.info(
            "No plan steps parsed from %d chars of output, using default plan",
            len(plan_text),
        )
        return list(DEFAULT_PLAN)

    logger.info("Plan created with %d steps", len(steps))
    return steps


def format_plan(plan: list[PlannerStep]) -> str:
    """Flatten a plan to "step. action: description" lines."""
    return "\n".join(
        f"{step.step}. {step.action}: {step.description}" for step in plan
    )
