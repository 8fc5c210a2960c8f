# =============================================================================
# Unit Tests — Agents
# =============================================================================
#
# Tests the context builder, planner, executor and evaluator without API
# keys or network access. Uses AsyncMock LLM providers and Prmtr clients.
# =============================================================================

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import httpx
import pytest

from app.agents.context import MEAMA_CONTEXT, PRMTR_CONTEXT, build_context
from app.agents.errors import PlanCreationError, QueryExecutionError
from app.agents.evaluator import EVALUATION_FAILED, evaluate_response
from app.agents.executor import call_prmtr_api
from app.agents.planner import (
    DEFAULT_PLAN,
    PlannerStep,
    create_plan,
    format_plan,
    parse_plan,
    render_planning_prompt,
)
from app.services.llm import LLMResponse
from app.services.prmtr import PrmtrResult

SAMPLE_PLAN = (
    "1. Step 1: Analyze Sales - Review revenue trend - Expected: Trend summary\n"
    "2. Step 2: Call API - Query Prmtr - Expected: Response"
)


def _run(coro):
    """Helper to run async functions in sync tests."""
    return asyncio.run(coro)


def _llm_returning(content) -> AsyncMock:
    mock_llm = AsyncMock()
    mock_llm.complete.return_value = LLMResponse(
        content=content, model="test-model",
    )
    return mock_llm


# ---------------------------------------------------------------------------
# Test: Context Builder
# ---------------------------------------------------------------------------


class TestBuildContext:
    """Tests for wrapping a prompt in the static agent context."""

    def test_wraps_prompt_with_static_context(self):
        context = build_context("revenue by channel")
        assert context.prompt == "revenue by channel"
        assert context.meama_context == MEAMA_CONTEXT
        assert context.prmtr_context == PRMTR_CONTEXT

    def test_is_idempotent(self):
        assert build_context("same prompt") == build_context("same prompt")

    def test_context_is_immutable(self):
        context = build_context("x")
        with pytest.raises(AttributeError):
            context.prompt = "y"


# ---------------------------------------------------------------------------
# Test: Plan Parsing
# ---------------------------------------------------------------------------


class TestParsePlan:
    """Tests for parsing numbered plan lines into PlannerSteps."""

    def test_parses_numbered_steps(self):
        steps = parse_plan(SAMPLE_PLAN)
        assert steps is not None
        assert [s.step for s in steps] == [1, 2]
        assert [s.action for s in steps] == ["Analyze Sales", "Call API"]
        assert steps[0].description == "Review revenue trend"
        assert steps[0].expected_output == "Trend summary"
        assert steps[1].description == "Query Prmtr"
        assert steps[1].expected_output == "Response"

    def test_no_matching_lines_returns_none(self):
        assert parse_plan("Here is my plan:\n- look at data\n- answer") is None

    def test_empty_text_returns_none(self):
        assert parse_plan("") is None

    def test_non_matching_lines_are_dropped(self):
        text = (
            "Plan:\n\n"
            "1. Step 1: Fetch - Pull orders - Expected: Orders\n"
            "Some commentary in between\n"
            "2. Step 2: Compare - Compare months - Expected: Delta\n"
        )
        steps = parse_plan(text)
        assert [s.action for s in steps] == ["Fetch", "Compare"]

    def test_matching_is_case_insensitive(self):
        steps = parse_plan("1. STEP 1: Fetch - Pull orders - expected: Orders")
        assert steps == [PlannerStep(1, "Fetch", "Pull orders", "Orders")]

    def test_step_number_after_step_token_is_optional(self):
        steps = parse_plan("4. Step: Fetch - Pull orders - Expected: Orders")
        assert steps[0].step == 4

    def test_keeps_parse_order_and_duplicate_numbers(self):
        text = (
            "3. Step 3: C - third - Expected: c\n"
            "1. Step 1: A - first - Expected: a\n"
            "1. Step 1: A2 - again - Expected: a2"
        )
        steps = parse_plan(text)
        assert [s.step for s in steps] == [3, 1, 1]
        assert [s.action for s in steps] == ["C", "A", "A2"]

    def test_handles_windows_line_endings(self):
        steps = parse_plan(SAMPLE_PLAN.replace("\n", "\r\n"))
        assert [s.expected_output for s in steps] == ["Trend summary", "Response"]


# ---------------------------------------------------------------------------
# Test: Plan Creation
# ---------------------------------------------------------------------------


class TestCreatePlan:
    """Tests for LLM-backed plan creation and the default plan."""

    def test_returns_parsed_steps(self):
        mock_llm = _llm_returning(SAMPLE_PLAN)
        steps = _run(create_plan(build_context("sales trend"), mock_llm))
        assert len(steps) == 2
        assert steps[0].action == "Analyze Sales"

    def test_prompt_embeds_user_query(self):
        mock_llm = _llm_returning(SAMPLE_PLAN)
        _run(create_plan(build_context("average basket size"), mock_llm))

        messages = mock_llm.complete.call_args.kwargs["messages"]
        assert "User Query: average basket size" in messages[0]["content"]
        assert "Expected: [Expected Output]" in messages[0]["content"]

    def test_unparseable_output_falls_back_to_default_plan(self):
        mock_llm = _llm_returning("I cannot produce a plan right now.")
        steps = _run(create_plan(build_context("x"), mock_llm))
        assert steps == list(DEFAULT_PLAN)
        assert [s.action for s in steps] == [
            "Analyze Query", "Call Prmtr API", "Evaluate Response",
        ]

    def test_prefers_structured_content_blocks(self):
        blocks = [{"type": "text", "text": SAMPLE_PLAN}]
        steps = _run(create_plan(build_context("x"), _llm_returning(blocks)))
        assert [s.step for s in steps] == [1, 2]

    def test_unknown_content_shape_uses_default_plan(self):
        steps = _run(create_plan(build_context("x"), _llm_returning(None)))
        assert steps == list(DEFAULT_PLAN)

    def test_llm_error_raises_plan_creation_error(self):
        mock_llm = AsyncMock()
        mock_llm.complete.side_effect = RuntimeError("connection reset")

        with pytest.raises(PlanCreationError, match="Failed to create evaluation plan"):
            _run(create_plan(build_context("x"), mock_llm))

    def test_render_includes_static_context(self):
        rendered = render_planning_prompt(build_context("q"))
        assert "Natural language querying of business data" in rendered
        assert "Track sales performance and revenue metrics" in rendered


# ---------------------------------------------------------------------------
# Test: Query Executor
# ---------------------------------------------------------------------------


class TestCallPrmtrApi:
    """Tests for the Prmtr call and its simulated fallback."""

    def test_returns_client_result(self):
        client = AsyncMock()
        client.query.return_value = PrmtrResult("AOV: $42", {"source": "orders"})

        result = _run(call_prmtr_api("aov", client, allow_fallback=False))

        assert result.response == "AOV: $42"
        assert result.metadata == {"source": "orders"}
        client.query.assert_awaited_once_with("aov")

    def test_failure_with_fallback_returns_simulated_response(self):
        client = AsyncMock()
        client.query.side_effect = httpx.ConnectError("refused")

        result = _run(call_prmtr_api("top sku", client, allow_fallback=True))

        assert result.response == 'Simulated response for: "top sku"'
        assert result.metadata["fallback"] is True
        assert "timestamp" in result.metadata

    def test_failure_without_fallback_raises(self):
        client = AsyncMock()
        client.query.side_effect = httpx.ConnectError("refused")

        with pytest.raises(QueryExecutionError, match="Prmtr API call failed: refused"):
            _run(call_prmtr_api("top sku", client, allow_fallback=False))


# ---------------------------------------------------------------------------
# Test: Response Evaluator
# ---------------------------------------------------------------------------


class TestEvaluateResponse:
    """Tests for the evaluator agent's assessment."""

    def test_returns_llm_text_verbatim(self):
        assessment = "Overall quality score: 8/10\nStrengths: concise"
        mock_llm = _llm_returning(assessment)

        result = _run(evaluate_response(
            "aov", "AOV: $42", list(DEFAULT_PLAN), mock_llm,
        ))

        assert result == assessment

    def test_prompt_contains_query_response_and_plan(self):
        mock_llm = _llm_returning("fine")
        _run(evaluate_response("aov", "AOV: $42", list(DEFAULT_PLAN), mock_llm))

        content = mock_llm.complete.call_args.kwargs["messages"][0]["content"]
        assert "Original Query: aov" in content
        assert "AI Response: AOV: $42" in content
        assert "2. Call Prmtr API: Execute the query using Prmtr AI API" in content

    def test_llm_error_returns_placeholder(self):
        mock_llm = AsyncMock()
        mock_llm.complete.side_effect = TimeoutError()

        result = _run(evaluate_response("aov", "AOV: $42", [], mock_llm))

        assert result == EVALUATION_FAILED
        assert result == "Evaluation failed due to technical error"

    def test_format_plan(self):
        plan = [PlannerStep(1, "Fetch", "Pull orders", "Orders")]
        assert format_plan(plan) == "1. Fetch: Pull orders"
