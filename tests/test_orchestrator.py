# =============================================================================
# Unit Tests — Pipeline Orchestrator
# =============================================================================
#
# Runs the compiled LangGraph graph end to end with injected mocks for
# the LLM provider and the Prmtr client.
# =============================================================================

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import httpx

from app.agents.evaluator import EVALUATION_FAILED
from app.agents.orchestrator import EXECUTION_FAILED, ExecutionResult, run_pipeline
from app.services.llm import LLMResponse
from app.services.prmtr import PrmtrResult

PLAN_TEXT = (
    "1. Step 1: Pull Orders - Orders for last 3 months - Expected: Order list\n"
    "2. Step 2: Compute AOV - Revenue over order count - Expected: AOV figure"
)


def _run(coro):
    """Helper to run async functions in sync tests."""
    return asyncio.run(coro)


def _llm(*contents) -> AsyncMock:
    """LLM mock answering successive complete() calls with `contents`."""
    mock_llm = AsyncMock()
    mock_llm.complete.side_effect = [
        c if isinstance(c, Exception) else LLMResponse(content=c, model="test")
        for c in contents
    ]
    return mock_llm


def _prmtr(response: str = "AOV: $42", metadata: dict | None = None) -> AsyncMock:
    client = AsyncMock()
    client.query.return_value = PrmtrResult(response, metadata or {})
    return client


class TestRunPipeline:
    """Tests for the compiled plan-then-execute graph."""

    def test_end_to_end_with_default_plan(self):
        llm = _llm("no numbered steps here", "Overall quality score: 7/10")
        prmtr = _prmtr("AOV: $42", {"rows": 90})

        result = _run(run_pipeline(
            "average order value last 3 months",
            llm=llm, prmtr=prmtr, allow_fallback=False,
        ))

        assert isinstance(result, ExecutionResult)
        assert result.success is True
        assert result.result == "AOV: $42"
        assert result.assessment == "Overall quality score: 7/10"
        assert result.error is None
        assert result.metadata["planSteps"] == 3
        assert result.metadata["prmtrMetadata"] == {"rows": 90}
        assert "executionTimestamp" in result.metadata
        prmtr.query.assert_awaited_once_with("average order value last 3 months")

    def test_parsed_plan_feeds_evaluation(self):
        llm = _llm(PLAN_TEXT, "good")

        result = _run(run_pipeline(
            "aov", llm=llm, prmtr=_prmtr(), allow_fallback=False,
        ))

        assert result.metadata["planSteps"] == 2
        eval_prompt = llm.complete.call_args_list[1].kwargs["messages"][0]["content"]
        assert "1. Pull Orders: Orders for last 3 months" in eval_prompt
        assert "2. Compute AOV: Revenue over order count" in eval_prompt

    def test_plan_failure_short_circuits(self):
        llm = _llm(RuntimeError("quota exceeded"))
        prmtr = _prmtr()

        result = _run(run_pipeline("aov", llm=llm, prmtr=prmtr, allow_fallback=True))

        assert result.success is False
        assert result.result == ""
        assert result.assessment == EXECUTION_FAILED
        assert result.error == "Failed to create evaluation plan"
        assert "errorTimestamp" in result.metadata
        prmtr.query.assert_not_called()
        assert llm.complete.await_count == 1

    def test_prmtr_failure_in_development_uses_fallback(self):
        llm = _llm(PLAN_TEXT, "assessment of simulated answer")
        prmtr = AsyncMock()
        prmtr.query.side_effect = httpx.ConnectError("refused")

        result = _run(run_pipeline(
            "top products", llm=llm, prmtr=prmtr, allow_fallback=True,
        ))

        assert result.success is True
        assert result.result == 'Simulated response for: "top products"'
        assert result.metadata["prmtrMetadata"]["fallback"] is True

    def test_prmtr_failure_in_production_fails_without_evaluating(self):
        llm = _llm(PLAN_TEXT, "should never be used")
        prmtr = AsyncMock()
        prmtr.query.side_effect = httpx.ConnectError("refused")

        result = _run(run_pipeline(
            "top products", llm=llm, prmtr=prmtr, allow_fallback=False,
        ))

        assert result.success is False
        assert result.error
        assert "Prmtr API call failed" in result.error
        # Only the planning call happened; the evaluator never ran
        assert llm.complete.await_count == 1

    def test_evaluation_failure_still_succeeds(self):
        llm = _llm(PLAN_TEXT, RuntimeError("model overloaded"))

        result = _run(run_pipeline(
            "aov", llm=llm, prmtr=_prmtr(), allow_fallback=False,
        ))

        assert result.success is True
        assert result.result == "AOV: $42"
        assert result.assessment == EVALUATION_FAILED

    def test_fallback_defaults_from_environment(self):
        prmtr = AsyncMock()
        prmtr.query.side_effect = httpx.ConnectError("refused")

        with patch("app.agents.orchestrator.settings") as mock_settings:
            mock_settings.is_production = True
            result = _run(run_pipeline(
                "aov", llm=_llm(PLAN_TEXT, "x"), prmtr=prmtr,
            ))
        assert result.success is False

        with patch("app.agents.orchestrator.settings") as mock_settings:
            mock_settings.is_production = False
            result = _run(run_pipeline(
                "aov", llm=_llm(PLAN_TEXT, "x"), prmtr=prmtr,
            ))
        assert result.success is True

    def test_missing_llm_configuration_is_reported_as_failure(self):
        with patch(
            "app.agents.orchestrator.get_llm_provider",
            side_effect=ValueError("No Anthropic API key configured."),
        ):
            result = _run(run_pipeline("aov", prmtr=_prmtr(), allow_fallback=True))

        assert result.success is False
        assert "API key" in result.error

    def test_provider_construction_error_is_reported_as_failure(self):
        prmtr = _prmtr()
        with patch(
            "app.agents.orchestrator.get_llm_provider",
            side_effect=RuntimeError(),
        ):
            result = _run(run_pipeline("aov", prmtr=prmtr, allow_fallback=True))

        assert result.success is False
        assert result.error == "RuntimeError"
        assert result.assessment == EXECUTION_FAILED
        prmtr.query.assert_not_called()
