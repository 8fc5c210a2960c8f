# =============================================================================
# Evaluator Agent — Qualitative Assessment of Prmtr Answers
# =============================================================================
#
# Asks the LLM to critique Prmtr's answer against the original query and
# the plan that was generated for it. The assessment is free text and is
# stored verbatim; nothing downstream parses it.
#
# DESIGN DECISION: evaluate_response() never raises.
# A run with a Prmtr answer but no assessment is still worth keeping; a
# run that fails because the critique could not be produced is not. Any
# error is logged and replaced by EVALUATION_FAILED.
# =============================================================================

from __future__ import annotations

import logging

from app.agents.planner import PlannerStep, format_plan
from app.services.llm import LLMProvider, generate_text

logger = logging.getLogger(__name__)

EVALUATION_FAILED = "Evaluation failed due to technical error"

EVALUATION_PROMPT = """\
You are an expert evaluation agent for assessing AI-generated business intelligence responses.

Context:
- Original Query: {original_query}
- AI Response: {ai_response}
- Expected Analysis: {expected_analysis}

Evaluate the AI response based on:
1. Relevance to the original query
2. Accuracy of the information provided
3. Completeness of the analysis
4. Clarity and understandability
5. Actionability of insights

Provide a comprehensive assessment with:
- Overall quality score (1-10)
- Strengths of the response
- Areas for improvement
- Recommendations

Assessment:
"""


async def evaluate_response(
    original_query: str,
    ai_response: str,
    plan: list[PlannerStep],
    llm: LLMProvider,
) -> str:
    """
    Produce a free-text assessment of Prmtr's answer.

    Returns:
        The LLM's assessment text, or EVALUATION_FAILED on any error.
    """
    try:
        prompt = EVALUATION_PROMPT.format(
            original_query=original_query,
            ai_response=ai_response,
            expected_analysis=format_plan(plan),
        )
        return await generate_text(llm, prompt)
    except Exception as e:
        logger.error("Evaluation failed: %s", e)
        return EVALUATION_FAILED
