# =============================================================================
# Query Executor — Prmtr Call with Development Fallback
# =============================================================================
#
# Sends the user's prompt to Prmtr AI and returns its answer.
#
# FAILURE POLICY:
#   allow_fallback=True  (development) → simulated, clearly-tagged answer
#   allow_fallback=False (production)  → QueryExecutionError, run aborts
#
# DESIGN DECISION: The fallback switch is a parameter, not a settings
# lookup. The orchestrator derives it from `settings.is_production` once
# per run, and tests can exercise both branches without touching
# process-wide configuration.
#
# DESIGN DECISION: Simulated answers are tagged `fallback: true` in the
# metadata that ends up in the persisted record, so a local run can
# never be mistaken for a real Prmtr response.
# =============================================================================

from __future__ import annotations

import logging
from datetime import UTC, datetime

from app.agents.errors import QueryExecutionError
from app.services.prmtr import PrmtrClient, PrmtrResult

logger = logging.getLogger(__name__)


def simulated_result(prompt: str) -> PrmtrResult:
    """Stand-in answer used when Prmtr is unreachable outside production."""
    return PrmtrResult(
        response=f'Simulated response for: "{prompt}"',
        metadata={
            "fallback": True,
            "timestamp": datetime.now(UTC).isoformat(),
        },
    )


async def call_prmtr_api(
    prompt: str,
    client: PrmtrClient,
    allow_fallback: bool,
) -> PrmtrResult:
    """
    Query Prmtr AI for an answer to the prompt.

    Args:
        prompt: The user's original query.
        client: Prmtr client to send the query with.
        allow_fallback: Return a simulated answer instead of failing when
            Prmtr cannot be reached (non-production only).

    Raises:
        QueryExecutionError: Prmtr failed and allow_fallback is False.
    """
    try:
        return await client.query(prompt)
    except Exception as e:
        if allow_fallback:
            logger.warning(
                "Prmtr API call failed (%s), returning simulated response",
                e,
            )
            return simulated_result(prompt)

        logger.error("Prmtr API call failed: %s", e)
        raise QueryExecutionError(f"Prmtr API call failed: {e}") from e
