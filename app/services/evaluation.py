# =============================================================================
# Evaluation Service — Pipeline + Persistence
# =============================================================================
#
# The inbound contract used by the HTTP layer:
#   evaluate_query()          → run pipeline, persist, return DTO
#   get_evaluation_history()  → newest-first list of stored evaluations
#   get_evaluation_by_id()    → one stored evaluation, or None
#
# FLOW (evaluate_query):
#   1. run_pipeline(prompt) → ExecutionResult
#   2. success=False → raise EvaluationError, nothing is written
#   3. success=True  → repository.create(...) → EvaluationResponse
#
# DESIGN DECISION: One error type out of this module.
# Pipeline failures, database failures and anything unexpected surface
# as EvaluationError with a human-readable message. The API layer maps
# it to a 500 envelope; callers never need to know which layer failed.
# =============================================================================

from __future__ import annotations

import logging

from app.agents.orchestrator import run_pipeline
from app.db.repository import EvaluationRepository
from app.models.responses import EvaluationResponse

logger = logging.getLogger(__name__)


class EvaluationError(Exception):
    """An evaluation could not be produced, stored or fetched."""


class EvaluationService:
    """Runs evaluations and reads them back through the repository."""

    def __init__(self, repository: EvaluationRepository) -> None:
        self._repository = repository

    async def evaluate_query(
        self,
        prompt: str,
        context: str | None = None,
    ) -> EvaluationResponse:
        """
        Evaluate a prompt end to end and store the outcome.

        Raises:
            EvaluationError: The pipeline failed or the record could not
                be stored.
        """
        logger.info(
            "Starting evaluation: prompt='%s', context=%s",
            prompt[:80], "provided" if context else "none",
        )

        try:
            execution = await run_pipeline(prompt)

            if not execution.success:
                raise EvaluationError(execution.error or "Execution failed")

            record = await self._repository.create(
                prompt=prompt,
                result=execution.result,
                assessment=execution.assessment,
                metadata=execution.metadata,
            )
        except Exception as e:
            logger.error("Evaluation service error: %s", e)
            raise EvaluationError(f"Evaluation failed: {e}") from e

        logger.info("Evaluation %s stored", record.id)
        return EvaluationResponse.model_validate(record)

    async def get_evaluation_history(
        self,
        limit: int = 10,
    ) -> list[EvaluationResponse]:
        try:
            records = await self._repository.find_many(take=limit)
        except Exception as e:
            logger.error("Error fetching evaluation history: %s", e)
            raise EvaluationError("Failed to fetch evaluation history") from e

        return [EvaluationResponse.model_validate(r) for r in records]

    async def get_evaluation_by_id(
        self,
        evaluation_id: str,
    ) -> EvaluationResponse | None:
        try:
            record = await self._repository.find_unique(evaluation_id)
        except Exception as e:
            logger.error("Error fetching evaluation %s: %s", evaluation_id, e)
            raise EvaluationError("Failed to fetch evaluation") from e

        if record is None:
            return None
        return EvaluationResponse.model_validate(record)
