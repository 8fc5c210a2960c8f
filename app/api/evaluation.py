# =============================================================================
# Evaluation API — Prmtr Query Evaluation Endpoints
# =============================================================================
#
#   GET  /api                      → Route listing
#   GET  /api/health               → Liveness (touches no service)
#   POST /api/evaluation           → Evaluate a prompt and store the result
#   GET  /api/evaluation/history   → Most recent evaluations
#   GET  /api/evaluation/{id}      → One evaluation
#
# This module only handles validation, status codes and mapping
# EvaluationService output into the {"success": ..., "data": ...}
# envelope. EvaluationError propagates to the exception handler in
# app/api/errors.py, which produces the 500 envelope.
#
# DESIGN DECISION: Route ordering matters. /evaluation/history is
# registered BEFORE /evaluation/{evaluation_id} so "history" is never
# captured as an ID.
# =============================================================================

from __future__ import annotations

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.deps import enforce_rate_limit, get_evaluation_service
from app.models.requests import EvaluationHistoryQuery, EvaluationRequest
from app.models.responses import (
    EvaluationEnvelope,
    EvaluationHistoryEnvelope,
    HealthResponse,
)
from app.services.evaluation import EvaluationService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["Evaluation"],
    dependencies=[Depends(enforce_rate_limit)],
)

ROUTES = [
    "GET    /api/health",
    "POST   /api/evaluation",
    "GET    /api/evaluation/history?limit=10",
    "GET    /api/evaluation/:id",
]


@router.get("", summary="List API routes")
async def index() -> dict:
    return {"ok": True, "routes": ROUTES}


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness check",
)
async def health() -> HealthResponse:
    return HealthResponse(timestamp=datetime.now(UTC))


# ---------------------------------------------------------------------------
# POST /api/evaluation — Evaluate a Query
# ---------------------------------------------------------------------------


@router.post(
    "/evaluation",
    response_model=EvaluationEnvelope,
    status_code=201,
    summary="Evaluate a business-intelligence query",
    description=(
        "Plans an evaluation, sends the prompt to Prmtr AI, assesses the "
        "answer and stores the outcome. Fails with 500 if planning fails "
        "or Prmtr is unreachable in production."
    ),
)
async def evaluate(
    request: EvaluationRequest,
    service: EvaluationService = Depends(get_evaluation_service),
) -> EvaluationEnvelope:
    result = await service.evaluate_query(request.prompt, request.context)
    return EvaluationEnvelope(data=result)


# ---------------------------------------------------------------------------
# GET /api/evaluation/history — Recent Evaluations
# ---------------------------------------------------------------------------


@router.get(
    "/evaluation/history",
    response_model=EvaluationHistoryEnvelope,
    summary="Most recent evaluations, newest first",
)
async def evaluation_history(
    limit: str | None = Query(
        default=None,
        description="Number of evaluations to return (clamped to 1-100, default 10)",
    ),
    service: EvaluationService = Depends(get_evaluation_service),
) -> EvaluationHistoryEnvelope:
    params = EvaluationHistoryQuery(limit=limit)
    results = await service.get_evaluation_history(params.limit)
    return EvaluationHistoryEnvelope(data=results, count=len(results))


# ---------------------------------------------------------------------------
# GET /api/evaluation/{evaluation_id} — One Evaluation
# ---------------------------------------------------------------------------


@router.get(
    "/evaluation/{evaluation_id}",
    response_model=EvaluationEnvelope,
    summary="Fetch a stored evaluation",
)
async def get_evaluation(
    evaluation_id: str,
    service: EvaluationService = Depends(get_evaluation_service),
) -> EvaluationEnvelope:
    result = await service.get_evaluation_by_id(evaluation_id)
    if result is None:
        logger.info("Evaluation %s not found", evaluation_id)
        raise HTTPException(status_code=404, detail="Evaluation not found")
    return EvaluationEnvelope(data=result)
