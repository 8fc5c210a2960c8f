# =============================================================================
# API Response Models — Pydantic V2 Schemas
# =============================================================================
#
# These models define the shape of data coming OUT of the API.
# Every endpoint answers with the same envelope:
#   success → {"success": true, "data": ...}
#   failure → {"success": false, "error": "...", ...}
#
# DESIGN DECISION: Separate response models from DB models
# EvaluationResponse is built from the ORM row via from_attributes, so
# the `metadata_` column name never leaks into the public contract.
# =============================================================================

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EvaluationResponse(BaseModel):
    """A stored evaluation as returned to clients."""

    id: str
    prompt: str
    result: str = Field(description="Prmtr's answer to the prompt")
    assessment: str | None = Field(
        default=None,
        description="Evaluator agent's free-text assessment of the answer",
    )
    metadata: dict[str, Any] | None = Field(
        default=None,
        validation_alias="metadata_",
        description="Plan step count, Prmtr metadata and timestamps",
    )
    created_at: datetime

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class EvaluationEnvelope(BaseModel):
    """Response for POST /api/evaluation and GET /api/evaluation/{id}."""

    success: bool = True
    data: EvaluationResponse


class EvaluationHistoryEnvelope(BaseModel):
    """Response for GET /api/evaluation/history."""

    success: bool = True
    data: list[EvaluationResponse]
    count: int


class HealthResponse(BaseModel):
    """Response for GET /api/health: confirms the API is running."""

    success: bool = True
    message: str = "OK"
    timestamp: datetime


class ValidationErrorDetail(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    success: bool = False
    error: str
    details: list[ValidationErrorDetail] | None = None
    stack: str | None = None
