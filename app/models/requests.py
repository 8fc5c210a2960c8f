# =============================================================================
# API Request Models — Pydantic V2 Schemas
# =============================================================================
#
# These models define the shape of data coming INTO the API.
# FastAPI uses them for:
# 1. Request body validation (errors are reshaped into the 400
#    "Validation failed" envelope by app/api/errors.py)
# 2. OpenAPI documentation generation (visible at /docs)
# =============================================================================

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_HISTORY_LIMIT = 10
MAX_HISTORY_LIMIT = 100

# Leading integer of a query string: "5abc" → 5, "2.7" → 2
_LEADING_INT = re.compile(r"\s*([-+]?\d+)")


class EvaluationRequest(BaseModel):
    """
    Request body for POST /api/evaluation.

    Example:
        {
            "prompt": "What was the average order value over the last 3 months?",
            "context": "Q3 planning review"
        }
    """

    prompt: str = Field(
        ...,
        min_length=1,
        max_length=1000,
        description="The business-intelligence query to evaluate",
        examples=["average order value last 3 months"],
    )

    # Free-form caller note. Logged with the request; it does not change
    # how the query is planned, executed or assessed.
    context: str | None = Field(
        default=None,
        description="Optional caller-supplied context for the query",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"prompt": "average order value last 3 months"},
                {
                    "prompt": "Which customer segment grew fastest in Q2?",
                    "context": "Quarterly business review",
                },
            ]
        }
    )


class EvaluationHistoryQuery(BaseModel):
    """
    Query parameters for GET /api/evaluation/history.

    DESIGN DECISION: `limit` is clamped, not rejected. "5" and 5 are both
    accepted, strings are read up to the first non-digit ("5abc" → 5,
    "2.7" → 2), out-of-range values are pulled into [1, 100], and input
    without a leading integer falls back to the default of 10.
    """

    limit: int = DEFAULT_HISTORY_LIMIT

    @field_validator("limit", mode="before")
    @classmethod
    def clamp_limit(cls, value: object) -> int:
        if value is None or isinstance(value, bool):
            return DEFAULT_HISTORY_LIMIT
        if isinstance(value, str):
            match = _LEADING_INT.match(value)
            if match is None:
                return DEFAULT_HISTORY_LIMIT
            number = int(match.group(1))
        else:
            try:
                number = int(value)
            except (TypeError, ValueError, OverflowError):
                return DEFAULT_HISTORY_LIMIT
        return min(max(number, 1), MAX_HISTORY_LIMIT)
