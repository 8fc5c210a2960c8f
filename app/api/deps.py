# =============================================================================
# API Dependencies — FastAPI Dependency Injection
# =============================================================================
#
# 1. enforce_rate_limit()      — per-client quota for every /api route
# 2. get_evaluation_service()  — EvaluationService bound to the request's
#                                 database session
#
# DESIGN DECISION: FastAPI dependencies (not middleware) for both.
# - The router opts in once via `dependencies=[Depends(...)]`
# - Tests swap them out via app.dependency_overrides, so no Redis or
#   database is needed to exercise the routes
# =============================================================================

from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.engine import get_async_session
from app.db.repository import EvaluationRepository
from app.services.evaluation import EvaluationService
from app.services.rate_limiter import check_rate_limit


async def enforce_rate_limit(request: Request) -> None:
    """
    Apply the sliding-window quota keyed by client IP.

    Raises:
        HTTPException 429: Rate limit exceeded
    """
    client_ip = request.client.host if request.client else None
    await check_rate_limit(client_ip)


async def get_evaluation_service(
    session: AsyncSession = Depends(get_async_session),
) -> EvaluationService:
    return EvaluationService(EvaluationRepository(session))
