# =============================================================================
# Evaluation Repository — Persistence Boundary
# =============================================================================
# The only code that reads or writes evaluation_results. Operates on a
# session supplied by the caller (normally get_async_session).
# =============================================================================

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import EvaluationResult


class EvaluationRepository:
    """create / find_many / find_unique over evaluation_results."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        prompt: str,
        result: str,
        assessment: str | None,
        metadata: dict[str, Any] | None,
    ) -> EvaluationResult:
        """Insert one evaluation and return it with id and created_at set."""
        record = EvaluationResult(
            prompt=prompt,
            result=result,
            assessment=assessment,
            metadata_=metadata or {},
        )
        self._session.add(record)
        await self._session.commit()
        await self._session.refresh(record)
        return record

    async def find_many(
        self,
        take: int,
        newest_first: bool = True,
    ) -> list[EvaluationResult]:
        order = (
            EvaluationResult.created_at.desc()
            if newest_first
            else EvaluationResult.created_at.asc()
        )
        stmt = select(EvaluationResult).order_by(order).limit(take)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def find_unique(self, evaluation_id: str) -> EvaluationResult | None:
        stmt = select(EvaluationResult).where(EvaluationResult.id == evaluation_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()
