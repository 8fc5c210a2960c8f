# =============================================================================
# Database Models — SQLAlchemy ORM
# =============================================================================
#
# SCHEMA OVERVIEW:
#
# ┌─────────────────────────────────────┐
# │  evaluation_results                 │
# ├─────────────────────────────────────┤
# │ id (PK, uuid4 string)               │
# │ prompt (text)                       │
# │ result (text)                       │
# │ assessment (text, nullable)         │
# │ metadata_ (json/jsonb, nullable)    │
# │ created_at (timestamptz, indexed)   │
# └─────────────────────────────────────┘
#
# DESIGN DECISIONS:
#
# 1. One row per SUCCESSFUL pipeline run. Failed runs are reported to the
#    caller and never written, so `result` is never empty.
#
# 2. Rows are immutable after insert. History and lookup are read-only.
#
# 3. String UUID primary keys. Evaluation IDs are handed out in URLs;
#    sequential integers would leak volume and be trivially enumerable.
#
# 4. `metadata_` holds plan step count, Prmtr metadata and timestamps.
#    JSONB on PostgreSQL, plain JSON elsewhere. The trailing underscore
#    avoids conflict with SQLAlchemy's `.metadata`.
# =============================================================================

import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """SQLAlchemy declarative base class."""

    pass


def _new_id() -> str:
    return str(uuid.uuid4())


class EvaluationResult(Base):
    """
    A persisted evaluation: the prompt, Prmtr's answer, and the
    evaluator's assessment of it.
    """

    __tablename__ = "evaluation_results"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)

    # The business-intelligence query as submitted
    prompt: Mapped[str] = mapped_column(Text, nullable=False)

    # Prmtr's answer (or the simulated development answer)
    result: Mapped[str] = mapped_column(Text, nullable=False)

    # Free-text critique from the evaluator agent
    assessment: Mapped[str | None] = mapped_column(Text, nullable=True)

    metadata_: Mapped[dict | None] = mapped_column(
        "metadata",
        JSON().with_variant(JSONB, "postgresql"),
        nullable=True,
    )

    # History is always read newest-first
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<EvaluationResult(id={self.id!r}, prompt={self.prompt[:40]!r})>"
