# =============================================================================
# Database Package
# =============================================================================
# Provides async SQLAlchemy engine, session management, the ORM model and
# the evaluation repository.
#
# Key exports:
#   - get_async_session: FastAPI dependency for database sessions
#   - EvaluationResult: ORM model for stored evaluations
#   - EvaluationRepository: create / find_many / find_unique
# =============================================================================
