# =============================================================================
# Pipeline Errors
# =============================================================================
# Stages either recover locally (default plan, placeholder assessment,
# simulated Prmtr answer) or raise one of these. The orchestrator turns
# any PipelineError into a failed ExecutionResult, so none of them
# escapes run_pipeline().
# =============================================================================


class PipelineError(Exception):
    """Base class for fatal pipeline stage failures."""


class PlanCreationError(PipelineError):
    """The planning LLM call failed; no partial plan is produced."""


class QueryExecutionError(PipelineError):
    """Prmtr could not be reached and no fallback is allowed."""
