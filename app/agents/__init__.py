# =============================================================================
# Agents Package — Plan-then-Execute Pipeline
# =============================================================================
#   - context.py: static Meama / Prmtr context wrapped around the prompt
#   - planner.py: LLM-drafted evaluation plan, parsed from a numbered list,
#     with a fixed default plan when nothing parses
#   - executor.py: Prmtr query with a simulated fallback outside production
#   - evaluator.py: LLM assessment of Prmtr's answer (never fails the run)
#   - orchestrator.py: LangGraph graph tying the stages together
#   - errors.py: fatal stage errors
# =============================================================================
