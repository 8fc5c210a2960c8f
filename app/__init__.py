# =============================================================================
# Prmtr Evaluation Agent
# =============================================================================
# Evaluates natural-language business-intelligence queries against Prmtr AI
# with a plan-then-execute agent pipeline: a planner agent drafts an
# evaluation plan, Prmtr answers the query, and an evaluator agent scores
# the answer. Successful runs are stored and served over a FastAPI API.
#
# Package structure:
#   app/
#   ├── api/          → FastAPI routes, dependencies, error handlers,
#   │                    logging + security-header middleware
#   ├── agents/       → LangGraph pipeline (context → plan → execute →
#   │                    evaluate)
#   ├── db/           → Async engine, ORM model, evaluation repository
#   ├── models/       → Pydantic V2 request/response schemas
#   └── services/     → LLM providers, Prmtr client, evaluation service,
#                        rate limiter
# =============================================================================
