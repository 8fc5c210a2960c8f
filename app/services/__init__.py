# =============================================================================
# Services Package — Business Logic
# =============================================================================
#   - llm.py: Multi-provider LLM abstraction (Anthropic, OpenAI-compatible)
#   - prmtr.py: Prmtr AI analytics API client (httpx)
#   - evaluation.py: Evaluation service (pipeline + persistence)
#   - rate_limiter.py: Redis sliding-window rate limiting per client
# =============================================================================
