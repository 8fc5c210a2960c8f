# =============================================================================
# API Package — FastAPI Route Handlers
# =============================================================================
#   - evaluation.py: /api routes (health, evaluate, history, lookup)
#   - deps.py: rate-limit and service dependencies
#   - errors.py: exception handlers producing the error envelope
#   - middleware.py: access log and security headers
# =============================================================================
