# =============================================================================
# Models Package — Pydantic V2 Schemas
# =============================================================================
#   - requests.py: POST /api/evaluation body, history query parameters
#   - responses.py: success/error envelopes and the public evaluation shape
# ORM rows live in app/db/models.py and are converted via from_attributes.
# =============================================================================
