# =============================================================================
# Prmtr AI Client — External Analytics API
# =============================================================================
#
# Thin async client for the Prmtr AI natural-language analytics endpoint.
#
# REQUEST:
#   POST {PRMTR_API_URL}/query
#   Authorization: Bearer {PRMTR_API_KEY}
#   {"query": "<prompt>", "context": "E-commerce analytics and business intelligence"}
#
# RESPONSE:
#   Prmtr deployments have answered under different keys over time, so the
#   answer is taken from the first non-empty of `response`, `answer`,
#   `result`. If none is present the whole payload is serialised as text
#   so the evaluator still has something to assess.
#
# DESIGN DECISION: This client raises on every failure (transport error,
# timeout, non-2xx). Whether a failure is fatal or replaced by a simulated
# answer is a policy decision that belongs to the query executor
# (app/agents/executor.py), not to the transport.
# =============================================================================

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from app.config import settings

logger = logging.getLogger(__name__)

QUERY_PATH = "/query"
DOMAIN_CONTEXT = "E-commerce analytics and business intelligence"

# Keys that may carry the textual answer, in order of preference
_ANSWER_KEYS = ("response", "answer", "result")


@dataclass
class PrmtrResult:
    """Answer text plus whatever metadata Prmtr attached to it."""

    response: str
    metadata: dict[str, Any] = field(default_factory=dict)


def resolve_query_url(base_url: str) -> str:
    """Append the query path unless the configured URL already ends with it."""
    if base_url.endswith(QUERY_PATH):
        return base_url
    return f"{base_url}{QUERY_PATH}"


def parse_payload(payload: Any) -> PrmtrResult:
    """
    Normalise a Prmtr JSON payload into a PrmtrResult.

    Non-object payloads (lists, bare strings) have no answer keys and
    are serialised whole.
    """
    if not isinstance(payload, dict):
        return PrmtrResult(response=json.dumps(payload))

    answer = next(
        (payload[key] for key in _ANSWER_KEYS if payload.get(key)),
        None,
    )
    if answer is None:
        answer = json.dumps(payload)
    elif not isinstance(answer, str):
        answer = json.dumps(answer)

    metadata = payload.get("metadata") or {}
    if not isinstance(metadata, dict):
        metadata = {"value": metadata}

    return PrmtrResult(response=answer, metadata=metadata)


class PrmtrClient:
    """Async client for the Prmtr query endpoint."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.url = resolve_query_url(base_url or settings.prmtr_api_url)
        self._api_key = api_key if api_key is not None else settings.prmtr_api_key
        self.timeout = timeout or settings.prmtr_timeout_seconds

    async def query(self, prompt: str) -> PrmtrResult:
        """
        Send a natural-language query to Prmtr AI.

        Raises:
            httpx.HTTPError: On transport failure, timeout, or non-2xx status.
            ValueError: If the body is not valid JSON.
        """
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        body = {"query": prompt, "context": DOMAIN_CONTEXT}

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(self.url, json=body, headers=headers)
            response.raise_for_status()

        logger.info("Prmtr responded: status=%s", response.status_code)
        return parse_payload(response.json())


# Lazy singleton; the client holds only configuration
_client: PrmtrClient | None = None


def get_prmtr_client() -> PrmtrClient:
    """Return the configured Prmtr client."""
    global _client
    if _client is None:
        _client = PrmtrClient()
    return _client
