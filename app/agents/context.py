# =============================================================================
# Context Builder — Shared Agent Context
# =============================================================================
#
# Assembles the static domain descriptions (Meama, Prmtr AI) and the
# caller's prompt into one immutable AgentContext that both the planner
# and the executor read.
#
# No I/O and no randomness: the same prompt always yields an equal
# context.
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass

MEAMA_CONTEXT = """\
Meama is a comprehensive e-commerce analytics and business intelligence platform that helps businesses:
- Track sales performance and revenue metrics
- Analyze customer behavior and segmentation
- Monitor inventory and supply chain metrics
- Generate actionable insights for business growth
- Provide real-time dashboards and reporting
- Support multi-channel e-commerce operations"""

PRMTR_CONTEXT = """\
Prmtr AI is an advanced analytics platform that provides:
- Natural language querying of business data
- AI-powered insights and recommendations
- Automated data analysis and reporting
- Integration with various data sources
- Real-time analytics and visualization
- Predictive analytics capabilities"""


@dataclass(frozen=True)
class AgentContext:
    """Per-run context shared by the planner and the executor."""

    prompt: str
    meama_context: str
    prmtr_context: str


def build_context(prompt: str) -> AgentContext:
    """Wrap a prompt with the static Meama and Prmtr descriptions."""
    return AgentContext(
        prompt=prompt,
        meama_context=MEAMA_CONTEXT,
        prmtr_context=PRMTR_CONTEXT,
    )
