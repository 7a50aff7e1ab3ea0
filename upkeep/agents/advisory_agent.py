"""Best-effort risk and cost advisor backed by a Pydantic AI agent.

The advisor is optional. Task creation never waits on it for correctness:
any failure leaves the risk fields unset.
"""

import asyncio
import logging
from typing import Protocol

from pydantic import BaseModel, Field
from pydantic_ai import Agent

from upkeep.core.config import settings
from upkeep.core.logging import span
from upkeep.domain.task import TaskCreate


logger = logging.getLogger(__name__)


class RiskAssessment(BaseModel):
    """Structured advisory output for one task."""

    cascade_risk_score: float = Field(..., ge=0, le=10, description="0-10 likelihood of secondary damage if deferred")
    risk_rationale: str = Field(..., description="One or two sentences explaining the score")
    current_fix_cost: float | None = Field(default=None, ge=0, description="Estimated cost to fix now in USD")
    delayed_fix_cost: float | None = Field(default=None, ge=0, description="Estimated cost if deferred a year in USD")


class Advisor(Protocol):
    """Anything that can assess a task description."""

    async def assess(self, *, title: str, description: str, system_type: str) -> RiskAssessment: ...


_SYSTEM_PROMPT = """You assess residential maintenance tasks.
Given a task, return:
- cascade_risk_score: 0 (cosmetic) to 10 (deferring will almost certainly cause secondary damage)
- risk_rationale: one or two plain sentences
- current_fix_cost and delayed_fix_cost: realistic US dollar estimates, or null when unknown
Be conservative. Never invent details that are not implied by the task."""


class _AgentState:
    """Singleton state for the advisory agent instance."""

    instance: Agent[None, RiskAssessment] | None = None


def _create_agent() -> Agent[None, RiskAssessment]:
    """Create the advisory agent (called once, on first use)."""
    api_key = settings.require_credential("openrouter_api_key", "OpenRouter API key")

    from pydantic_ai.models.openrouter import OpenRouterModel  # noqa: PLC0415
    from pydantic_ai.providers.openrouter import OpenRouterProvider  # noqa: PLC0415

    model = OpenRouterModel(model_name=settings.model_id, provider=OpenRouterProvider(api_key=api_key))

    return Agent(
        model=model,
        output_type=RiskAssessment,
        system_prompt=_SYSTEM_PROMPT,
        retries=1,
    )


def get_agent() -> Agent[None, RiskAssessment]:
    """Get or create the advisory agent instance."""
    if _AgentState.instance is None:
        _AgentState.instance = _create_agent()
    return _AgentState.instance


class PydanticAIAdvisor:
    """Advisor that asks the configured LLM through Pydantic AI."""

    def __init__(self, agent: Agent[None, RiskAssessment] | None = None) -> None:
        self._agent = agent

    async def assess(self, *, title: str, description: str, system_type: str) -> RiskAssessment:
        """Ask the model for a structured risk assessment."""
        agent = self._agent or get_agent()
        prompt = f"Task: {title}\nSystem: {system_type}\nDetails: {description or 'none provided'}"
        result = await agent.run(prompt)
        return result.output


def get_advisor() -> Advisor | None:
    """Return the configured advisor, or None when advisory is disabled or unconfigured."""
    if not settings.advisory_enabled or not settings.openrouter_api_key:
        return None
    return PydanticAIAdvisor()


async def enrich_with_advisory(task: TaskCreate, advisor: Advisor | None) -> TaskCreate:
    """Fill missing risk and cost fields from the advisor.

    Fields the caller already set are kept. Any advisor failure (including a
    timeout) is logged and the task is returned unchanged.
    """
    if advisor is None:
        return task

    with span("advisory.enrich_task"):
        try:
            assessment = await asyncio.wait_for(
                advisor.assess(title=task.title, description=task.description, system_type=task.system_type),
                timeout=settings.advisory_timeout_seconds,
            )
        except Exception:
            logger.warning("Advisory assessment failed for '%s'; leaving risk unset", task.title, exc_info=True)
            return task

        updates = {
            field: value
            for field, value in assessment.model_dump().items()
            if value is not None and getattr(task, field) is None
        }
        logger.info("Advisory enriched task '%s'", task.title, extra={"fields": sorted(updates)})
        return task.model_copy(update=updates)
