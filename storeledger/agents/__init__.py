"""AI Agents package."""

from storeledger.agents.ai_agents import (
    SUMMARY_PROMPT_TEMPLATE,
    AIServiceError,
    SummaryAgent,
    build_summary_prompt,
)

__all__ = [
    "SUMMARY_PROMPT_TEMPLATE",
    "AIServiceError",
    "SummaryAgent",
    "build_summary_prompt",
]
