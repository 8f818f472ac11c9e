"""
AI Summarization Agent for Store Ledger

The agent turns a prompt into free text with Google Gemini. It is used
two ways:
1. A question typed by the user, sent as-is (trimmed)
2. A generated report prompt that embeds the full transaction set

BOUNDARIES:
- The agent never reads or writes the ledger; it only sees the
  transactions it is handed.
- The response is opaque text, passed through unmodified.
- One call per request: no retries, no conversation state.
"""

import json
from typing import Any, Iterable, Optional

import google.generativeai as genai

from storeledger.config import get_settings
from storeledger.models.transaction import Transaction


SUMMARY_PROMPT_TEMPLATE = """You are a financial expert. Analyze the following JSON list of transactions (income and expenses) and write a report with:

1. Total income and total expenses
2. Most frequent store
3. Largest transaction
4. Was there any saving? What is the final balance?
5. One useful, personalized tip

Transactions:
{transactions_json}
"""


class AIServiceError(Exception):
    """The summarization service call failed."""
    pass


def build_summary_prompt(transactions: Iterable[Transaction]) -> str:
    """Embed the transactions as pretty-printed JSON in the five-part report prompt."""
    payload = [t.to_wire_dict() for t in transactions]
    return SUMMARY_PROMPT_TEMPLATE.format(
        transactions_json=json.dumps(payload, indent=2, ensure_ascii=False),
    )


class SummaryAgent:
    """
    Gemini-backed summarization client.

    The model is configured on first use, so a missing API key surfaces
    as an AIServiceError on the call rather than at startup.
    """

    def __init__(self, model: Optional[Any] = None):
        self._model = model

    def _configure_genai(self) -> Any:
        """Configure Google Generative AI."""
        try:
            settings = get_settings().ai
        except Exception as e:
            raise AIServiceError(f"GEMINI_API_KEY is not configured: {e}")

        genai.configure(api_key=settings.api_key)
        return genai.GenerativeModel(
            model_name=settings.model_name,
            generation_config={
                "temperature": settings.temperature,
                "max_output_tokens": settings.max_tokens,
            }
        )

    @staticmethod
    def _extract_text(response: Any) -> str:
        """Text of the first part of the first candidate."""
        try:
            text = response.candidates[0].content.parts[0].text
        except (AttributeError, IndexError, TypeError):
            raise AIServiceError("Could not extract text from the AI response.")
        if not isinstance(text, str):
            raise AIServiceError("Could not extract text from the AI response.")
        return text

    async def generate(self, prompt: str) -> str:
        """
        Send one prompt and return the model's text.

        Raises:
            AIServiceError: On configuration, network or response-shape failure
        """
        if self._model is None:
            self._model = self._configure_genai()

        try:
            response = await self._model.generate_content_async(prompt)
        except Exception as e:
            raise AIServiceError(f"Network error connecting to Gemini: {e}")

        return self._extract_text(response)
