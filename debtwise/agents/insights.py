"""
Insight Agent

DESIGN DECISION: The LLM is OPTIONAL decoration on top of the ledger.
It reads a summary of debts and returns opaque text. It never writes to
the ledger and none of its output feeds back into balances or scores.

BOUNDARIES:
- CAN: Comment on patterns, propose a settlement plan, draft a reminder
- CANNOT: Change any debt, group or payment
- NEVER raises: every failure path (no API key, timeout, API error,
  empty response) returns a fixed fallback string

Each call is retried with exponential backoff and the whole call,
retries included, is bounded by GEMINI_TIMEOUT_SECONDS. Cancelling a
call never touches ledger state.
"""

import asyncio
import json
from typing import Any, Optional, Sequence

import google.generativeai as genai
import structlog
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from debtwise.audit import AuditLogger
from debtwise.config import GeminiSettings, get_settings
from debtwise.models.ledger import Debt, DebtType


logger = structlog.get_logger(__name__)

EMPTY_LEDGER_MESSAGE = "Add some debts to get AI-powered insights on your financial balance!"
INSIGHT_EMPTY_FALLBACK = "Unable to generate insights at this moment."
INSIGHT_FAILURE_FALLBACK = (
    "The AI is currently analyzing your finances. Please try again in a moment."
)
SIMPLIFY_EMPTY_FALLBACK = "No simplification needed or available."
SIMPLIFY_FAILURE_FALLBACK = (
    "Failed to calculate simplification. Please check your connection."
)
NUDGE_EMPTY_FALLBACK = "Hey, just a reminder about our balance!"
NUDGE_FAILURE_FALLBACK = (
    "Hey, just checking in on our pending balance when you have a moment!"
)


def nudge_tone(reliability: float) -> str:
    """Friendlier tone for more reliable contacts."""
    if reliability > 80:
        return "very friendly and casual"
    if reliability > 50:
        return "polite but clear"
    return "firm and professional"


class InsightAgent:
    """
    Gemini-backed text generation for the dashboard.

    Usage:
        agent = InsightAgent()
        text = await agent.debt_insights(ledger.with_current_amounts())

    Pass `model` to use any object exposing an async
    generate_content_async(prompt, generation_config=...) (tests use fakes).
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Optional[Any] = None,
        audit_logger: Optional[AuditLogger] = None,
        currency: Optional[str] = None,
    ):
        self._settings = settings or get_settings().gemini
        self._currency = currency or get_settings().ledger.default_currency
        self._audit_logger = audit_logger
        self._model = model
        if self._model is None and self._settings.is_configured:
            self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )

    @property
    def is_available(self) -> bool:
        return self._model is not None

    async def _call_with_retry(self, prompt: str, temperature: float) -> str:
        generation_config = {
            "temperature": temperature,
            "max_output_tokens": self._settings.max_tokens,
        }
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._settings.max_retries),
            wait=wait_exponential(multiplier=1, min=2, max=10),
            reraise=True,
        ):
            with attempt:
                response = await self._model.generate_content_async(
                    prompt,
                    generation_config=generation_config,
                )
                return response.text or ""
        return ""

    async def _generate(self, prompt: str, temperature: float) -> Optional[str]:
        """
        Run one prompt.

        Returns the stripped text ("" if the model answered with nothing),
        or None if the call failed.
        """
        if self._model is None:
            logger.info("insight_agent_not_configured")
            return None

        try:
            text = await asyncio.wait_for(
                self._call_with_retry(prompt, temperature),
                timeout=self._settings.timeout_seconds,
            )
        except Exception as e:
            logger.warning("insight_generation_failed", error=str(e))
            if self._audit_logger:
                self._audit_logger.log_external_service_error("gemini", str(e))
            return None

        return text.strip()

    async def debt_insights(self, debts: Sequence[Debt]) -> str:
        """Short observation about the ledger (max 3 sentences)."""
        if not debts:
            return EMPTY_LEDGER_MESSAGE

        summary = [
            {
                "type": "You owe" if debt.type == DebtType.I_OWE else "Owed to you",
                "name": debt.name,
                "amount": debt.amount,
                "description": debt.description,
                "date": debt.date.isoformat(),
            }
            for debt in debts
        ]

        prompt = f"""Analyze these debts and provide a short, helpful financial insight (max 3 sentences).
Look for patterns, like if the same person appears multiple times, or if the total balance is heavily skewed.
Be encouraging and concise.

Debts Data: {json.dumps(summary)}"""

        text = await self._generate(prompt, temperature=self._settings.temperature)
        if text is None:
            return INSIGHT_FAILURE_FALLBACK
        return text or INSIGHT_EMPTY_FALLBACK

    async def simplify_group_debts(self, group_name: str, debts: Sequence[Debt]) -> str:
        """Propose the fewest transfers that settle everyone in a group."""
        summary = [
            {
                "from": "Me" if debt.type == DebtType.I_OWE else debt.name,
                "to": debt.name if debt.type == DebtType.I_OWE else "Me",
                "amount": debt.amount,
            }
            for debt in debts
        ]

        prompt = f"""You are a financial simplification assistant for a group called "{group_name}".
The goal is to minimize the total number of transactions needed to settle all debts.

Current debts:
{json.dumps(summary)}

Instructions:
1. Calculate the net balance for every individual (including "Me").
2. Propose the most efficient way to settle everyone to zero.
3. Format your response as a clear, bulleted list of transactions.
4. Be very concise."""

        text = await self._generate(prompt, temperature=0.1)
        if text is None:
            return SIMPLIFY_FAILURE_FALLBACK
        return text or SIMPLIFY_EMPTY_FALLBACK

    async def nudge_message(
        self,
        name: str,
        amount: float,
        is_owed_to_me: bool,
        reliability: float,
    ) -> str:
        """Draft a short reminder; the tone follows the contact's reliability."""
        if is_owed_to_me:
            balance_line = f"They owe me {amount} {self._currency}."
        else:
            balance_line = (
                f"I owe them {amount} {self._currency} "
                "and want to acknowledge it."
            )

        prompt = f"""Draft a {nudge_tone(reliability)} reminder message for {name}.
{balance_line}
Keep it under 30 words. No subject line. Just the message body."""

        text = await self._generate(prompt, temperature=0.8)
        if text is None:
            return NUDGE_FAILURE_FALLBACK
        return text or NUDGE_EMPTY_FALLBACK
