"""
Tests for the insight agent.

No real API calls: a fake model stands in for Gemini.
"""

import asyncio
from datetime import date
from types import SimpleNamespace

import pytest

from debtwise.agents import InsightAgent, nudge_tone
from debtwise.agents.insights import (
    EMPTY_LEDGER_MESSAGE,
    INSIGHT_EMPTY_FALLBACK,
    INSIGHT_FAILURE_FALLBACK,
    NUDGE_EMPTY_FALLBACK,
    NUDGE_FAILURE_FALLBACK,
    SIMPLIFY_FAILURE_FALLBACK,
)
from debtwise.audit import AuditLogger
from debtwise.config import GeminiSettings
from debtwise.models.audit import AuditEventType
from debtwise.models.ledger import DebtType


class FakeModel:
    """Records prompts and replays a scripted outcome per call."""

    def __init__(self, *outcomes, delay=0.0):
        self.outcomes = list(outcomes)
        self.delay = delay
        self.calls = []

    async def generate_content_async(self, prompt, generation_config=None):
        self.calls.append((prompt, generation_config))
        if self.delay:
            await asyncio.sleep(self.delay)
        outcome = self.outcomes.pop(0) if self.outcomes else ""
        if isinstance(outcome, Exception):
            raise outcome
        return SimpleNamespace(text=outcome)


def make_agent(model=None, audit_logger=None, **settings):
    settings.setdefault("api_key", None)
    settings.setdefault("max_retries", 1)
    return InsightAgent(
        settings=GeminiSettings(**settings),
        model=model,
        audit_logger=audit_logger,
        currency="USD",
    )


class TestDebtInsights:
    """Tests for debt_insights."""

    def test_empty_ledger_skips_the_model(self):
        """Test no call is made when there is nothing to analyze."""
        model = FakeModel("unused")
        assert asyncio.run(make_agent(model).debt_insights([])) == EMPTY_LEDGER_MESSAGE
        assert model.calls == []

    def test_returns_model_text(self, make_debt):
        """Test the model's answer is returned stripped."""
        model = FakeModel("  You are owed more than you owe.  ")
        text = asyncio.run(make_agent(model).debt_insights([make_debt(name="Alex")]))
        assert text == "You are owed more than you owe."
        prompt, _ = model.calls[0]
        assert "Alex" in prompt
        assert "Owed to you" in prompt

    def test_empty_answer_falls_back(self, make_debt):
        """Test an empty response uses the fixed message."""
        text = asyncio.run(make_agent(FakeModel("")).debt_insights([make_debt()]))
        assert text == INSIGHT_EMPTY_FALLBACK

    def test_error_falls_back_and_is_audited(self, make_debt, audit_storage):
        """Test an API error never propagates."""
        logger = AuditLogger(audit_storage)
        agent = make_agent(FakeModel(RuntimeError("quota")), audit_logger=logger)

        assert asyncio.run(agent.debt_insights([make_debt()])) == INSIGHT_FAILURE_FALLBACK
        assert audit_storage.events[-1].event_type == AuditEventType.EXTERNAL_SERVICE_ERROR

    def test_not_configured_falls_back(self, make_debt):
        """Test a missing API key means fallbacks only."""
        agent = make_agent()
        assert agent.is_available is False
        assert asyncio.run(agent.debt_insights([make_debt()])) == INSIGHT_FAILURE_FALLBACK

    def test_timeout_falls_back(self, make_debt):
        """Test a slow model is cut off."""
        agent = make_agent(FakeModel("late", delay=1.0), timeout_seconds=0.05)
        assert asyncio.run(agent.debt_insights([make_debt()])) == INSIGHT_FAILURE_FALLBACK

    def test_transient_error_is_retried(self, make_debt):
        """Test a failed attempt is retried before falling back."""
        model = FakeModel(RuntimeError("503"), "Recovered.")
        agent = make_agent(model, max_retries=2)
        assert asyncio.run(agent.debt_insights([make_debt()])) == "Recovered."
        assert len(model.calls) == 2


class TestSimplifyGroupDebts:
    """Tests for simplify_group_debts."""

    def test_prompt_describes_transfers(self, make_debt):
        """Test each debt becomes a from/to transfer and temperature is low."""
        model = FakeModel("- Sam pays Me 10")
        debts = [make_debt(name="Sam", debt_type=DebtType.I_OWE, amount=10)]

        text = asyncio.run(make_agent(model).simplify_group_debts("Roommates", debts))

        assert text == "- Sam pays Me 10"
        prompt, config = model.calls[0]
        assert '"Roommates"' in prompt
        assert '"from": "Me"' in prompt
        assert config["temperature"] == 0.1

    def test_failure_falls_back(self, make_debt):
        """Test errors return the fixed message."""
        agent = make_agent(FakeModel(ValueError("blocked")))
        assert asyncio.run(agent.simplify_group_debts("Work", [make_debt()])) == SIMPLIFY_FAILURE_FALLBACK


class TestNudgeMessage:
    """Tests for nudge_message."""

    @pytest.mark.parametrize("reliability,tone", [
        (95, "very friendly and casual"),
        (80, "polite but clear"),
        (51, "polite but clear"),
        (50, "firm and professional"),
    ])
    def test_tone_follows_reliability(self, reliability, tone):
        """Test the tone bands."""
        assert nudge_tone(reliability) == tone

    def test_prompt_mentions_direction(self):
        """Test the owed-to-me wording."""
        model = FakeModel("Hey Alex!")
        text = asyncio.run(make_agent(model).nudge_message("Alex", 25.0, True, 90))
        assert text == "Hey Alex!"
        prompt, _ = model.calls[0]
        assert "They owe me 25.0 USD." in prompt
        assert "very friendly and casual" in prompt

    def test_empty_and_failed_nudges(self):
        """Test both nudge fallbacks."""
        empty = asyncio.run(make_agent(FakeModel("   ")).nudge_message("Alex", 5, False, 10))
        failed = asyncio.run(make_agent(FakeModel(RuntimeError("x"))).nudge_message("Alex", 5, False, 10))
        assert empty == NUDGE_EMPTY_FALLBACK
        assert failed == NUDGE_FAILURE_FALLBACK
