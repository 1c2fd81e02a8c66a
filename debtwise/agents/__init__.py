"""AI Agents package."""

from debtwise.agents.insights import InsightAgent, nudge_tone

__all__ = ["InsightAgent", "nudge_tone"]
