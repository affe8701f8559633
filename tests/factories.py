"""Builders for model replies and a scripted completion client."""

from __future__ import annotations

import json


def make_recommendation(
    *,
    inverter: str = "Luminous 5kW Hybrid Inverter",
    batteries: int = 4,
    panels: int = 12,
    subtotal: float = 6_000_000,
    vat: float | None = None,
    total: float | None = None,
) -> dict:
    """A complete recommendation object as the model is asked to return it.

    The defaults pass every check for the 3000 W / 18 kWh household load.
    """
    vat = subtotal * 0.075 if vat is None else vat
    total = subtotal + vat if total is None else total
    return {
        "recommendation": {
            "systemName": "Home Comfort 5kW",
            "components": {
                "inverter": {"name": inverter, "quantity": 1, "warranty": "2 years"},
                "battery": {
                    "name": "200Ah Lithium Battery", "quantity": batteries, "warranty": "5 years",
                },
                "solarPanels": {
                    "name": "450W Mono Panel", "quantity": panels, "warranty": "25 years",
                },
            },
            "pricing": {
                "subtotal": subtotal,
                "vat": vat,
                "totalAmount": total,
                "currency": "NGN",
            },
            "performance": {"dailyGeneration": "21.6 kWh", "backupHours": "8 hours"},
            "suitability": {"rating": "Excellent"},
        }
    }


def make_reply(**kwargs) -> str:
    """Model reply text wrapping the JSON in prose and a code fence."""
    body = json.dumps(make_recommendation(**kwargs), indent=2)
    return f"Here is the optimal system for you:\n```json\n{body}\n```\nLet me know if you need more."


class FakeCompletionClient:
    """Replays canned replies in order, repeating the last one."""

    def __init__(self, replies: list[str] | None = None, model: str = "test-model"):
        self.model = model
        self.replies = list(replies or [make_reply()])
        self.prompts: list[str] = []
        self.error: Exception | None = None

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        if len(self.replies) > 1:
            return self.replies.pop(0)
        return self.replies[0]
