"""
Choice catalogue and opponent resolution.
"""

from typing import List

from shared.logging import get_logger
from ..adapters.random_client import RandomNumberClient
from ..rules.models import Choice, ChoiceResponse


class RandomChoiceProvider:
    """Resolves the computer's move from the random-number service."""

    def __init__(self, client: RandomNumberClient):
        self.client = client
        self.logger = get_logger("game.choices")

    def get_all_choices(self) -> List[ChoiceResponse]:
        """Every possible choice, ordered by id."""
        self.logger.info("Retrieving all choices")
        return [ChoiceResponse.from_choice(choice) for choice in Choice]

    async def get_opponent_choice(self) -> Choice:
        """A valid choice derived from the upstream (or fallback) number."""
        raw = await self.client.get_random_number()
        choice = Choice.from_random_number(raw)

        self.logger.info("Resolved opponent choice", random_number=raw, choice=choice.label)
        return choice

    async def get_random_choice(self) -> ChoiceResponse:
        return ChoiceResponse.from_choice(await self.get_opponent_choice())
