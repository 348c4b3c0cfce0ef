"""
Game orchestration: play a round, reset the scoreboard, list results.
"""

from typing import List, Optional

from shared.logging import get_logger
from shared.metrics import MetricsCollector
from ..persistence.postgres import ResultStore
from ..rules.engine import evaluate
from ..rules.models import Choice, PlayOutcome, ResultResponse
from .choices import RandomChoiceProvider
from .result import ApplicationErrorType, OperationResult


class PlayService:
    """Composes opponent resolution, rule evaluation and persistence."""

    def __init__(self,
                 choices: RandomChoiceProvider,
                 store: ResultStore,
                 latest_results_count: int,
                 metrics: Optional[MetricsCollector] = None):
        self.choices = choices
        self.store = store
        self.latest_results_count = latest_results_count
        self.metrics = metrics
        self.logger = get_logger("game.play")

    async def play(self, username: str, player: Choice) -> OperationResult[PlayOutcome]:
        """Play one round and store its outcome.

        The returned value is filled in even when the save failed;
        ``succeeded`` reports whether the result reached the scoreboard.
        """
        self.logger.info("Playing game", username=username)

        computer = await self.choices.get_opponent_choice()
        outcome = evaluate(player, computer)

        self.logger.info(
            "Result of the game",
            result=outcome.value,
            player=player.label,
            computer=computer.label
        )

        saved = await self.store.save(username, outcome.value)
        if self.metrics is not None:
            self.metrics.record_play(outcome.value, saved)

        return OperationResult(
            succeeded=saved,
            value=PlayOutcome(outcome=outcome, player=player, computer=computer)
        )

    async def reset_results(self, username: Optional[str] = None) -> OperationResult[None]:
        """Delete stored results for one user, or for everyone."""
        if username:
            return await self._reset_results_for_user(username)

        self.logger.info("Resetting all results")
        if await self.store.delete_all():
            return OperationResult.success()

        self.logger.error("Error happened while trying to delete all results")
        return OperationResult.failure(
            ApplicationErrorType.UNPROCESSABLE_ENTITY,
            "Unable to delete all results"
        )

    async def _reset_results_for_user(self, username: str) -> OperationResult[None]:
        self.logger.info("Resetting results for user", username=username)

        # Check-then-delete is not atomic; a concurrent reset can make the
        # delete below hit zero rows and report a failure.
        existing = await self.store.list_for_user(username)
        if not existing:
            return OperationResult.failure(ApplicationErrorType.NOT_FOUND, "Username not found")

        if await self.store.delete_for_user(username):
            return OperationResult.success()

        self.logger.error("Error happened while trying to delete results for user", username=username)
        return OperationResult.failure(
            ApplicationErrorType.UNPROCESSABLE_ENTITY,
            "Unable to delete results"
        )

    async def get_latest_results(self) -> List[ResultResponse]:
        """Latest results, newest first, capped at the configured count."""
        self.logger.info("Fetching latest results", limit=self.latest_results_count)

        records = await self.store.list_latest(self.latest_results_count)
        return [ResultResponse.from_record(record) for record in records]
