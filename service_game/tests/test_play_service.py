"""
Unit tests for the play orchestration and choice provider.
"""

import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_game.app.rules.models import Choice, Outcome, PlayOutcome, PlayRecord, ResultResponse
from service_game.app.services.choices import RandomChoiceProvider
from service_game.app.services.play import PlayService
from service_game.app.services.result import ApplicationError, ApplicationErrorType, OperationResult
from shared.metrics import MetricsCollector
from shared.retry import RetryError


def record(username="alice", outcome=Outcome.WIN):
    return PlayRecord(username=username, played_at=datetime(2024, 1, 1, tzinfo=timezone.utc), outcome=outcome)


class TestRandomChoiceProvider:
    """Test cases for RandomChoiceProvider."""

    @pytest.fixture
    def client(self):
        client = MagicMock()
        client.get_random_number = AsyncMock()
        return client

    def test_get_all_choices(self, client):
        """Test the catalogue lists all five choices by id."""
        provider = RandomChoiceProvider(client)

        choices = provider.get_all_choices()

        assert [(c.id, c.name) for c in choices] == [
            (1, "Rock"), (2, "Paper"), (3, "Scissors"), (4, "Lizard"), (5, "Spock")
        ]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw,expected", [
        (7, Choice.SCISSORS),
        (2, Choice.SCISSORS),
        (0, Choice.ROCK),
        (4, Choice.SPOCK),
        (5, Choice.ROCK),
        (64, Choice.SPOCK),
    ])
    async def test_get_opponent_choice_normalizes(self, client, raw, expected):
        """Test raw numbers map to (raw mod 5) + 1."""
        client.get_random_number.return_value = raw
        provider = RandomChoiceProvider(client)

        choice = await provider.get_opponent_choice()

        assert choice == expected
        assert int(choice) == (raw % 5) + 1

    @pytest.mark.asyncio
    async def test_get_random_choice_shape(self, client):
        """Test the public random choice carries id and name."""
        client.get_random_number.return_value = 3
        provider = RandomChoiceProvider(client)

        choice = await provider.get_random_choice()

        assert choice.id == 4
        assert choice.name == "Lizard"


class TestPlayService:
    """Test cases for PlayService."""

    @pytest.fixture
    def choices(self):
        provider = MagicMock()
        provider.get_opponent_choice = AsyncMock()
        return provider

    @pytest.fixture
    def store(self):
        store = MagicMock()
        store.save = AsyncMock(return_value=True)
        store.delete_all = AsyncMock(return_value=True)
        store.delete_for_user = AsyncMock(return_value=True)
        store.list_for_user = AsyncMock(return_value=[])
        store.list_latest = AsyncMock(return_value=[])
        return store

    @pytest.fixture
    def metrics(self):
        return MetricsCollector("game")

    @pytest.fixture
    def service(self, choices, store, metrics):
        return PlayService(choices, store, latest_results_count=10, metrics=metrics)

    @pytest.mark.asyncio
    async def test_play_win_saved(self, service, choices, store, metrics):
        """Test Rock against Scissors wins and is stored."""
        choices.get_opponent_choice.return_value = Choice.SCISSORS

        result = await service.play("testUser", Choice.ROCK)

        assert result.succeeded is True
        assert result.error is None
        assert result.value == PlayOutcome(outcome=Outcome.WIN, player=Choice.ROCK, computer=Choice.SCISSORS)
        store.save.assert_awaited_once_with("testUser", "Win")
        assert metrics.sample("plays_total", outcome="Win", saved="true") == 1

    @pytest.mark.asyncio
    async def test_play_save_failure_keeps_value(self, service, choices, store):
        """Test a failed save still reports the game, with succeeded False."""
        choices.get_opponent_choice.return_value = Choice.PAPER
        store.save.return_value = False

        result = await service.play("testUser", Choice.PAPER)

        assert result.succeeded is False
        assert result.value is not None
        assert result.value.outcome == Outcome.TIE
        assert result.value.player == Choice.PAPER
        assert result.value.computer == Choice.PAPER
        store.save.assert_awaited_once_with("testUser", "Tie")

    @pytest.mark.asyncio
    async def test_play_lose(self, service, choices, store):
        """Test Paper against Scissors loses."""
        choices.get_opponent_choice.return_value = Choice.SCISSORS

        result = await service.play("testUser", Choice.PAPER)

        assert result.value.outcome == Outcome.LOSE
        store.save.assert_awaited_once_with("testUser", "Lose")

    @pytest.mark.asyncio
    async def test_play_steps_in_order(self, choices, store):
        """Test the opponent is resolved before anything is stored."""
        calls = []
        choices.get_opponent_choice.side_effect = lambda: calls.append("opponent") or Choice.SPOCK

        async def save(username, label):
            calls.append(("save", label))
            return True

        store.save = AsyncMock(side_effect=save)
        service = PlayService(choices, store, latest_results_count=5)

        await service.play("u", Choice.ROCK)

        assert calls == ["opponent", ("save", "Lose")]

    @pytest.mark.asyncio
    async def test_play_storage_exhaustion_propagates(self, service, choices, store):
        """Test fatal storage errors are raised, not wrapped."""
        choices.get_opponent_choice.return_value = Choice.ROCK
        store.save.side_effect = RetryError("down", last_exception=OSError(), attempts=4)

        with pytest.raises(RetryError):
            await service.play("u", Choice.ROCK)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("username", [None, ""])
    async def test_reset_all_success(self, service, store, username):
        """Test an absent username resets everything."""
        result = await service.reset_results(username)

        assert result.succeeded is True
        assert result.error is None
        store.delete_all.assert_awaited_once()
        store.list_for_user.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reset_all_failure(self, service, store):
        """Test a delete-all that removes nothing is unprocessable."""
        store.delete_all.return_value = False

        result = await service.reset_results(None)

        assert result.succeeded is False
        assert result.error.kind == ApplicationErrorType.UNPROCESSABLE_ENTITY

    @pytest.mark.asyncio
    async def test_reset_user_not_found(self, service, store):
        """Test resetting a user without results is NotFound and deletes nothing."""
        store.list_for_user.return_value = []

        result = await service.reset_results("unknownUser")

        assert result.succeeded is False
        assert result.error.kind == ApplicationErrorType.NOT_FOUND
        store.delete_for_user.assert_not_awaited()
        store.delete_all.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reset_user_success(self, service, store):
        """Test resetting a user with results deletes them."""
        store.list_for_user.return_value = [record()]

        result = await service.reset_results("alice")

        assert result.succeeded is True
        store.list_for_user.assert_awaited_once_with("alice")
        store.delete_for_user.assert_awaited_once_with("alice")

    @pytest.mark.asyncio
    async def test_reset_user_delete_fails(self, service, store):
        """Test a failed user delete is unprocessable."""
        store.list_for_user.return_value = [record()]
        store.delete_for_user.return_value = False

        result = await service.reset_results("alice")

        assert result.succeeded is False
        assert result.error.kind == ApplicationErrorType.UNPROCESSABLE_ENTITY

    @pytest.mark.asyncio
    async def test_get_latest_results_uses_configured_limit(self, service, store):
        """Test the configured count is passed through and records mapped."""
        store.list_latest.return_value = [record("alice", Outcome.WIN), record("bob", Outcome.TIE)]

        results = await service.get_latest_results()

        store.list_latest.assert_awaited_once_with(10)
        assert all(isinstance(r, ResultResponse) for r in results)
        assert [(r.username, r.result) for r in results] == [("alice", Outcome.WIN), ("bob", Outcome.TIE)]


class TestOperationResult:
    """Test cases for the OperationResult envelope."""

    def test_success(self):
        result = OperationResult.success(42)

        assert result.succeeded is True
        assert result.value == 42
        assert result.error is None

    def test_failure(self):
        result = OperationResult.failure(ApplicationErrorType.NOT_FOUND, "missing")

        assert result.succeeded is False
        assert result.value is None
        assert result.error == ApplicationError(kind=ApplicationErrorType.NOT_FOUND, message="missing")
