"""
Game data models for the RPSSL Game Service.
"""

from datetime import datetime
from dataclasses import dataclass
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import FrozenSet, Mapping

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator


class Choice(IntEnum):
    """Game moves, identified by stable ids starting at 1."""
    ROCK = 1
    PAPER = 2
    SCISSORS = 3
    LIZARD = 4
    SPOCK = 5

    @property
    def label(self) -> str:
        return self.name.title()

    @classmethod
    def from_random_number(cls, raw: int) -> "Choice":
        """Reduce any integer onto the choice range: ``(raw mod 5) + 1``."""
        return cls((raw % len(cls)) + 1)


class Outcome(str, Enum):
    """Game result from the player's perspective."""
    WIN = "Win"
    LOSE = "Lose"
    TIE = "Tie"


# Each choice mapped to the choices it defeats
BEATS: Mapping[Choice, FrozenSet[Choice]] = MappingProxyType({
    Choice.ROCK: frozenset({Choice.LIZARD, Choice.SCISSORS}),
    Choice.PAPER: frozenset({Choice.ROCK, Choice.SPOCK}),
    Choice.SCISSORS: frozenset({Choice.PAPER, Choice.LIZARD}),
    Choice.LIZARD: frozenset({Choice.PAPER, Choice.SPOCK}),
    Choice.SPOCK: frozenset({Choice.ROCK, Choice.SCISSORS}),
})


@dataclass(frozen=True)
class PlayRecord:
    """A stored game result."""
    username: str
    played_at: datetime
    outcome: Outcome


@dataclass(frozen=True)
class PlayOutcome:
    """Result of a single play."""
    outcome: Outcome
    player: Choice
    computer: Choice


class ChoiceResponse(BaseModel):
    """Public description of a choice."""
    id: int = Field(..., description="Choice identifier")
    name: str = Field(..., description="Choice name")

    @classmethod
    def from_choice(cls, choice: Choice) -> "ChoiceResponse":
        return cls(id=int(choice), name=choice.label)


class PlayRequest(BaseModel):
    """Request model for playing a round."""
    model_config = ConfigDict(populate_by_name=True)

    player_choice: StrictInt = Field(..., alias="playerChoice", description="Identifier of the chosen move")
    username: str = Field(..., min_length=1, description="Name of the player")

    @field_validator("player_choice")
    @classmethod
    def _check_choice(cls, value: int) -> int:
        try:
            Choice(value)
        except ValueError:
            raise ValueError("Move not valid. It has to be one of the possible choices.") from None
        return value

    @field_validator("username")
    @classmethod
    def _check_username(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Username must not be empty")
        return value


class PlayResponse(BaseModel):
    """Response model for a played round."""
    results: Outcome = Field(..., description="Result of the game")
    player: int = Field(..., description="Choice the player made")
    computer: int = Field(..., description="Choice the computer made")

    @classmethod
    def from_outcome(cls, play: PlayOutcome) -> "PlayResponse":
        return cls(results=play.outcome, player=int(play.player), computer=int(play.computer))


class ResultResponse(BaseModel):
    """Response model for a stored result."""
    model_config = ConfigDict(populate_by_name=True)

    play_time: datetime = Field(..., alias="playTime", description="When the game was played, UTC")
    username: str = Field(..., description="Name of the player")
    result: Outcome = Field(..., description="Result of the game")

    @classmethod
    def from_record(cls, record: PlayRecord) -> "ResultResponse":
        return cls(play_time=record.played_at, username=record.username, result=record.outcome)
