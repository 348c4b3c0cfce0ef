"""
Rule evaluation for the RPSSL Game Service.
"""

from typing import FrozenSet, Mapping

from .models import BEATS, Choice, Outcome


def evaluate(player: Choice, opponent: Choice,
             beats: Mapping[Choice, FrozenSet[Choice]] = BEATS) -> Outcome:
    """Decide the outcome of ``player`` against ``opponent``."""
    if player == opponent:
        return Outcome.TIE

    return Outcome.WIN if opponent in beats[player] else Outcome.LOSE
