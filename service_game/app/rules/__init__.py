"""
Game rules package.

Defines the closed set of moves, the beats relation between them and the
pure evaluation function that turns a pair of moves into an outcome.

Modules of interest:
- models: Choice and Outcome enums, the BEATS table, records and API models.
- engine: Outcome evaluation over the BEATS table.

The relation is data: every choice beats exactly two others and loses to
the remaining two, so evaluation never needs more than one lookup.
"""

from .engine import evaluate
from .models import BEATS, Choice, Outcome

__all__ = ["BEATS", "Choice", "Outcome", "evaluate"]
