"""
Game Service package for RPSSL (Rock, Paper, Scissors, Lizard, Spock).

A player submits a move, the service resolves the computer's move from an
upstream random-number service, decides the outcome and keeps a scoreboard.
It provides:

- app.main: API surface for playing, resetting and listing results.
- app.rules: Moves, the beats relation and outcome evaluation.
- app.adapters: Upstream random-number client with retries and fallback.
- app.persistence: PostgreSQL result store with retries.
- app.services: Orchestration and the OperationResult envelope.

Guidelines:
- The service is stateless; PostgreSQL is the source of truth.
- Expected failures travel as OperationResult values; only infrastructure
  failures that outlive their retry budget are raised.
"""
