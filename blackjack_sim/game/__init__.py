"""Round engine and session state."""

from blackjack_sim.game.events import GameEvent, EventType
from blackjack_sim.game.state import PlayerAction, RoundResult, RoundState
from blackjack_sim.game.session import GameSession, RoundOutcome
from blackjack_sim.game.engine import RoundEngine, dealer_should_hit

__all__ = [
    "GameEvent",
    "EventType",
    "PlayerAction",
    "RoundResult",
    "RoundState",
    "GameSession",
    "RoundOutcome",
    "RoundEngine",
    "dealer_should_hit",
]
