"""Per-session state shared across rounds: shoe, discard pile and bankroll."""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from random import Random
from typing import Iterable

from blackjack_sim.cards import Card, Shoe
from blackjack_sim.game.state import RoundResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoundOutcome:
    """Result of one completed round."""

    result: RoundResult
    bet: Decimal
    delta: Decimal
    player_total: int
    dealer_total: int
    bankroll: Decimal

    @property
    def player_won(self) -> bool:
        """Check if the player gained money this round."""
        return self.delta > 0


@dataclass
class GameSession:
    """
    Everything that outlives a single round.

    The bankroll is the running win/loss total for the session; it starts at
    zero and may go negative. The discard pile holds cards from completed
    rounds until the shoe runs out and they are shuffled back in.
    """

    shoe: Shoe
    discard_pile: list[Card] = field(default_factory=list)
    bankroll: Decimal = Decimal("0")
    rounds_played: int = 0
    history: list[RoundOutcome] = field(default_factory=list)

    @classmethod
    def create(cls, num_decks: int = 1, rng: Random | None = None) -> "GameSession":
        """Start a session with a freshly shuffled shoe."""
        shoe = Shoe(num_decks=num_decks, rng=rng)
        shoe.shuffle()
        logger.debug("New session with a %d-deck shoe", num_decks)
        return cls(shoe=shoe)

    def discard(self, cards: Iterable[Card]) -> None:
        """Move finished cards onto the discard pile."""
        self.discard_pile.extend(cards)

    def record(self, outcome: RoundOutcome) -> None:
        """Book a settled round."""
        self.history.append(outcome)
        self.rounds_played += 1

    @property
    def total_cards(self) -> int:
        """Cards in the shoe plus cards waiting on the discard pile."""
        return self.shoe.cards_remaining + len(self.discard_pile)
