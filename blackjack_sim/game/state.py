"""Round state, player actions and round results."""

from enum import Enum, auto


class RoundState(Enum):
    """
    Round state machine states.

    Flow: AWAITING_BET → INITIAL_DEAL → PLAYER_BLACKJACK_CHECK →
    PLAYER_DECISION_LOOP → DEALER_RESOLUTION → PAYOUT → ROUND_COMPLETE
    """

    # Idle, no round in progress yet
    AWAITING_BET = auto()

    # Dealer gets one card, player two
    INITIAL_DEAL = auto()

    # Natural blackjack short-circuits the round
    PLAYER_BLACKJACK_CHECK = auto()

    # Player hits, stands or doubles down
    PLAYER_DECISION_LOOP = auto()

    # Dealer draws to 17, hitting soft 17
    DEALER_RESOLUTION = auto()

    # Comparing totals
    PAYOUT = auto()

    # Cards discarded, ready for the next bet
    ROUND_COMPLETE = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()


# Valid state transitions
VALID_TRANSITIONS: dict[RoundState, list[RoundState]] = {
    RoundState.AWAITING_BET: [RoundState.INITIAL_DEAL],
    RoundState.INITIAL_DEAL: [RoundState.PLAYER_BLACKJACK_CHECK],
    RoundState.PLAYER_BLACKJACK_CHECK: [
        RoundState.ROUND_COMPLETE,  # Natural blackjack
        RoundState.PLAYER_DECISION_LOOP,
    ],
    RoundState.PLAYER_DECISION_LOOP: [
        RoundState.PLAYER_DECISION_LOOP,
        RoundState.DEALER_RESOLUTION,
        RoundState.ROUND_COMPLETE,  # Player bust
    ],
    RoundState.DEALER_RESOLUTION: [RoundState.PAYOUT],
    RoundState.PAYOUT: [RoundState.ROUND_COMPLETE],
    RoundState.ROUND_COMPLETE: [RoundState.INITIAL_DEAL],
}


def is_valid_transition(from_state: RoundState, to_state: RoundState) -> bool:
    """
    Check if a state transition is valid.

    Args:
        from_state: Current state
        to_state: Desired state

    Returns:
        True if the transition is allowed
    """
    return to_state in VALID_TRANSITIONS.get(from_state, [])


class PlayerAction(Enum):
    """Decisions the player can make, keyed by their console tokens."""

    HIT = "hit"
    STAND = "stand"
    DOUBLE_DOWN = "double down"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_token(cls, token: str) -> "PlayerAction":
        """Map an exact action token to its action."""
        try:
            return cls(token)
        except ValueError:
            raise ValueError(f"Invalid input: {token}") from None


class RoundResult(Enum):
    """How a round ended for the player."""

    BLACKJACK = auto()
    WIN = auto()
    DEALER_BUST = auto()
    LOSS = auto()
    BUST = auto()
    PUSH = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()
