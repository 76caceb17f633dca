"""Blackjack round engine with state machine."""

import logging
from decimal import Decimal
from random import Random
from typing import Callable

from transitions import Machine, MachineError

from blackjack_sim.cards import Card, Shoe
from blackjack_sim.hand import BLACKJACK, Hand, compare_hands
from blackjack_sim.game.events import EventEmitter, EventType, GameEvent
from blackjack_sim.game.session import GameSession, RoundOutcome
from blackjack_sim.game.state import PlayerAction, RoundResult, RoundState

logger = logging.getLogger(__name__)

BLACKJACK_PAYOUT = Decimal("1.5")
DEALER_STANDS_ON = 17


def dealer_should_hit(hand: Hand) -> bool:
    """Dealer hits below 17 and on soft 17; stands on hard 17 and above."""
    if hand.value < DEALER_STANDS_ON:
        return True
    return hand.value == DEALER_STANDS_ON and hand.is_soft


def _to_amount(bet: Decimal | int | float | str) -> Decimal:
    amount = bet if isinstance(bet, Decimal) else Decimal(str(bet))
    if not amount.is_finite() or amount < 0:
        raise ValueError(f"Bet must be a nonnegative amount, got {bet}")
    return amount


class RoundEngine:
    """
    Plays single-player rounds against the dealer.

    The engine is UI-agnostic: the caller feeds it a bet and one player
    decision at a time, and learns what happened through return values and
    events. Shoe, discard pile and bankroll live in the session so that
    independent sessions never share state.
    """

    # State machine states
    STATES = [
        {"name": s.name.lower(), "on_enter": "_complete_round"}
        if s is RoundState.ROUND_COMPLETE
        else s.name.lower()
        for s in RoundState
    ]

    # State machine transitions
    TRANSITIONS = [
        {"trigger": "place_bet", "source": ["awaiting_bet", "round_complete"], "dest": "initial_deal"},
        {"trigger": "check_for_blackjack", "source": "initial_deal", "dest": "player_blackjack_check"},
        {"trigger": "natural_blackjack", "source": "player_blackjack_check", "dest": "round_complete"},
        {"trigger": "begin_decisions", "source": "player_blackjack_check", "dest": "player_decision_loop"},
        {"trigger": "keep_deciding", "source": "player_decision_loop", "dest": "player_decision_loop"},
        {"trigger": "player_done", "source": "player_decision_loop", "dest": "dealer_resolution"},
        {"trigger": "player_busts", "source": "player_decision_loop", "dest": "round_complete"},
        {"trigger": "dealer_done", "source": "dealer_resolution", "dest": "payout"},
        {"trigger": "pay_out", "source": "payout", "dest": "round_complete"},
    ]

    def __init__(
        self,
        session: GameSession | None = None,
        num_decks: int = 1,
        rng: Random | None = None,
    ) -> None:
        """
        Initialize a round engine.

        Args:
            session: Session holding shoe, discard pile and bankroll
                (a new one is created if not provided)
            num_decks: Number of decks for a new session's shoe
            rng: Random number generator for a new session's shoe
        """
        self.session = session or GameSession.create(num_decks=num_decks, rng=rng)
        self.player_hand = Hand()
        self.dealer_hand = Hand()
        self.events = EventEmitter()
        self._bet = Decimal("0")
        self._outcome: RoundOutcome | None = None

        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="awaiting_bet",
            auto_transitions=False,
            model_attribute="_machine_state",
            after_state_change="_log_transition",
        )

    @property
    def state(self) -> RoundState:
        """Get current round state as enum."""
        return RoundState[self._machine_state.upper()]  # type: ignore

    @property
    def shoe(self) -> Shoe:
        return self.session.shoe

    @property
    def bet(self) -> Decimal:
        """Current bet, doubled after a double down."""
        return self._bet

    @property
    def bankroll(self) -> Decimal:
        """Running win/loss total for the session."""
        return self.session.bankroll

    @property
    def outcome(self) -> RoundOutcome | None:
        """Outcome of the last completed round, None while one is in progress."""
        return self._outcome

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to game events."""
        self.events.subscribe(handler, event_type)

    def deal_initial(self, bet: Decimal | int | float | str) -> RoundOutcome | None:
        """
        Place a bet and deal the opening cards.

        The dealer gets one card, then the player two. A natural blackjack
        settles the round at once.

        Args:
            bet: Bet amount, 0 or more

        Returns:
            The outcome if the player was dealt a natural, otherwise None
            and the engine waits for player actions
        """
        amount = _to_amount(bet)
        self.place_bet()

        self._bet = amount
        self._outcome = None
        self.player_hand = Hand()
        self.dealer_hand = Hand()
        self.events.emit_new(EventType.BET_PLACED, amount=amount)

        self._deal_card_to_hand(self.dealer_hand)
        self._deal_card_to_hand(self.player_hand)
        self._deal_card_to_hand(self.player_hand)

        self.events.emit_new(
            EventType.ROUND_STARTED,
            dealer_hand=self.dealer_hand,
            player_hand=self.player_hand,
            bet=self._bet,
        )

        self.check_for_blackjack()
        if self.player_hand.value == BLACKJACK:
            winnings = self._bet * BLACKJACK_PAYOUT
            self.events.emit_new(EventType.PLAYER_BLACKJACK, amount=winnings)
            return self._finish(RoundResult.BLACKJACK, winnings, self.natural_blackjack)

        self.begin_decisions()
        return None

    start_round = deal_initial

    def player_action(self, action: PlayerAction | str) -> RoundOutcome | None:
        """
        Apply one player decision.

        Args:
            action: A PlayerAction or its token ("hit", "stand", "double down")

        Returns:
            The outcome if the player busted, otherwise None
        """
        if not isinstance(action, PlayerAction):
            action = PlayerAction.from_token(action)
        self._require(RoundState.PLAYER_DECISION_LOOP, str(action))

        if action is PlayerAction.HIT:
            return self._hit()
        if action is PlayerAction.STAND:
            return self._stand()
        return self._double_down()

    def hit(self) -> RoundOutcome | None:
        """Player hits (takes another card)."""
        return self.player_action(PlayerAction.HIT)

    def stand(self) -> RoundOutcome | None:
        """Player stands (keeps current hand)."""
        return self.player_action(PlayerAction.STAND)

    def double_down(self) -> RoundOutcome | None:
        """Player doubles down."""
        return self.player_action(PlayerAction.DOUBLE_DOWN)

    def _hit(self) -> RoundOutcome | None:
        self._deal_card_to_hand(self.player_hand)
        self.events.emit_new(EventType.PLAYER_HIT, hand_value=self.player_hand.value)

        if self.player_hand.is_busted:
            return self._player_bust()

        if self.player_hand.value == BLACKJACK:
            self.events.emit_new(EventType.PLAYER_REACHED_21)
            self.player_done()
            return None

        self.keep_deciding()
        return None

    def _stand(self) -> None:
        self.events.emit_new(EventType.PLAYER_STAND, hand_value=self.player_hand.value)
        self.player_done()

    def _double_down(self) -> RoundOutcome | None:
        # Exactly one card, then the turn is over whatever it brings
        self._bet *= 2
        self._deal_card_to_hand(self.player_hand)
        self.events.emit_new(
            EventType.PLAYER_DOUBLE,
            hand_value=self.player_hand.value,
            new_bet=self._bet,
            dealer_hand=self.dealer_hand,
            player_hand=self.player_hand,
        )

        if self.player_hand.is_busted:
            return self._player_bust()

        self.player_done()
        return None

    def _player_bust(self) -> RoundOutcome:
        self.events.emit_new(EventType.PLAYER_BUSTS, amount=self._bet)
        return self._finish(RoundResult.BUST, -self._bet, self.player_busts)

    def resolve_dealer(self) -> None:
        """Dealer draws until standing on hard 17, 18 or more, or busting."""
        self._require(RoundState.DEALER_RESOLUTION, "resolve_dealer")

        while dealer_should_hit(self.dealer_hand):
            card = self._deal_card_to_hand(self.dealer_hand)
            self.events.emit_new(
                EventType.DEALER_HITS,
                card=card,
                dealer_hand=self.dealer_hand,
                hand_value=self.dealer_hand.value,
            )

        if self.dealer_hand.is_busted:
            self.events.emit_new(EventType.DEALER_BUSTS, hand_value=self.dealer_hand.value)
        else:
            self.events.emit_new(EventType.DEALER_STANDS, hand_value=self.dealer_hand.value)

        self.dealer_done()

    def settle(self) -> RoundOutcome:
        """Compare the finished hands and pay out the bet."""
        self._require(RoundState.PAYOUT, "settle")

        event_data = dict(
            dealer_hand=self.dealer_hand,
            player_hand=self.player_hand,
            bet=self._bet,
        )

        if self.dealer_hand.is_busted:
            result, delta = RoundResult.DEALER_BUST, self._bet
        else:
            comparison = compare_hands(self.player_hand, self.dealer_hand)
            if comparison > 0:
                result, delta = RoundResult.WIN, self._bet
            elif comparison < 0:
                result, delta = RoundResult.LOSS, -self._bet
            else:
                result, delta = RoundResult.PUSH, Decimal("0")

        if delta > 0:
            self.events.emit_new(EventType.PLAYER_WINS, result=result, amount=delta, **event_data)
        elif delta < 0:
            self.events.emit_new(EventType.PLAYER_LOSES, result=result, amount=-delta, **event_data)
        else:
            self.events.emit_new(EventType.PUSH, result=result, amount=delta, **event_data)

        return self._finish(result, delta, self.pay_out)

    def play_round(
        self,
        bet: Decimal | int | float | str,
        choose_action: Callable[["RoundEngine"], PlayerAction | str],
    ) -> RoundOutcome:
        """
        Play a whole round.

        Args:
            bet: Bet amount
            choose_action: Called once per player decision with this engine

        Returns:
            The round outcome
        """
        outcome = self.deal_initial(bet)
        while outcome is None and self.state is RoundState.PLAYER_DECISION_LOOP:
            outcome = self.player_action(choose_action(self))

        if outcome is None:
            self.resolve_dealer()
            outcome = self.settle()
        return outcome

    def _deal_card_to_hand(self, hand: Hand) -> Card:
        """Deal a card to a hand, then refill the shoe if that emptied it."""
        card = self.shoe.draw()
        hand.add_card(card)
        self.events.emit_new(
            EventType.CARD_DEALT,
            card=card,
            hand="dealer" if hand is self.dealer_hand else "player",
            hand_value=hand.value,
        )

        if self.shoe.refill_if_empty(self.session.discard_pile):
            self.events.emit_new(EventType.SHOE_RESHUFFLED, cards=self.shoe.cards_remaining)
        return card

    def _finish(
        self,
        result: RoundResult,
        delta: Decimal,
        trigger: Callable[[], bool],
    ) -> RoundOutcome:
        """Book the round result and move to ROUND_COMPLETE."""
        self.session.bankroll += delta
        self._outcome = RoundOutcome(
            result=result,
            bet=self._bet,
            delta=delta,
            player_total=self.player_hand.value,
            dealer_total=self.dealer_hand.value,
            bankroll=self.session.bankroll,
        )
        logger.info("Round settled: %s, %s (bankroll %s)", result, delta, self.session.bankroll)
        trigger()
        return self._outcome

    def _complete_round(self) -> None:
        """Discard both hands and report the running total."""
        self.session.discard(self.dealer_hand.cards)
        self.session.discard(self.player_hand.cards)
        if self._outcome is not None:
            self.session.record(self._outcome)

        self.events.emit_new(
            EventType.ROUND_ENDED,
            result=self._outcome.result if self._outcome else None,
            delta=self._outcome.delta if self._outcome else Decimal("0"),
            bankroll=self.session.bankroll,
        )

    def _require(self, state: RoundState, action: str) -> None:
        if self.state is not state:
            raise MachineError(f"Cannot {action} in state {self.state}")

    def _log_transition(self) -> None:
        logger.debug("Round state is now %s", self.state)
