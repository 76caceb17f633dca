"""Tests for the round engine state machine."""

from decimal import Decimal
from random import Random

import pytest
from transitions import MachineError

from blackjack_sim.game import (
    EventType,
    GameSession,
    PlayerAction,
    RoundEngine,
    RoundResult,
    RoundState,
    dealer_should_hit,
)

from conftest import cards, hand_of


def event_types(engine: RoundEngine) -> list[EventType]:
    return [event.event_type for event in engine.events.history]


class TestDealerRule:
    """Tests for the dealer drawing rule."""

    def test_hits_soft_17(self, soft_17_hand):
        assert dealer_should_hit(soft_17_hand)

    def test_stands_on_hard_17(self, hard_17_hand):
        assert not dealer_should_hit(hard_17_hand)

    @pytest.mark.parametrize("labels", [("10S", "6H"), ("AS", "5H"), ("2S", "3H")])
    def test_hits_below_17(self, labels):
        assert dealer_should_hit(hand_of(*labels))

    @pytest.mark.parametrize("labels", [("AS", "7H"), ("10S", "8H"), ("AS", "6H", "10C"), ("10S", "6H", "KC")])
    def test_stands_on_18_and_up(self, labels):
        """Soft 18, hard 18, A-6-10 (hard 17) and a bust all stand."""
        assert not dealer_should_hit(hand_of(*labels))


class TestInitialDeal:
    """Tests for betting and the opening deal."""

    def test_starts_awaiting_bet(self, engine):
        assert engine.state is RoundState.AWAITING_BET
        assert engine.outcome is None

    def test_deal_order_dealer_then_player(self, make_engine):
        """Test the dealer gets the first card, the player the next two."""
        engine = make_engine(["9S", "KH", "5D", "2C"])

        assert engine.deal_initial(10) is None

        assert engine.dealer_hand.cards == tuple(cards("9S"))
        assert engine.player_hand.cards == tuple(cards("KH", "5D"))
        assert engine.state is RoundState.PLAYER_DECISION_LOOP
        assert engine.bet == Decimal("10")

    def test_negative_bet_rejected(self, engine):
        with pytest.raises(ValueError):
            engine.deal_initial(-5)
        assert engine.state is RoundState.AWAITING_BET
        assert engine.shoe.cards_remaining == 104

    @pytest.mark.parametrize("bet", ["nan", "inf"])
    def test_non_finite_bet_rejected(self, engine, bet):
        with pytest.raises(ValueError):
            engine.deal_initial(bet)

    def test_fractional_bet(self, make_engine):
        """Test bets are exact decimals."""
        engine = make_engine(["9S", "KH", "QD", "KC"])
        outcome = engine.play_round("2.5", lambda _: PlayerAction.STAND)
        assert outcome.delta == Decimal("2.5")

    def test_cannot_bet_during_round(self, make_engine):
        engine = make_engine(["9S", "KH", "5D", "2C"])
        engine.deal_initial(10)
        with pytest.raises(MachineError):
            engine.deal_initial(10)

    def test_start_round_alias(self, make_engine):
        engine = make_engine(["9S", "KH", "5D", "2C"])
        assert engine.start_round(10) is None
        assert engine.state is RoundState.PLAYER_DECISION_LOOP


class TestNaturalBlackjack:
    """Tests for the natural blackjack fast path."""

    def test_natural_pays_three_to_two(self, make_engine):
        engine = make_engine(["8S", "AS", "KH", "5C"])

        outcome = engine.deal_initial(10)

        assert outcome is not None
        assert outcome.result is RoundResult.BLACKJACK
        assert outcome.delta == Decimal("15")
        assert engine.bankroll == Decimal("15")
        assert engine.state is RoundState.ROUND_COMPLETE

    def test_dealer_does_not_draw(self, make_engine):
        engine = make_engine(["8S", "AS", "KH", "5C"])
        engine.deal_initial(10)

        assert len(engine.dealer_hand) == 1
        assert engine.shoe.cards_remaining == 1
        assert EventType.DEALER_HITS not in event_types(engine)

    def test_no_player_decisions_after_natural(self, make_engine):
        engine = make_engine(["8S", "AS", "KH", "5C"])
        engine.deal_initial(10)
        with pytest.raises(MachineError):
            engine.hit()

    def test_play_round_skips_decisions(self, make_engine):
        engine = make_engine(["8S", "KH", "AS", "5C"])

        def never(_engine):
            raise AssertionError("no decision expected")

        outcome = engine.play_round(4, never)
        assert outcome.result is RoundResult.BLACKJACK
        assert outcome.delta == Decimal("6")

    def test_zero_bet_natural(self, make_engine):
        """Test playing for nothing still completes the round."""
        engine = make_engine(["8S", "AS", "KH", "5C"])
        outcome = engine.deal_initial(0)
        assert outcome.result is RoundResult.BLACKJACK
        assert outcome.delta == 0
        assert engine.bankroll == 0


class TestPlayerDecisions:
    """Tests for the player decision loop."""

    def test_hit_continues_loop(self, make_engine):
        engine = make_engine(["9S", "5H", "4D", "3C", "10C"])
        engine.deal_initial(10)

        assert engine.hit() is None

        assert engine.player_hand.value == 12
        assert engine.state is RoundState.PLAYER_DECISION_LOOP

    def test_bust_at_23(self, make_engine):
        engine = make_engine(["5S", "KH", "3D", "KC", "2C"])
        engine.deal_initial(10)

        outcome = engine.player_action("hit")

        assert outcome.result is RoundResult.BUST
        assert outcome.player_total == 23
        assert outcome.delta == Decimal("-10")
        assert engine.bankroll == Decimal("-10")
        assert engine.state is RoundState.ROUND_COMPLETE

    def test_dealer_never_plays_after_bust(self, make_engine):
        engine = make_engine(["5S", "KH", "3D", "KC", "2C"])
        engine.deal_initial(10)
        engine.hit()

        assert len(engine.dealer_hand) == 1
        with pytest.raises(MachineError):
            engine.resolve_dealer()
        with pytest.raises(MachineError):
            engine.settle()

    def test_hitting_21_ends_turn(self, make_engine):
        engine = make_engine(["10S", "5H", "6D", "KC", "8C"])
        engine.deal_initial(10)

        assert engine.hit() is None

        assert engine.player_hand.value == 21
        assert engine.state is RoundState.DEALER_RESOLUTION
        assert EventType.PLAYER_REACHED_21 in event_types(engine)

    def test_stand_ends_turn(self, make_engine):
        engine = make_engine(["9S", "KH", "QD", "KC"])
        engine.deal_initial(10)

        assert engine.stand() is None
        assert engine.state is RoundState.DEALER_RESOLUTION
        assert len(engine.player_hand) == 2

    def test_invalid_token_rejected(self, make_engine):
        engine = make_engine(["9S", "KH", "QD", "KC"])
        engine.deal_initial(10)
        with pytest.raises(ValueError):
            engine.player_action("split")
        with pytest.raises(ValueError):
            engine.player_action("Hit")
        assert engine.state is RoundState.PLAYER_DECISION_LOOP

    def test_action_before_bet_rejected(self, engine):
        with pytest.raises(MachineError):
            engine.stand()


class TestDoubleDown:
    """Tests for doubling down."""

    def test_double_on_11_to_21(self, make_engine):
        engine = make_engine(["6S", "5H", "6D", "KC", "10S", "2C"])
        engine.deal_initial(10)

        assert engine.double_down() is None

        assert engine.bet == Decimal("20")
        assert engine.player_hand.value == 21
        assert len(engine.player_hand) == 3
        assert engine.state is RoundState.DEALER_RESOLUTION

        engine.resolve_dealer()
        outcome = engine.settle()
        assert outcome.result is RoundResult.WIN
        assert outcome.bet == Decimal("20")
        assert outcome.delta == Decimal("20")

    def test_double_ends_turn_below_21(self, make_engine):
        engine = make_engine(["9S", "5H", "6D", "2C", "9C"])
        engine.deal_initial(10)

        engine.player_action(PlayerAction.DOUBLE_DOWN)

        assert engine.player_hand.value == 13
        assert engine.state is RoundState.DEALER_RESOLUTION
        engine.resolve_dealer()
        outcome = engine.settle()
        assert outcome.result is RoundResult.LOSS
        assert outcome.delta == Decimal("-20")

    def test_double_bust_loses_doubled_bet(self, make_engine):
        engine = make_engine(["9S", "10H", "6D", "KC", "2C"])
        engine.deal_initial(10)

        outcome = engine.player_action("double down")

        assert outcome.result is RoundResult.BUST
        assert outcome.delta == Decimal("-20")
        assert len(engine.dealer_hand) == 1
        assert engine.state is RoundState.ROUND_COMPLETE


class TestDealerResolutionAndPayout:
    """Tests for dealer play and settlement."""

    def test_player_20_beats_dealer_19(self, make_engine):
        engine = make_engine(["9S", "KH", "QD", "KC"])
        engine.deal_initial(10)
        engine.stand()
        engine.resolve_dealer()

        assert engine.dealer_hand.value == 19
        assert engine.state is RoundState.PAYOUT

        outcome = engine.settle()
        assert outcome.result is RoundResult.WIN
        assert outcome.delta == Decimal("10")
        assert engine.bankroll == Decimal("10")

    def test_equal_totals_push(self, make_engine):
        engine = make_engine(["8S", "KH", "8D", "KC"])
        outcome = engine.play_round(10, lambda _: "stand")

        assert outcome.result is RoundResult.PUSH
        assert outcome.player_total == outcome.dealer_total == 18
        assert outcome.delta == 0
        assert engine.bankroll == 0

    def test_dealer_higher_wins(self, make_engine):
        engine = make_engine(["10S", "10H", "7D", "8C"])
        outcome = engine.play_round(10, lambda _: "stand")
        assert outcome.result is RoundResult.LOSS
        assert outcome.delta == Decimal("-10")

    def test_dealer_bust_pays_player(self, make_engine):
        engine = make_engine(["10S", "10H", "2D", "6C", "KC"])
        outcome = engine.play_round(10, lambda _: "stand")
        assert outcome.result is RoundResult.DEALER_BUST
        assert outcome.dealer_total == 26
        assert outcome.delta == Decimal("10")

    def test_dealer_draws_on_soft_17(self, make_engine):
        engine = make_engine(["AS", "10H", "9D", "6C", "2H"])
        engine.deal_initial(10)
        engine.stand()
        engine.resolve_dealer()

        assert engine.dealer_hand.cards == tuple(cards("AS", "6C", "2H"))
        assert engine.dealer_hand.value == 19
        assert event_types(engine).count(EventType.DEALER_HITS) == 2

    def test_dealer_stops_on_hard_17(self, make_engine):
        engine = make_engine(["10S", "10H", "9D", "7C", "5H"])
        outcome = engine.play_round(10, lambda _: "stand")

        assert len(engine.dealer_hand) == 2
        assert outcome.dealer_total == 17
        assert outcome.result is RoundResult.WIN
        assert engine.shoe.cards_remaining == 1

    def test_settle_before_dealer_rejected(self, make_engine):
        engine = make_engine(["9S", "KH", "QD", "KC"])
        engine.deal_initial(10)
        engine.stand()
        with pytest.raises(MachineError):
            engine.settle()


class TestRoundComplete:
    """Tests for discarding and bankroll accumulation."""

    def test_hands_go_to_discard_dealer_first(self, make_engine):
        engine = make_engine(["9S", "KH", "QD", "KC"])
        engine.play_round(10, lambda _: "stand")

        assert engine.session.discard_pile == cards("9S", "KC", "KH", "QD")
        assert engine.session.rounds_played == 1
        assert engine.session.history == [engine.outcome]

    def test_round_ended_reports_bankroll(self, make_engine):
        engine = make_engine(["9S", "KH", "QD", "KC"])
        engine.play_round(10, lambda _: "stand")

        ended = engine.events.history[-1]
        assert ended.event_type is EventType.ROUND_ENDED
        assert ended.data["bankroll"] == Decimal("10")
        assert ended.data["result"] is RoundResult.WIN

    def test_bankroll_accumulates_across_rounds(self, make_engine):
        engine = make_engine(["9S", "KH", "QD", "KC", "10S", "10H", "7D", "8C"])

        first = engine.play_round(10, lambda _: "stand")
        second = engine.play_round(5, lambda _: "stand")

        assert first.delta == Decimal("10")
        assert second.delta == Decimal("-5")
        assert engine.bankroll == Decimal("5")
        assert second.bankroll == Decimal("5")
        assert engine.session.rounds_played == 2

    def test_outcome_cleared_on_new_round(self, make_engine):
        engine = make_engine(["9S", "KH", "QD", "KC", "10S", "10H", "7D", "8C"])
        engine.play_round(10, lambda _: "stand")
        engine.deal_initial(10)
        assert engine.outcome is None
        assert len(engine.dealer_hand) == 1


class TestReshuffle:
    """Tests for refilling the shoe from the discard pile."""

    def test_refill_checked_after_every_draw(self, make_engine):
        engine = make_engine(["8S", "AS"], discard=("2C", "3C", "4C"))

        engine.deal_initial(10)

        assert event_types(engine).count(EventType.SHOE_RESHUFFLED) == 1
        assert engine.player_hand.cards[1] in cards("2C", "3C", "4C")
        assert engine.shoe.cards_remaining == 2
        assert engine.session.discard_pile == []

    def test_no_refill_while_cards_remain(self, make_engine):
        engine = make_engine(["9S", "KH", "QD", "KC", "2S"], discard=("2C", "3C"))
        engine.play_round(10, lambda _: "stand")

        assert EventType.SHOE_RESHUFFLED not in event_types(engine)
        assert engine.shoe.cards_remaining == 1
        assert len(engine.session.discard_pile) == 6

    def test_long_session_conserves_cards(self):
        """Play through several reshuffles; no card is lost or duplicated."""
        engine = RoundEngine(num_decks=1, rng=Random(99))

        def basic(e: RoundEngine) -> PlayerAction:
            return PlayerAction.HIT if e.player_hand.value < 17 else PlayerAction.STAND

        for _ in range(60):
            engine.play_round(1, basic)
            assert engine.session.total_cards == 52

        assert EventType.SHOE_RESHUFFLED in event_types(engine)
        assert engine.session.rounds_played == 60
        assert engine.bankroll == sum(o.delta for o in engine.session.history)


class TestSessions:
    """Tests for session isolation."""

    def test_sessions_do_not_share_state(self):
        first = RoundEngine(GameSession.create(num_decks=1, rng=Random(1)))
        second = RoundEngine(GameSession.create(num_decks=1, rng=Random(1)))

        first.play_round(10, lambda _: "stand")

        assert second.session.discard_pile == []
        assert second.bankroll == 0
        assert second.shoe.cards_remaining == 52

    def test_create_shuffles_shoe(self):
        session = GameSession.create(num_decks=1, rng=Random(5))
        assert len(session.shoe) == 52
        assert session.bankroll == 0
        assert session.rounds_played == 0
