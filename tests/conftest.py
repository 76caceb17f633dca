"""Pytest fixtures for blackjack simulator tests."""

import pytest
from random import Random

from hypothesis import strategies as st

from blackjack_sim.cards import Card, Shoe, Rank, Suit
from blackjack_sim.hand import Hand
from blackjack_sim.game import GameSession, RoundEngine


def cards(*labels: str) -> list[Card]:
    """Build cards from short labels like 'AS', '10H', 'KD'."""
    return [Card.from_string(label) for label in labels]


def hand_of(*labels: str) -> Hand:
    """Build a hand from short card labels."""
    return Hand(cards(*labels))


def stacked_session(draw_order: list[str], discard: tuple[str, ...] = ()) -> GameSession:
    """
    A session whose shoe deals exactly the given cards, first label first.

    The dealer gets the first card of a round, the player the next two.
    """
    shoe = Shoe(num_decks=1, rng=Random(42))
    shoe.set_cards(reversed(cards(*draw_order)))
    return GameSession(shoe=shoe, discard_pile=cards(*discard))


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def shoe(rng):
    """A shuffled single-deck shoe."""
    s = Shoe(num_decks=1, rng=rng)
    s.shuffle()
    return s


@pytest.fixture
def empty_hand():
    """An empty hand."""
    return Hand()


@pytest.fixture
def blackjack_hand():
    """A natural blackjack hand."""
    return hand_of("AS", "KH")


@pytest.fixture
def soft_17_hand():
    """A soft 17 hand (A-6)."""
    return hand_of("AS", "6H")


@pytest.fixture
def hard_17_hand():
    """A hard 17 hand (10-7)."""
    return hand_of("10S", "7H")


@pytest.fixture
def bust_hand():
    """A busted hand."""
    return hand_of("KS", "QH", "2C")


@pytest.fixture
def make_engine():
    """Factory for an engine dealing a fixed card order."""

    def _make(draw_order: list[str], discard: tuple[str, ...] = ()) -> RoundEngine:
        return RoundEngine(stacked_session(draw_order, discard))

    return _make


@pytest.fixture
def engine(rng):
    """An engine over a shuffled two-deck shoe."""
    return RoundEngine(num_decks=2, rng=rng)


# Hypothesis strategies for property-based testing
@st.composite
def card_strategy(draw):
    """Generate a random card."""
    rank = draw(st.sampled_from(list(Rank)))
    suit = draw(st.sampled_from(list(Suit)))
    return Card(rank, suit)


@st.composite
def hand_strategy(draw, min_cards=1, max_cards=8):
    """Generate a random hand."""
    return Hand(draw(st.lists(card_strategy(), min_size=min_cards, max_size=max_cards)))
