"""Card and Shoe classes - immutable cards and the multi-deck stock."""

import logging
from dataclasses import dataclass
from enum import Enum
from random import Random
from typing import Iterable, Iterator

logger = logging.getLogger(__name__)

CARDS_PER_DECK = 52
CARDS_PER_SUIT = 13


class Suit(Enum):
    """Card suits, in deck order."""

    SPADES = 1
    HEARTS = 2
    DIAMONDS = 3
    CLUBS = 4

    def __str__(self) -> str:
        return self.name.title()

    @property
    def symbol(self) -> str:
        """Return the suit glyph."""
        return {
            Suit.SPADES: "♠",
            Suit.HEARTS: "♥",
            Suit.DIAMONDS: "♦",
            Suit.CLUBS: "♣",
        }[self]


class Rank(Enum):
    """Card ranks, numbered Ace (1) through King (13)."""

    ACE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13

    def __str__(self) -> str:
        return self.name.title()

    @property
    def short(self) -> str:
        """Return the one or two character rank label."""
        if 2 <= self.value <= 10:
            return str(self.value)
        return {
            Rank.ACE: "A",
            Rank.JACK: "J",
            Rank.QUEEN: "Q",
            Rank.KING: "K",
        }[self]

    @property
    def point_value(self) -> int:
        """Return the blackjack point value (Ace = 1, face cards = 10)."""
        return min(self.value, 10)


_RANK_LABELS = {rank.short: rank for rank in Rank}
_RANK_LABELS["T"] = Rank.TEN

_SUIT_LABELS = {suit.name[0]: suit for suit in Suit}
_SUIT_LABELS.update({suit.symbol: suit for suit in Suit})


@dataclass(frozen=True, slots=True)
class Card:
    """Immutable playing card."""

    rank: Rank
    suit: Suit

    def __str__(self) -> str:
        return f"{self.rank} of {self.suit}"

    def __repr__(self) -> str:
        return f"Card({self.rank.name}, {self.suit.name})"

    @property
    def point_value(self) -> int:
        """Return the blackjack point value."""
        return self.rank.point_value

    @property
    def is_ace(self) -> bool:
        """Check if this card is an Ace."""
        return self.rank is Rank.ACE

    @classmethod
    def from_index(cls, index: int) -> "Card":
        """
        Create the card at a position in a standard ordered deck.

        Indices 1-13 are Spades, 14-26 Hearts, 27-39 Diamonds and 40-52
        Clubs; within each suit the order runs Ace, Two, ..., King.
        """
        if not 1 <= index <= CARDS_PER_DECK:
            raise ValueError(f"Card index must be between 1 and 52, got {index}")
        suit = Suit((index - 1) // CARDS_PER_SUIT + 1)
        rank = Rank((index - 1) % CARDS_PER_SUIT + 1)
        return cls(rank, suit)

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Create a card from a string like 'AS', '10♥', 'Kh'."""
        s = s.strip().upper()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s}")

        rank_str = s[:-1]
        suit_str = s[-1]

        if rank_str not in _RANK_LABELS:
            raise ValueError(f"Invalid rank: {rank_str}")
        if suit_str not in _SUIT_LABELS:
            raise ValueError(f"Invalid suit: {suit_str}")

        return cls(_RANK_LABELS[rank_str], _SUIT_LABELS[suit_str])


class Shoe:
    """The undealt stock of one or more standard decks."""

    def __init__(self, num_decks: int = 1, rng: Random | None = None) -> None:
        """
        Build a shoe in ascending deck order (not shuffled).

        Args:
            num_decks: Number of 52-card decks in the shoe
            rng: Random number generator for shuffling
        """
        if num_decks < 1:
            raise ValueError("Shoe must have at least 1 deck")

        self._num_decks = num_decks
        self._rng = rng or Random()
        self._cards: list[Card] = [
            Card.from_index(i % CARDS_PER_DECK + 1)
            for i in range(num_decks * CARDS_PER_DECK)
        ]

    def shuffle(self) -> None:
        """Shuffle the remaining cards in place (Fisher-Yates)."""
        cards = self._cards
        last = len(cards) - 1
        for i in range(last):
            j = self._rng.randint(i, last)
            if j != i:
                cards[i], cards[j] = cards[j], cards[i]

    def draw(self) -> Card:
        """Remove and return the top card of the shoe."""
        if not self._cards:
            raise IndexError("Cannot draw from empty shoe")
        return self._cards.pop()

    def set_cards(self, cards: Iterable[Card]) -> None:
        """Replace the contents of the shoe. The last card is drawn first."""
        self._cards = list(cards)

    def refill_if_empty(self, discard_pile: list[Card]) -> bool:
        """
        Refill an empty shoe from the discard pile and shuffle it.

        Does nothing while the shoe still holds cards. On refill the discard
        pile is cleared in place.

        Returns:
            True if discarded cards were put back into the shoe
        """
        if self._cards:
            return False

        self.set_cards(discard_pile)
        discard_pile.clear()
        if not self._cards:
            return False

        self.shuffle()
        logger.info("Shoe reshuffled from %d discarded cards", len(self._cards))
        return True

    @property
    def cards_remaining(self) -> int:
        """Return the number of cards remaining."""
        return len(self._cards)

    @property
    def total_cards(self) -> int:
        """Return the number of cards in a full shoe."""
        return self._num_decks * CARDS_PER_DECK

    @property
    def num_decks(self) -> int:
        """Return the number of decks in the shoe."""
        return self._num_decks

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)
