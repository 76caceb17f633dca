"""Hand evaluation for blackjack."""

from typing import Iterable, Iterator, NamedTuple

from blackjack_sim.cards import Card

BLACKJACK = 21
ACE_BONUS = 10


class HandValue(NamedTuple):
    """Best blackjack total for a set of cards."""

    total: int
    is_soft: bool


def evaluate(cards: Iterable[Card]) -> HandValue:
    """
    Value a set of cards, counting as many aces as 11 as possible.

    Aces start at 1. Each ace is then upgraded to 11 while the running total
    is 11 or less, so A-A counts 12 and A-A-9 counts 21. When no ace fits the
    hand is hard and the total may exceed 21.
    """
    total = 0
    aces = 0
    for card in cards:
        total += card.point_value
        if card.is_ace:
            aces += 1

    soft = False
    for _ in range(aces):
        if total > BLACKJACK - ACE_BONUS:
            break
        total += ACE_BONUS
        soft = True

    return HandValue(total, soft)


class Hand:
    """The cards held by the player or the dealer in the current round."""

    def __init__(self, cards: Iterable[Card] = ()) -> None:
        self._cards: list[Card] = list(cards)
        self._value = evaluate(self._cards)

    def add_card(self, card: Card) -> None:
        """Add a card and recompute the hand value."""
        self._cards.append(card)
        self._value = evaluate(self._cards)

    def clear(self) -> None:
        """Remove all cards from the hand."""
        self._cards.clear()
        self._value = evaluate(self._cards)

    @property
    def cards(self) -> tuple[Card, ...]:
        """Return the cards in the order they were dealt."""
        return tuple(self._cards)

    @property
    def value(self) -> int:
        """Return the best total; above 21 means the hand is bust."""
        return self._value.total

    @property
    def is_soft(self) -> bool:
        """Check if an ace is currently counted as 11."""
        return self._value.is_soft

    @property
    def is_busted(self) -> bool:
        """Check if the hand has busted (value > 21)."""
        return self.value > BLACKJACK

    @property
    def is_blackjack(self) -> bool:
        """Check if the hand is a natural blackjack (21 with 2 cards)."""
        return len(self._cards) == 2 and self.value == BLACKJACK

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)

    def __str__(self) -> str:
        return ", ".join(str(card) for card in self._cards)

    def __repr__(self) -> str:
        return f"Hand({self._cards!r}, value={self.value})"


def compare_hands(player_hand: Hand, dealer_hand: Hand) -> int:
    """
    Compare a standing player hand against the dealer's finished hand.

    Returns:
        1 if player wins
        -1 if dealer wins
        0 if push (tie)
    """
    if dealer_hand.is_busted:
        return 1
    if dealer_hand.value > player_hand.value:
        return -1
    if dealer_hand.value < player_hand.value:
        return 1
    return 0
