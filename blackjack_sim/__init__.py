"""Blackjack rules engine - 100% UI-agnostic."""

from blackjack_sim.cards import Card, Shoe, Rank, Suit
from blackjack_sim.hand import Hand, HandValue, evaluate

__all__ = [
    "Card",
    "Shoe",
    "Rank",
    "Suit",
    "Hand",
    "HandValue",
    "evaluate",
]
