"""Text rendering of hands, bets and engine events."""

from decimal import Decimal

from blackjack_sim.hand import Hand
from blackjack_sim.game.engine import RoundEngine
from blackjack_sim.game.events import EventType, GameEvent
from blackjack_sim.game.state import RoundResult
from console.prompts import Writer

RESHUFFLE_MESSAGE = "Discarded cards have been reshuffled and put back into the shoe."

_OUTCOME_MESSAGES = {
    RoundResult.DEALER_BUST: "The dealer busted, so you win {amount} dollars.",
    RoundResult.WIN: "The dealer's hand had a lower value than yours, so you win {amount} dollars.",
    RoundResult.LOSS: "The dealer's hand had a higher value than yours, so you lose {amount} dollars.",
    RoundResult.PUSH: "The dealer's hand had the same value as yours, so you don't win or lose any money.",
}


def format_amount(amount: Decimal) -> str:
    """Format dollars without trailing zeros: 15, 7.5, 0.25."""
    if amount == 0:
        return "0"
    return f"{amount.normalize():f}"


def format_game_state(
    dealer_hand: Hand,
    player_hand: Hand | None = None,
    bet: Decimal | None = None,
) -> str:
    """Describe the hands on the table and, optionally, the bet."""
    lines = [f"The dealer's hand: {dealer_hand}"]
    if player_hand is not None:
        lines.append(f"Your hand: {player_hand}")
    if bet is not None:
        lines.append(f"Your bet: {format_amount(bet)} dollars\n")
    return "\n".join(lines)


def format_running_total(bankroll: Decimal) -> str:
    if bankroll < 0:
        return f"So far you've lost a total of {format_amount(-bankroll)} dollars."
    return f"So far you've won a total of {format_amount(bankroll)} dollars."


class ConsoleReporter:
    """Prints engine events the way the console game words them."""

    def __init__(self, engine: RoundEngine, write: Writer = print) -> None:
        self._engine = engine
        self._write = write
        handlers = {
            EventType.ROUND_STARTED: self._on_round_started,
            EventType.SHOE_RESHUFFLED: self._on_reshuffled,
            EventType.PLAYER_BLACKJACK: self._on_blackjack,
            EventType.PLAYER_HIT: self._on_player_card,
            EventType.PLAYER_DOUBLE: self._on_player_card,
            EventType.PLAYER_REACHED_21: self._on_reached_21,
            EventType.PLAYER_BUSTS: self._on_bust,
            EventType.DEALER_HITS: self._on_dealer_hits,
            EventType.PLAYER_WINS: self._on_outcome,
            EventType.PLAYER_LOSES: self._on_outcome,
            EventType.PUSH: self._on_outcome,
            EventType.ROUND_ENDED: self._on_round_ended,
        }
        for event_type, handler in handlers.items():
            engine.subscribe(handler, event_type)

    def _on_round_started(self, event: GameEvent) -> None:
        player_hand = event.data["player_hand"]
        bet = None if player_hand.is_blackjack else event.data["bet"]
        self._write(format_game_state(event.data["dealer_hand"], player_hand, bet))

    def _on_reshuffled(self, event: GameEvent) -> None:
        self._write(RESHUFFLE_MESSAGE)

    def _on_blackjack(self, event: GameEvent) -> None:
        amount = format_amount(event.data["amount"])
        self._write(f"You got a blackjack! You win {amount} dollars.\n")

    def _on_player_card(self, event: GameEvent) -> None:
        engine = self._engine
        self._write(format_game_state(engine.dealer_hand, engine.player_hand, engine.bet))

    def _on_reached_21(self, event: GameEvent) -> None:
        self._write("Your hand now has a value of 21.")

    def _on_bust(self, event: GameEvent) -> None:
        self._write(f"Bust! You lose {format_amount(event.data['amount'])} dollars.")

    def _on_dealer_hits(self, event: GameEvent) -> None:
        self._write("The dealer's hand must still be resolved.")
        self._write(format_game_state(event.data["dealer_hand"]))

    def _on_outcome(self, event: GameEvent) -> None:
        self._write("Outcome of this hand:")
        self._write(
            format_game_state(
                event.data["dealer_hand"],
                event.data["player_hand"],
                event.data["bet"],
            )
        )
        message = _OUTCOME_MESSAGES[event.data["result"]]
        self._write(message.format(amount=format_amount(event.data["amount"])) + "\n")

    def _on_round_ended(self, event: GameEvent) -> None:
        self._write(format_running_total(event.data["bankroll"]))
