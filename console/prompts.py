"""Input parsing and re-prompting for the console shell."""

from decimal import Decimal, InvalidOperation
from typing import Callable, TypeVar

from blackjack_sim.game.state import PlayerAction

T = TypeVar("T")

Reader = Callable[[str], str]
Writer = Callable[[str], None]

DECKS_PROMPT = "Enter number of decks to be in the shoe: "
BET_PROMPT = "Enter your bet in dollars: "
ACTION_PROMPT = "Enter hit, stand, or double down: "
AGAIN_PROMPT = "Would you like to play another hand? Enter yes or no: "


def parse_num_decks(text: str) -> int:
    """Parse a positive deck count."""
    try:
        num_decks = int(text.strip())
    except ValueError:
        num_decks = 0
    if num_decks < 1:
        raise ValueError("Please enter a positive number of decks.")
    return num_decks


def parse_bet(text: str) -> Decimal:
    """Parse a nonnegative bet in dollars."""
    try:
        amount = Decimal(text.strip())
    except InvalidOperation:
        raise ValueError("Please enter a nonnegative bet.") from None
    if not amount.is_finite() or amount < 0:
        raise ValueError("Please enter a nonnegative bet.")
    return amount


def parse_action(text: str) -> PlayerAction:
    """Parse one of "hit", "stand" or "double down"."""
    return PlayerAction.from_token(text.strip())


def parse_yes_no(text: str) -> bool:
    """Parse a yes/no answer."""
    answer = text.strip()
    if answer == "yes":
        return True
    if answer == "no":
        return False
    raise ValueError(f"Invalid input: {answer}")


def ask(
    prompt: str,
    parser: Callable[[str], T],
    read: Reader = input,
    write: Writer = print,
) -> T:
    """
    Prompt until the parser accepts the answer.

    Args:
        prompt: Text shown before reading
        parser: Converts the raw answer, raising ValueError to reject it
        read: Reads one line after showing the prompt
        write: Prints rejection messages

    Returns:
        The parsed answer
    """
    while True:
        text = read(prompt)
        try:
            return parser(text)
        except ValueError as exc:
            write(str(exc))
