"""Command-line entry point: play rounds until the player quits."""

import argparse
import logging
from random import Random

from blackjack_sim.game.engine import RoundEngine
from blackjack_sim.game.session import GameSession
from config import config
from console.display import ConsoleReporter
from console.prompts import (
    ACTION_PROMPT,
    AGAIN_PROMPT,
    BET_PROMPT,
    DECKS_PROMPT,
    Reader,
    Writer,
    ask,
    parse_action,
    parse_bet,
    parse_num_decks,
    parse_yes_no,
)

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _positive_int(text: str) -> int:
    try:
        return parse_num_decks(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="blackjack-sim",
        description="Play blackjack against a dealer who hits soft 17.",
    )
    parser.add_argument(
        "--decks",
        type=_positive_int,
        default=config.game.num_decks,
        help="number of decks in the shoe (asked interactively if omitted)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=config.seed,
        help="seed for the shuffle, for reproducible games",
    )
    parser.add_argument(
        "--log-level",
        default=config.logging.level,
        choices=LOG_LEVELS,
        type=str.upper,
        help="logging verbosity (logs go to stderr)",
    )
    return parser


def play_session(engine: RoundEngine, read: Reader = input, write: Writer = print) -> None:
    """
    Play rounds until the player declines another hand.

    Bets and actions are validated here; the engine only ever sees valid
    input.
    """
    while True:
        bet = ask(BET_PROMPT, parse_bet, read, write)
        engine.play_round(bet, lambda _engine: ask(ACTION_PROMPT, parse_action, read, write))

        if not ask(AGAIN_PROMPT, parse_yes_no, read, write):
            write("Thanks for playing!")
            return
        write("")


def main(argv: list[str] | None = None) -> int:
    """Run the console game. Returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    # argparse does not check defaults taken from the environment
    if args.decks is not None and args.decks < 1:
        parser.error(f"BLACKJACK_DECKS must be a positive integer, got {args.decks}")
    if args.log_level not in LOG_LEVELS:
        parser.error(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {args.log_level}")

    logging.basicConfig(level=args.log_level, format=config.logging.format)

    try:
        num_decks = args.decks if args.decks is not None else ask(DECKS_PROMPT, parse_num_decks)
        rng = Random(args.seed) if args.seed is not None else Random()
        engine = RoundEngine(GameSession.create(num_decks=num_decks, rng=rng))
        ConsoleReporter(engine)
        play_session(engine)
    except (EOFError, KeyboardInterrupt):
        print()
        logger.info("Input closed, ending session")
        return 0

    logger.info("Session over after %d rounds", engine.session.rounds_played)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
