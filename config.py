"""Configuration management with environment variable support."""

import os
from dataclasses import dataclass, field


def _parse_optional_int(name: str) -> int | None:
    """Parse an integer environment variable, None when unset or blank."""
    value = os.getenv(name, "").strip()
    return int(value) if value else None


@dataclass(frozen=True)
class GameConfig:
    """Table setup. House rules are fixed by the engine."""

    # Unset means the console asks for it
    num_decks: int | None = field(default_factory=lambda: _parse_optional_int("BLACKJACK_DECKS"))


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "WARNING").upper())
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class AppConfig:
    """Application configuration."""

    seed: int | None = field(default_factory=lambda: _parse_optional_int("BLACKJACK_SEED"))

    game: GameConfig = field(default_factory=GameConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# Global configuration instance
config = AppConfig()
