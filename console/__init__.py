"""Console shell for the blackjack simulator."""
