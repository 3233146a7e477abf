"""PokéSweep — PSA population report scraper for Pokémon TCG sets."""

__version__ = "0.1.0"
