"""Pokemon Manager API: cached PokeAPI proxy with user favorites."""

__version__ = "1.0.0"
