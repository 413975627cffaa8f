"""vault-calendar - classify markdown notes onto calendar days."""

__version__ = "0.4.0"
