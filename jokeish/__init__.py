"""Jokeish: dad jokes behind JWT bearer-token authentication."""

__version__ = "0.1.0"
