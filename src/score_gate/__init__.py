"""Wallet-authenticated, anti-cheat score submission gate."""

__version__ = "0.1.0"
