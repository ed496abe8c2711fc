"""
Chat-to-oracle governance relay.

This package accepts governance proposals raised in a chat guild, asks the
Witnet oracle network to tally them once their deadline passes, and reports
and executes the outcome against the DAO's Aragon Govern queue.
"""

__all__ = [
]
