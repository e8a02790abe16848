"""
Token Wallet

A minimal single-owner token wallet: an in-memory balance table with
lock-guarded send, receive and balance operations.
"""

__version__ = "1.0.0"
