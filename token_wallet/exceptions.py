"""
Wallet Exceptions

Errors raised by the wallet core. Only InsufficientFundsError is a
recoverable mutation failure; overflow is fatal and must not be retried.
"""


class WalletError(Exception):
    """Base class for all wallet errors"""


class InsufficientFundsError(WalletError):
    """Owner balance is below the requested transfer amount"""

    def __init__(self, available: int, requested: int):
        super().__init__("Insufficient funds")
        self.available = available
        self.requested = requested


class InvalidAmountError(WalletError, ValueError):
    """Amount is not an integer in the allowed range"""


class InvalidAddressError(WalletError, ValueError):
    """Address is empty or not a string"""


class BalanceOverflowError(WalletError, OverflowError):
    """A credit would push a balance past the configured ceiling"""

    def __init__(self, address: str, balance: int, amount: int, limit: int):
        super().__init__(
            f"Crediting {amount} to {address} would exceed the balance limit "
            f"({balance} + {amount} > {limit})"
        )
        self.address = address
        self.balance = balance
        self.amount = amount
        self.limit = limit
