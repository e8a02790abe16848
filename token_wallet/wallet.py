"""
Token Wallet Ledger

Single-owner balance table. The owner's balance is held in its own field,
separate from the counterparty balances, and every read or write of either
happens under one wallet-wide lock so a transfer's debit and credit are
observed as a single step.
"""

from datetime import datetime, timezone
from dataclasses import dataclass, field
from typing import Dict, Optional
import logging
import threading

from .exceptions import (
    InsufficientFundsError, InvalidAmountError, InvalidAddressError,
    BalanceOverflowError
)
from .logging_config import log_action


U64_MAX = 2 ** 64 - 1

OWNER = "<owner>"  # Label used in logs and overflow errors for the owner balance

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WalletSnapshot:
    """Point-in-time copy of the balance table"""
    owner_balance: int
    balances: Dict[str, int]
    taken_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def total(self) -> int:
        """Total recorded value across owner and counterparties"""
        return self.owner_balance + sum(self.balances.values())

    def to_dict(self) -> Dict:
        return {
            "owner_balance": self.owner_balance,
            "balances": dict(self.balances),
            "total": self.total(),
            "taken_at": self.taken_at.isoformat()
        }


class Wallet:
    """
    In-memory token wallet.

    Holds the owner's balance plus the balances of every counterparty the
    owner has sent tokens to. Missing counterparties read as zero.
    Credits that would exceed ``max_balance`` raise BalanceOverflowError
    and leave the table unchanged.
    """

    def __init__(self, max_balance: int = U64_MAX):
        if isinstance(max_balance, bool) or not isinstance(max_balance, int):
            raise InvalidAmountError("max_balance must be an integer")
        if not 0 <= max_balance <= U64_MAX:
            raise InvalidAmountError(f"max_balance must be between 0 and {U64_MAX}")

        self.max_balance = max_balance
        self._owner_balance = 0
        self._balances: Dict[str, int] = {}
        self._lock = threading.Lock()

    def get_balance(self) -> int:
        """Get the owner's current balance"""
        with self._lock:
            return self._owner_balance

    def balance_of(self, address: str) -> int:
        """Get a counterparty's balance, zero if never credited"""
        self._validate_address(address)
        with self._lock:
            return self._balances.get(address, 0)

    @property
    def counterparty_count(self) -> int:
        with self._lock:
            return len(self._balances)

    def send_tokens(self, to_address: str, amount: int) -> int:
        """
        Transfer tokens from the owner's balance to another address

        Args:
            to_address: Recipient address
            amount: Number of tokens to send

        Returns:
            Owner balance left by this transfer

        Raises:
            InsufficientFundsError: If the owner holds fewer than ``amount`` tokens
            BalanceOverflowError: If the recipient balance would exceed the limit
            InvalidAddressError: If the address is empty
            InvalidAmountError: If the amount is negative or out of range
        """
        self._validate_address(to_address)
        self._validate_amount(amount)

        with self._lock:
            available = self._owner_balance
            recipient_balance = self._balances.get(to_address, 0)
            if available < amount:
                error = InsufficientFundsError(available=available, requested=amount)
            else:
                error = self._check_credit(to_address, recipient_balance, amount)

            if error is None:
                # Both writes happen before the lock is released
                self._owner_balance = available - amount
                self._balances[to_address] = recipient_balance + amount
                remaining = self._owner_balance

        if isinstance(error, InsufficientFundsError):
            log_action(
                logger, "warning", f"Rejected send of {amount} tokens to {to_address}: insufficient funds",
                action="send_tokens", resource=to_address,
                extra={"amount": amount, "available": available}
            )
            raise error
        if error is not None:
            self._log_overflow(error)
            raise error

        log_action(
            logger, "info", f"Sent {amount} tokens to {to_address}",
            action="send_tokens", resource=to_address,
            extra={"amount": amount, "balance": remaining}
        )
        return remaining

    def receive_tokens(self, from_address: str, amount: int) -> int:
        """
        Credit tokens to the owner's balance

        Args:
            from_address: Sender address, recorded in the log only
            amount: Number of tokens received

        Returns:
            Owner balance after this credit

        Raises:
            BalanceOverflowError: If the owner balance would exceed the limit
        """
        self._validate_address(from_address)
        self._validate_amount(amount)

        with self._lock:
            error = self._check_credit(OWNER, self._owner_balance, amount)
            if error is None:
                self._owner_balance += amount
                balance = self._owner_balance

        if error is not None:
            self._log_overflow(error)
            raise error

        log_action(
            logger, "info", f"Received {amount} tokens from {from_address}",
            action="receive_tokens", resource=from_address,
            extra={"amount": amount, "balance": balance}
        )
        return balance

    def snapshot(self) -> WalletSnapshot:
        """Take a consistent copy of the whole table"""
        with self._lock:
            return WalletSnapshot(
                owner_balance=self._owner_balance,
                balances=dict(self._balances)
            )

    def _check_credit(self, address: str, balance: int, amount: int) -> Optional[BalanceOverflowError]:
        """Return the overflow error a credit would cause, if any"""
        if balance + amount > self.max_balance:
            return BalanceOverflowError(address, balance, amount, self.max_balance)
        return None

    @staticmethod
    def _log_overflow(error: BalanceOverflowError) -> None:
        log_action(
            logger, "error", str(error), action="credit", resource=error.address,
            extra={"balance": error.balance, "amount": error.amount, "limit": error.limit}
        )

    @staticmethod
    def _validate_amount(amount: int) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise InvalidAmountError(f"Amount must be an integer, got {type(amount).__name__}")
        if amount < 0:
            raise InvalidAmountError("Amount must not be negative")
        if amount > U64_MAX:
            raise InvalidAmountError(f"Amount must not exceed {U64_MAX}")

    @staticmethod
    def _validate_address(address: str) -> None:
        if not isinstance(address, str):
            raise InvalidAddressError(f"Address must be a string, got {type(address).__name__}")
        if not address.strip():
            raise InvalidAddressError("Address must not be empty")
