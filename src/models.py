from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Mapping, Optional


class InvalidOperationKind(ValueError):
    """Raised when a record's type tag is not one of the known operations."""


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def is_dispute_family(self) -> bool:
        return self in (TransactionType.DISPUTE, TransactionType.RESOLVE, TransactionType.CHARGEBACK)


class ProcessingResult(Enum):
    APPLIED = "applied"
    UNRESOLVED = "unresolved"


@dataclass
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None
    # Copy of the deposit/withdrawal a dispute-family record acts on, filled in by link()
    reference: Optional["Transaction"] = None

    @property
    def value(self) -> Decimal:
        """Amount used for arithmetic; a missing amount counts as zero."""
        return self.amount if self.amount is not None else Decimal("0")

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return self.available + self.held

    def credit(self, amount: Decimal) -> None:
        self.available += amount

    def debit(self, amount: Decimal) -> None:
        self.available -= amount

    def hold(self, amount: Decimal) -> None:
        self.available -= amount
        self.held += amount

    def release_hold(self, amount: Decimal) -> None:
        self.held -= amount
        self.available += amount

    def charge_back(self, amount: Decimal) -> None:
        self.held -= amount
        self.available -= amount
        self.locked = True


class ProcessingStats:
    """Counters for one replay run."""

    def __init__(self):
        self.applied = 0
        self.unresolved = 0
        self.skipped = 0

    def record(self, result: ProcessingResult) -> None:
        if result == ProcessingResult.APPLIED:
            self.applied += 1
        else:
            self.unresolved += 1

    def __repr__(self) -> str:
        return f"Applied: {self.applied}, Unresolved: {self.unresolved}, Skipped: {self.skipped}"


def classify(raw: str) -> TransactionType:
    """Map an input tag to its TransactionType. Matching is exact and case-sensitive."""
    try:
        return TransactionType(raw)
    except ValueError:
        raise InvalidOperationKind(f"Invalid transaction type: {raw!r}") from None


def link(transaction: Transaction, ledger: Mapping[int, Transaction]) -> Transaction:
    """
    Resolve the back-reference of a dispute-family record.

    The referenced deposit/withdrawal is attached as an independent copy, so later
    changes to the ledger entry never reach the linked record. An unknown
    transaction id leaves the reference empty. Deposits and withdrawals are
    returned unchanged.
    """
    if not transaction.transaction_type.is_dispute_family:
        return transaction

    original = ledger.get(transaction.transaction_id)
    reference = replace(original) if original is not None else None
    return replace(transaction, reference=reference)
