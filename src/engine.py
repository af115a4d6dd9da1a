import logging
from typing import Dict, Iterable, Optional

from models import Transaction, ClientAccount, ProcessingResult, ProcessingStats, link
from processor import TransactionProcessor
from records import RecordSource
from state import LedgerState

logger = logging.getLogger(__name__)


class ReplayEngine:
    """
    Replays an ordered transaction log into per-client account state.
    Each record is linked, indexed and applied before the next one is read.
    """

    def __init__(self, state: Optional[LedgerState] = None):
        self._state = state if state is not None else LedgerState()
        self._processor = TransactionProcessor()
        self._stats = ProcessingStats()

    @property
    def accounts(self) -> Dict[int, ClientAccount]:
        return self._state.get_all_accounts()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def apply(self, transaction: Transaction) -> ProcessingResult:
        """Link a single transaction against the ledger and apply it to its account."""
        transaction = link(transaction, self._state.ledger)

        # Indexed before it is applied, so a record can only be referenced by a later one
        if not transaction.transaction_type.is_dispute_family:
            self._state.store_transaction(transaction)

        account = self._state.get_or_create_account(transaction.client_id)
        result = self._processor.process_transaction(account, transaction)
        self._stats.record(result)
        return result

    def replay(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        """
        Apply every transaction in order and return the final account states.
        Rows a RecordSource skipped while being consumed are added to stats.skipped.
        """
        for transaction in transactions:
            self.apply(transaction)

        if isinstance(transactions, RecordSource):
            self._stats.skipped += transactions.skipped
        return self.accounts

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        logger.info(f"Replaying {filepath}")

        # Undecodable bytes are carried as surrogates so that only their row is skipped
        with open(filepath, "r", newline="", encoding="utf-8-sig", errors="surrogateescape") as f:
            accounts = self.replay(RecordSource(f))

        logger.info(f"Replay complete: {self._stats}")
        return accounts
