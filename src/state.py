from typing import Dict, Mapping

from models import Transaction, ClientAccount


class LedgerState:
    """
    State owned by a single replay run.
    Stores client accounts and the deposit/withdrawal ledger used to link disputes.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._ledger: Dict[int, Transaction] = {}

    @property
    def ledger(self) -> Mapping[int, Transaction]:
        return self._ledger

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def store_transaction(self, transaction: Transaction) -> None:
        """Store a deposit/withdrawal for later dispute lookups. Overwrites a previous entry with the same id."""
        self._ledger[transaction.transaction_id] = transaction

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)
