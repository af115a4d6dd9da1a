import logging

from models import Transaction, TransactionType, ClientAccount, ProcessingResult

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies linked transactions to client accounts.
    Never rejects a transaction: locked accounts and overdrafts are not checked.
    """

    def process_transaction(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        """
        Apply a single transaction to its account.

        Returns:
            APPLIED: The account was updated
            UNRESOLVED: Dispute-family record with no referenced transaction, account unchanged
        """
        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                account.credit(transaction.value)
                return ProcessingResult.APPLIED
            case TransactionType.WITHDRAWAL:
                account.debit(transaction.value)
                return ProcessingResult.APPLIED

        original = transaction.reference
        if original is None:
            logger.info(f"{transaction.transaction_type.value.capitalize()} for tx {transaction.transaction_id}: referenced transaction not found, ignoring")
            return ProcessingResult.UNRESOLVED

        match transaction.transaction_type:
            case TransactionType.DISPUTE:
                account.hold(original.value)
            case TransactionType.RESOLVE:
                account.release_hold(original.value)
            case TransactionType.CHARGEBACK:
                account.charge_back(original.value)
        return ProcessingResult.APPLIED
