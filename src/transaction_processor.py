import logging

from models import Deposit, DepositState, Transaction, TransactionType, ProcessingResult
from state_manager import StateManager

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions against state, one at a time.
    Returns ProcessingResult to indicate whether the record changed any state.
    Invalid records are dropped without touching state.
    """

    def __init__(self, state: StateManager):
        self._state = state

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        Returns:
            APPLIED: State was updated
            IGNORED: Record was invalid or not applicable, nothing changed
        """
        if not transaction.has_valid_amount():
            logger.debug(f"{transaction}: invalid amount for {transaction.transaction_type.value}, ignoring")
            return ProcessingResult.IGNORED

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self._handle_deposit(transaction)
            case TransactionType.WITHDRAWAL:
                return self._handle_withdrawal(transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(transaction)
            case TransactionType.RESOLVE:
                return self._handle_resolve(transaction)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(transaction)
            case _:
                return ProcessingResult.IGNORED

    def _handle_deposit(self, transaction: Transaction) -> ProcessingResult:
        if self._state.is_transaction_id_used(transaction.transaction_id):
            logger.debug(f"Deposit tx {transaction.transaction_id}: duplicate transaction id, ignoring")
            return ProcessingResult.IGNORED

        existing = self._state.get_account(transaction.client_id)
        if existing is not None and existing.locked:
            logger.debug(f"Deposit tx {transaction.transaction_id}: account {transaction.client_id} is locked")
            return ProcessingResult.IGNORED

        account = self._state.get_or_create_account(transaction.client_id)
        account.credit(transaction.amount)
        account.deposits[transaction.transaction_id] = Deposit(
            transaction_id=transaction.transaction_id,
            amount=transaction.amount,
        )
        self._state.record_transaction_id(transaction.transaction_id)
        return ProcessingResult.APPLIED

    def _handle_withdrawal(self, transaction: Transaction) -> ProcessingResult:
        account = self._state.get_account(transaction.client_id)
        if account is None:
            logger.debug(f"Withdrawal tx {transaction.transaction_id}: unknown client {transaction.client_id}")
            return ProcessingResult.IGNORED

        if account.locked:
            logger.debug(f"Withdrawal tx {transaction.transaction_id}: account {account.client_id} is locked")
            return ProcessingResult.IGNORED

        if account.available < transaction.amount:
            logger.debug(f"Withdrawal tx {transaction.transaction_id}: insufficient funds ({account.available} < {transaction.amount})")
            return ProcessingResult.IGNORED

        account.debit(transaction.amount)
        self._state.record_transaction_id(transaction.transaction_id)
        return ProcessingResult.APPLIED

    def _handle_dispute(self, transaction: Transaction) -> ProcessingResult:
        found = self._find_deposit(transaction, DepositState.NORMAL)
        if found is None:
            return ProcessingResult.IGNORED

        account, deposit = found
        account.hold(deposit.amount)
        deposit.state = DepositState.DISPUTED
        return ProcessingResult.APPLIED

    def _handle_resolve(self, transaction: Transaction) -> ProcessingResult:
        found = self._find_deposit(transaction, DepositState.DISPUTED)
        if found is None:
            return ProcessingResult.IGNORED

        account, deposit = found
        account.release_hold(deposit.amount)
        deposit.state = DepositState.RESOLVED
        return ProcessingResult.APPLIED

    def _handle_chargeback(self, transaction: Transaction) -> ProcessingResult:
        found = self._find_deposit(transaction, DepositState.DISPUTED)
        if found is None:
            return ProcessingResult.IGNORED

        account, deposit = found
        account.remove_held(deposit.amount)
        account.lock()
        deposit.state = DepositState.CHARGED_BACK
        return ProcessingResult.APPLIED

    def _find_deposit(self, transaction: Transaction, expected_state: DepositState):
        """
        Look up the referenced deposit in the issuing client's own index.
        Returns (account, deposit) or None when the record does not apply.
        """
        kind = transaction.transaction_type.value.capitalize()

        account = self._state.get_account(transaction.client_id)
        if account is None:
            logger.debug(f"{kind} for tx {transaction.transaction_id}: unknown client {transaction.client_id}")
            return None

        deposit = account.deposits.get(transaction.transaction_id)
        if deposit is None:
            # also covers ids that belong to another client or to a withdrawal
            logger.debug(f"{kind} for tx {transaction.transaction_id}: no such deposit for client {account.client_id}")
            return None

        if deposit.state != expected_state:
            logger.debug(f"{kind} for tx {transaction.transaction_id}: deposit is {deposit.state.value}, expected {expected_state.value}")
            return None

        return account, deposit
