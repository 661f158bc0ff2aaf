import logging
from typing import Iterable, List

from models import AccountSnapshot, ProcessingResult, ProcessingStats, Transaction
from state_manager import StateManager
from transaction_processor import TransactionProcessor
from csv_io import read_transactions

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Replays a transaction stream strictly in order, one record at a time.
    Owns all account state for the lifetime of the run.
    """

    def __init__(self):
        self._state = StateManager()
        self._processor = TransactionProcessor(self._state)
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process(self, transaction: Transaction) -> ProcessingResult:
        """Apply a single record. Invalid records are dropped, never raised."""
        result = self._processor.process_transaction(transaction)
        self._stats.record(result)
        return result

    def process_all(self, transactions: Iterable[Transaction]) -> None:
        for transaction in transactions:
            self.process(transaction)

    def process_file(self, filepath: str) -> List[AccountSnapshot]:
        """
        Process CSV file and return final account states.
        Structural errors in the file propagate and end the run.
        """
        logger.info(f"Processing transactions from {filepath}")

        with open(filepath, "r", newline="") as f:
            self.process_all(read_transactions(f))

        logger.info(
            f"Processed: {self._stats.processed}, "
            f"Applied: {self._stats.applied}, "
            f"Ignored: {self._stats.ignored}"
        )

        return self.snapshot()

    def snapshot(self) -> List[AccountSnapshot]:
        """Return the state of every known account, in no particular order."""
        return [account.snapshot() for account in self._state.get_all_accounts().values()]
