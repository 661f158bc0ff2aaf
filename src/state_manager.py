from typing import Dict, Optional, Set

from models import ClientAccount


class StateManager:
    """
    Owns the account table and the set of transaction ids already consumed.
    Each account keeps its own disputable deposits, so a lookup by id is always
    scoped to the client that issued the dispute.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._used_transaction_ids: Set[int] = set()

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        """Return the account if it exists. Never creates one."""
        return self._accounts.get(client_id)

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def is_transaction_id_used(self, transaction_id: int) -> bool:
        return transaction_id in self._used_transaction_ids

    def record_transaction_id(self, transaction_id: int) -> None:
        """Remember the id of an applied deposit or withdrawal."""
        self._used_transaction_ids.add(transaction_id)

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)
