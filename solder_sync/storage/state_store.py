from abc import ABC, abstractmethod

from solder_sync.domain.models import Ledger


class StateStore(ABC):
    """
    Abstract base class for ledger persistence.
    """

    @abstractmethod
    def load(self) -> Ledger:
        """
        Load the last committed ledger.
        Returns an empty ledger when nothing has been committed yet.
        """
        pass

    @abstractmethod
    def commit(self, ledger: Ledger) -> None:
        """Replace the persisted ledger with ``ledger`` in one atomic write."""
        pass
