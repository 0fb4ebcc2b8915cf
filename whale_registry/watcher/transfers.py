import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Transfer:
    """
    A token transfer event as observed on the watched token contract
    """

    from_address: str
    to_address: str
    value: int


class TransferSource(ABC):
    @abstractmethod
    def fetch_transfers(self) -> List[Transfer]:
        """
        Return the transfers observed since the previous call
        """


class QueueTransferSource(TransferSource):
    """
    In-process source, transfers are handed over with push()
    """

    def __init__(self):
        self._pending: List[Transfer] = []
        self._lock = threading.Lock()

    def push(self, *transfers: Transfer) -> None:
        with self._lock:
            self._pending.extend(transfers)

    def fetch_transfers(self) -> List[Transfer]:
        with self._lock:
            transfers, self._pending = self._pending, []
        return transfers
