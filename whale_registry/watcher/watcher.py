"""
The transfer watcher polls a transfer source a bounded number of times and
mints a whale to the sender of every transfer above the value threshold.
"""
import logging
import threading
from typing import List, Optional

from .transfers import Transfer, TransferSource
from ..registry.address import short_address
from ..registry.errors import RegistryError, WatcherAlreadyRunning, WatcherNotRunning
from ..registry.registry import TokenRegistry

_LOGGER = logging.getLogger(__name__)

POLL_LIMIT = 3
POLL_INTERVAL = 10
WHALE_THRESHOLD = 1_000_000


def format_transfer(transfer: Transfer) -> str:
    return (
        f"{short_address(transfer.from_address)} -> "
        f"{short_address(transfer.to_address)}, value: {transfer.value}"
    )


class TransferWatcher:
    def __init__(
        self,
        registry: TokenRegistry,
        source: TransferSource,
        poll_limit: int = POLL_LIMIT,
        poll_interval: float = POLL_INTERVAL,
        value_threshold: int = WHALE_THRESHOLD,
        minter: Optional[str] = None,
    ):
        self.registry = registry
        self.source = source
        self.poll_limit = poll_limit
        self.poll_interval = poll_interval
        self.value_threshold = value_threshold
        self.minter = minter
        self._logs: List[str] = []
        self._poll_count = 0
        # set while a watch is running, replaced on every start
        self._stop_event: Optional[threading.Event] = None
        self._lock = threading.Lock()

    @property
    def is_polling(self) -> bool:
        with self._lock:
            return self._stop_event is not None

    @property
    def poll_count(self) -> int:
        with self._lock:
            return self._poll_count

    @property
    def logs(self) -> List[str]:
        with self._lock:
            return list(self._logs)

    def start(self) -> str:
        """
        Start watching for transfers. Logs and poll count are reset.
        """
        with self._lock:
            if self._stop_event is not None:
                raise WatcherAlreadyRunning()
            self._logs.clear()
            self._poll_count = 0
            stop_event = threading.Event()
            self._stop_event = stop_event
        threading.Thread(
            target=self._run,
            args=(stop_event,),
            name="transfer-watcher",
            daemon=True,
        ).start()
        _LOGGER.info(f"Watching for transfers, polling {self.poll_limit} times")
        return f"Watching for logs, polling {self.poll_limit} times."

    def stop(self) -> str:
        """
        Stop the watch before it reaches the poll limit
        """
        with self._lock:
            if self._stop_event is None:
                raise WatcherNotRunning()
            self._stop_event.set()
            self._stop_event = None
        _LOGGER.info("Stopped watching for transfers")
        return "Watching for logs stopped."

    def _finish(self, stop_event: threading.Event) -> None:
        with self._lock:
            stop_event.set()
            if self._stop_event is stop_event:
                self._stop_event = None

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.poll_interval):
            try:
                self.poll_once(stop_event)
            except Exception:
                _LOGGER.exception("Polling transfers failed, stopping the watch")
                self._finish(stop_event)
                return

    def poll_once(self, stop_event: Optional[threading.Event] = None) -> List[int]:
        """
        Process the transfers that arrived since the last poll.
        Returns the ids of the whales minted.

        A poll belonging to a watch that was stopped still mints, but no longer
        touches the logs and poll count of the current watch.
        """
        with self._lock:
            if stop_event is None:
                stop_event = self._stop_event
        minted = []
        for transfer in self.source.fetch_transfers():
            if transfer.value <= self.value_threshold:
                _LOGGER.debug(f"Ignoring transfer of {transfer.value}")
                continue
            with self._lock:
                if stop_event is self._stop_event:
                    self._logs.append(format_transfer(transfer))
            try:
                minted.append(self.registry.mint(transfer.from_address, self.minter))
            except RegistryError as e:
                _LOGGER.warning(f"Could not mint whale to {transfer.from_address}: {e}")

        with self._lock:
            if stop_event is not self._stop_event:
                _LOGGER.debug("Watch ended during poll, not counting it")
                return minted
            self._poll_count += 1
            if self._poll_count >= self.poll_limit and stop_event is not None:
                _LOGGER.info("Poll limit reached")
                stop_event.set()
                self._stop_event = None
        return minted
