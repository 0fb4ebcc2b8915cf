"""
The token registry allocates whale ids and hands them to the ownership ledger.
Ids start at INITIAL_TOKEN_ID and advance by exactly one per successful mint.
A rejected mint does not consume an id.
"""
import logging
import threading
from typing import Callable, Iterable, Optional

from .address import Owner, normalize_address
from .errors import IdentifierCollision, InvalidRecipient, Unauthorized
from .ledger import OwnershipLedger
from ..onchain.util import INITIAL_TOKEN_ID, TokenId, increment_token_id

_LOGGER = logging.getLogger(__name__)

MinterPredicate = Callable[[Optional[str]], bool]


class OpenMinting:
    """
    Anyone may mint
    """

    def __call__(self, minter: Optional[str]) -> bool:
        return True


def open_minting() -> MinterPredicate:
    return OpenMinting()


def allow_list(minters: Iterable[str]) -> MinterPredicate:
    """
    Only the given addresses may mint
    """
    allowed = frozenset(normalize_address(m) for m in minters)

    def is_authorized_minter(minter: Optional[str]) -> bool:
        if minter is None:
            return False
        try:
            return normalize_address(minter) in allowed
        except InvalidRecipient:
            return False

    return is_authorized_minter


class TokenRegistry:
    def __init__(
        self,
        ledger: OwnershipLedger,
        is_authorized_minter: MinterPredicate,
        next_token_id: TokenId = INITIAL_TOKEN_ID,
    ):
        if next_token_id < INITIAL_TOKEN_ID:
            raise ValueError(f"Counter must not be negative: {next_token_id}")
        self.ledger = ledger
        self.is_authorized_minter = is_authorized_minter
        self._next_token_id = next_token_id
        self._lock = threading.Lock()
        if isinstance(is_authorized_minter, OpenMinting):
            _LOGGER.warning("Registry allows minting by any caller")

    @property
    def next_token_id(self) -> TokenId:
        return self._next_token_id

    def _store_next_token_id(self, next_token_id: TokenId) -> None:
        """
        Persist the counter. Called inside ledger.atomic() after the ownership was recorded.
        """

    def mint(self, target_owner: str, minter: Optional[str] = None) -> TokenId:
        """
        Mint a new whale to target_owner and return its id.

        Raises Unauthorized if the minter is rejected and InvalidRecipient if the
        ledger rejects the owner. In both cases the counter does not move.
        """
        if not self.is_authorized_minter(minter):
            _LOGGER.info(f"Rejected mint by {minter}")
            raise Unauthorized(minter)
        with self._lock:
            token_id = self._next_token_id
            next_token_id = increment_token_id(token_id)
            try:
                with self.ledger.atomic():
                    owner = self.ledger.record_new_ownership(token_id, target_owner)
                    self._store_next_token_id(next_token_id)
            except IdentifierCollision:
                _LOGGER.critical(
                    f"Token {token_id} was already minted, the counter is corrupt"
                )
                raise
            self._next_token_id = next_token_id
        _LOGGER.info(f"Minted whale {token_id} to {owner}")
        return token_id

    def owner_of(self, token_id: TokenId) -> Owner:
        return self.ledger.owner_of(token_id)

    def exists(self, token_id: TokenId) -> bool:
        return self.ledger.exists(token_id)

    def total_minted(self) -> int:
        return self.ledger.total_supply()
