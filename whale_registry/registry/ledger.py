"""
The ownership ledger records which owner holds which whale.
The registry only ever adds to it; transfers and approvals are not part of this capability.
"""
import contextlib
from abc import ABC, abstractmethod
from typing import Dict

from .address import Owner, is_zero_address, normalize_address
from .errors import InvalidRecipient, IdentifierCollision, UnknownToken
from ..onchain.util import TokenId


def check_recipient(owner: str) -> Owner:
    """
    Resolve the owner to its canonical form, rejecting malformed and zero addresses
    """
    owner = normalize_address(owner)
    if is_zero_address(owner):
        raise InvalidRecipient(owner)
    return owner


class OwnershipLedger(ABC):
    @abstractmethod
    def record_new_ownership(self, token_id: TokenId, owner: str) -> Owner:
        """
        Record that token_id is newly owned by owner and return the canonical owner.
        Raises InvalidRecipient for a malformed or zero owner and
        IdentifierCollision if token_id already has an owner.
        """

    @abstractmethod
    def owner_of(self, token_id: TokenId) -> Owner:
        """
        Raises UnknownToken if token_id was never minted.
        """

    @abstractmethod
    def exists(self, token_id: TokenId) -> bool:
        pass

    @abstractmethod
    def total_supply(self) -> int:
        pass

    @contextlib.contextmanager
    def atomic(self):
        """
        Groups the writes of a single mint. Backends with transactions roll back on error.
        """
        yield


class InMemoryLedger(OwnershipLedger):
    def __init__(self):
        self._owners: Dict[TokenId, Owner] = {}

    def record_new_ownership(self, token_id: TokenId, owner: str) -> Owner:
        owner = check_recipient(owner)
        if token_id in self._owners:
            raise IdentifierCollision(token_id, self._owners[token_id])
        self._owners[token_id] = owner
        return owner

    def owner_of(self, token_id: TokenId) -> Owner:
        try:
            return self._owners[token_id]
        except KeyError:
            raise UnknownToken(token_id) from None

    def exists(self, token_id: TokenId) -> bool:
        return token_id in self._owners

    def total_supply(self) -> int:
        return len(self._owners)
