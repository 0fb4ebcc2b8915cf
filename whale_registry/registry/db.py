"""
SQLite persistence of the registry counter and the ownership ledger.
"""
import datetime
import logging

from peewee import *

from .address import Owner
from .errors import CounterConflict, IdentifierCollision, UnknownToken
from .ledger import OwnershipLedger, check_recipient
from .registry import TokenRegistry, MinterPredicate
from ..onchain.util import INITIAL_TOKEN_ID, TokenId

_LOGGER = logging.getLogger(__name__)

# bound by init_db
sqlite_db = SqliteDatabase(None)

PRAGMAS = {
    "journal_mode": "wal",
    "foreign_keys": 1,
    "ignore_check_constraints": 0,
}

AddressField = lambda **kwargs: CharField(max_length=42, **kwargs)


class BaseModel(Model):
    class Meta:
        database = sqlite_db


class RegistryState(BaseModel):
    """
    Mirrors the counter of a registry
    """

    name = CharField(max_length=64, unique=True)
    next_token_id = IntegerField(default=INITIAL_TOKEN_ID)


class Whale(BaseModel):
    registry = ForeignKeyField(RegistryState, backref="whales", on_delete="CASCADE")
    token_id = IntegerField()
    owner = AddressField(index=True)
    minted_at = DateTimeField(default=datetime.datetime.now)

    class Meta:
        indexes = ((("registry", "token_id"), True),)


MODELS = [RegistryState, Whale]


def init_db(path: str = "whale_registry.db") -> SqliteDatabase:
    """
    Bind the models to the database at path and create missing tables
    """
    pragmas = dict(PRAGMAS)
    if path == ":memory:":
        pragmas.pop("journal_mode")
    sqlite_db.init(path, pragmas=pragmas)
    sqlite_db.create_tables(MODELS)
    return sqlite_db


def get_or_create_registry(name: str) -> RegistryState:
    state, created = RegistryState.get_or_create(name=name)
    if created:
        _LOGGER.info(f"Created registry {name}")
    return state


class DbLedger(OwnershipLedger):
    def __init__(self, registry: RegistryState):
        self.registry = registry

    def _whales(self):
        return Whale.select().where(Whale.registry == self.registry)

    def record_new_ownership(self, token_id: TokenId, owner: str) -> Owner:
        owner = check_recipient(owner)
        existing = self._whales().where(Whale.token_id == token_id).first()
        if existing is not None:
            raise IdentifierCollision(token_id, existing.owner)
        try:
            with sqlite_db.atomic():
                Whale.create(registry=self.registry, token_id=token_id, owner=owner)
        except IntegrityError as e:
            raise IdentifierCollision(token_id, None) from e
        return owner

    def owner_of(self, token_id: TokenId) -> Owner:
        whale = self._whales().where(Whale.token_id == token_id).first()
        if whale is None:
            raise UnknownToken(token_id)
        return whale.owner

    def exists(self, token_id: TokenId) -> bool:
        return self._whales().where(Whale.token_id == token_id).exists()

    def total_supply(self) -> int:
        return self._whales().count()

    def atomic(self):
        return sqlite_db.atomic()


class DbTokenRegistry(TokenRegistry):
    """
    Token registry whose counter is stored in the RegistryState row,
    written in the same transaction as the minted whale.
    """

    def __init__(self, name: str, is_authorized_minter: MinterPredicate):
        self.state = get_or_create_registry(name)
        super().__init__(
            DbLedger(self.state),
            is_authorized_minter,
            next_token_id=self.state.next_token_id,
        )

    def _store_next_token_id(self, next_token_id: TokenId) -> None:
        updated = (
            RegistryState.update(next_token_id=next_token_id)
            .where(
                (RegistryState.id == self.state.id)
                & (RegistryState.next_token_id == self.next_token_id)
            )
            .execute()
        )
        if updated != 1:
            raise CounterConflict(self.next_token_id)
        self.state.next_token_id = next_token_id
