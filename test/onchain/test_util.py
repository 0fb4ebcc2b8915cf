import pytest
from hypothesis import strategies as st
from hypothesis import given

from opshin.ledger.api_v2 import (
    Address,
    NoOutputDatum,
    NoScriptHash,
    NoStakingCredential,
    PubKeyCredential,
    TxId,
    TxOut,
    TxOutRef,
)
from opshin.prelude import Token

from whale_registry.onchain.util import (
    INITIAL_TOKEN_ID,
    check_mint_exactly_one_with_name,
    check_preserves_value,
    increment_token_id,
    whale_token_name,
)
from whale_registry.onchain.registry.registry import (
    RegistryDatum,
    RegistryParams,
    check_registry_transition,
    check_whale_delivered,
)
from whale_registry.onchain.registry.registry_nft import registry_nft_name

WHALE_POLICY = bytes.fromhex("aa" * 28)
REGISTRY_NFT = Token(bytes.fromhex("bb" * 28), b"registry")
MINTER = bytes.fromhex("cc" * 28)

PARAMS = RegistryParams(WHALE_POLICY, REGISTRY_NFT, MINTER)


def address(pkh: bytes) -> Address:
    return Address(PubKeyCredential(pkh), NoStakingCredential())


def output(addr: Address, value: dict) -> TxOut:
    return TxOut(addr, value, NoOutputDatum(), NoScriptHash())


@given(st.integers(min_value=INITIAL_TOKEN_ID))
def test_increment_token_id(token_id: int):
    next_id = increment_token_id(token_id)
    assert next_id == token_id + 1


@given(st.integers(min_value=0), st.integers(min_value=0))
def test_whale_token_name_unique(a: int, b: int):
    assert (a == b) == (whale_token_name(a) == whale_token_name(b))


def test_whale_token_name():
    assert whale_token_name(0) == b"WHALE#0"
    assert whale_token_name(1234) == b"WHALE#1234"
    # token names are limited to 32 bytes
    assert len(whale_token_name(2**64)) <= 32
    with pytest.raises(AssertionError):
        whale_token_name(-1)


def test_check_mint_exactly_one_with_name():
    name = whale_token_name(3)
    check_mint_exactly_one_with_name({WHALE_POLICY: {name: 1}}, WHALE_POLICY, name)
    with pytest.raises(AssertionError):
        check_mint_exactly_one_with_name(
            {WHALE_POLICY: {name: 2}}, WHALE_POLICY, name
        )
    with pytest.raises(AssertionError):
        check_mint_exactly_one_with_name(
            {WHALE_POLICY: {name: 1, whale_token_name(4): 1}}, WHALE_POLICY, name
        )
    with pytest.raises(KeyError):
        check_mint_exactly_one_with_name({}, WHALE_POLICY, name)


@given(st.integers(min_value=0, max_value=2**64))
def test_registry_transition_advances_by_one(token_id: int):
    previous_state = RegistryDatum(PARAMS, token_id)
    check_registry_transition(previous_state, RegistryDatum(PARAMS, token_id + 1))
    for wrong_id in (token_id, token_id + 2, token_id - 1):
        with pytest.raises(AssertionError):
            check_registry_transition(previous_state, RegistryDatum(PARAMS, wrong_id))


def test_registry_transition_keeps_params():
    previous_state = RegistryDatum(PARAMS, 5)
    other_params = RegistryParams(WHALE_POLICY, REGISTRY_NFT, bytes.fromhex("dd" * 28))
    with pytest.raises(AssertionError):
        check_registry_transition(previous_state, RegistryDatum(other_params, 6))


def test_check_whale_delivered():
    whale = Token(WHALE_POLICY, whale_token_name(0))
    recipient = address(bytes.fromhex("01" * 28))
    check_whale_delivered(
        whale, recipient, output(recipient, {WHALE_POLICY: {whale.token_name: 1}})
    )
    with pytest.raises(AssertionError):
        check_whale_delivered(
            whale,
            recipient,
            output(
                address(bytes.fromhex("02" * 28)),
                {WHALE_POLICY: {whale.token_name: 1}},
            ),
        )
    with pytest.raises(AssertionError):
        check_whale_delivered(whale, recipient, output(recipient, {}))


def test_check_preserves_value():
    registry_address = address(bytes.fromhex("03" * 28))
    before = output(
        registry_address,
        {
            b"": {b"": 2_000_000},
            REGISTRY_NFT.policy_id: {REGISTRY_NFT.token_name: 1},
        },
    )
    check_preserves_value(before, before)
    with pytest.raises(AssertionError):
        check_preserves_value(
            before, output(registry_address, {b"": {b"": 2_000_000}})
        )


def test_registry_nft_name_depends_on_spent_utxo():
    tx_id = TxId(bytes.fromhex("ee" * 32))
    name = registry_nft_name(TxOutRef(tx_id, 0))
    assert len(name) == 32
    assert name == registry_nft_name(TxOutRef(tx_id, 0))
    assert name != registry_nft_name(TxOutRef(tx_id, 1))
    assert name != registry_nft_name(TxOutRef(TxId(bytes.fromhex("ef" * 32)), 0))
