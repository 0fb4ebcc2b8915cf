"""
The whale registry contract.
This contract maintains the counter of a registry thread and allows for the minting of new whales.
A registry thread is authenticated by the presence of a registry nft along the UTxO holding the state as datum.

This contract is intended to have mints with these contracts:
- registry/whale_nft: Mints 1 whale named after the current next_token_id during Whale Minting

Outputs of this contract may go to:
- registry/registry (1 at most, the continuing registry state)

NFTs present at outputs of this contract:
- registry/registry_nft (1 at most for the continuing output)

It is not allowed to spend several registry states in a single transaction.
"""

from whale_registry.onchain.util import *


@dataclass
class RegistryParams(PlutusData):
    """
    Non-updatable parameters of the registry
    """

    CONSTR_ID = 0
    whale_nft_policy: PolicyId
    registry_nft: Token
    # the only key allowed to mint whales from this registry
    minter: PubKeyHash


@dataclass
class RegistryDatum(PlutusData):
    """
    Datum for the registry state
    """

    CONSTR_ID = 0
    params: RegistryParams
    next_token_id: TokenId


@dataclass
class MintWhale(PlutusData):
    """
    Redeemer for the Registry contract to mint a new whale.
    """

    CONSTR_ID = 1
    registry_input_index: int
    registry_output_index: int
    recipient_output_index: int
    recipient: Address


def check_registry_transition(
    previous_state: RegistryDatum, next_state: RegistryDatum
) -> None:
    """
    Ensure that the registry only moves its counter forward by exactly one
    and leaves all parameters untouched.
    """
    desired_next_state = RegistryDatum(
        previous_state.params,
        increment_token_id(previous_state.next_token_id),
    )
    assert (
        desired_next_state == next_state
    ), "Registry must not change except for the next_token_id"


def check_whale_delivered(
    whale: Token, recipient: Address, recipient_output: TxOut
) -> None:
    """
    Check that the minted whale ends up at the requested recipient
    """
    assert (
        recipient_output.address == recipient
    ), "Whale output is not at the recipient address"
    assert (
        amount_of_token_in_output(whale, recipient_output) == 1
    ), "Exactly one whale must be sent to the recipient"


def validate_mint_whale(
    state: RegistryDatum, registry_input: TxOut, redeemer: MintWhale, tx_info: TxInfo
) -> None:
    """
    Validate the minting of a new whale.
    This ensures that the whale minted is the one proposed by the counter,
    that the counter advances and that the whale is delivered to the recipient.
    """
    params = state.params
    assert user_signed_tx(params.minter, tx_info), "Minter did not sign"

    next_registry_output = resolve_linear_output(
        registry_input, tx_info, redeemer.registry_output_index
    )
    next_state: RegistryDatum = resolve_datum_unsafe(next_registry_output, tx_info)
    check_registry_transition(state, next_state)
    check_preserves_value(registry_input, next_registry_output)
    assert token_present_in_output(
        params.registry_nft, next_registry_output
    ), "RegistryNFT missing from continuing output"

    whale = Token(params.whale_nft_policy, whale_token_name(state.next_token_id))
    check_mint_exactly_one_with_name(
        tx_info.mint, whale.policy_id, whale.token_name
    )
    check_whale_delivered(
        whale,
        redeemer.recipient,
        tx_info.outputs[redeemer.recipient_output_index],
    )


def validator(state: RegistryDatum, redeemer: MintWhale, context: ScriptContext) -> None:
    """
    Registry Contract.

    Ensures that whales are only minted under fresh, strictly increasing ids.
    There is no other way to spend the registry.
    """
    purpose = get_spending_purpose(context)
    tx_info = context.tx_info

    registry_input = resolve_linear_input(
        tx_info, redeemer.registry_input_index, purpose
    )
    validate_mint_whale(state, registry_input, redeemer, tx_info)
