"""
The whale NFT contract.
Every whale is named after the id the registry thread proposes at the time of minting.

This contract is intended to have inputs from these contracts:
- registry/registry (1, the registry thread whose counter names the whale)

Outputs of this contract may go to:
- Any address (the recipient is checked by the registry and not here)

It is not allowed to mint several whales in a single transaction.
"""
from opshin.prelude import *

from whale_registry.onchain.util import *
from whale_registry.onchain.registry.registry import RegistryDatum


@dataclass
class WhaleRedeemer(PlutusData):
    """
    Redeemer for the whale NFT policy
    """

    CONSTR_ID = 0
    registry_input_index: int


def validator(
    registry_nft: Token, redeemer: WhaleRedeemer, context: ScriptContext
) -> None:
    """
    Whale NFT policy.
    Ensures that the registry thread is being spent and that exactly one whale
    named after its next_token_id is minted.
    The policy is parameterized by the registry NFT.
    """
    whale_policy_id = get_minting_purpose(context).policy_id
    tx_info = context.tx_info

    registry_input = tx_info.inputs[redeemer.registry_input_index].resolved
    assert token_present_in_output(
        registry_nft, registry_input
    ), "Registry NFT is not being spent"
    registry_state: RegistryDatum = resolve_datum_unsafe(registry_input, tx_info)
    assert (
        registry_state.params.whale_nft_policy == whale_policy_id
    ), "Registry does not mint this policy"

    check_mint_exactly_one_with_name(
        tx_info.mint, whale_policy_id, whale_token_name(registry_state.next_token_id)
    )
