"""
The registry NFT contract.
This contract creates a single one-shot NFT with a unique token name.
Its presence uniquely identifies a registry thread.

Outputs of this contract may go to:
- Any address (but the intended target is registry/registry (1 at most for the creation of a new registry))

It is not allowed to mint several registry NFTs in a single transaction.
"""
from opshin.prelude import *
from opshin.std.builtins import *

from whale_registry.onchain.util import *


def registry_nft_name(spent_utxo: TxOutRef) -> TokenName:
    return sha2_256(f"{spent_utxo.idx}".encode() + spent_utxo.id.tx_id)


def validator(
    unique_parameter: bytes, unique_utxo_index: int, context: ScriptContext
) -> None:
    """
    One-shot minting policy. Ensures that the name of the resulting NFT is unique,
    being the hash of a consumed UTxO.

    By parameterizing the policy with a unique value, we can ensure that the NFT
    policy id is unique for each instance of the policy.
    """
    policy_id = get_minting_purpose(context).policy_id

    spent_input = context.tx_info.inputs[unique_utxo_index].out_ref
    required_token_name = registry_nft_name(spent_input)

    check_mint_exactly_one_with_name(
        context.tx_info.mint, policy_id, required_token_name
    )
