"""
Bootstrap a whale registry: build the contracts, create the registry and serve the api.
"""
import logging
import subprocess
import sys
from pathlib import Path

import fire
import uvicorn
from uplc.ast import PlutusByteString, plutus_cbor_dumps
from opshin.prelude import Token

from .api import config
from .onchain.registry import registry, registry_nft, whale_nft
from .registry.db import DbTokenRegistry, init_db

_LOGGER = logging.getLogger(__name__)
_LOGGER.setLevel(logging.INFO)


def _open_registry(db: str, name: str, debug_sql: bool = False) -> DbTokenRegistry:
    if debug_sql:
        logger = logging.getLogger("peewee")
        logger.addHandler(logging.StreamHandler())
        logger.setLevel(logging.DEBUG)
    init_db(db)
    return DbTokenRegistry(name, config.minter_policy())


def init(db: str = config.db_path, name: str = config.registry_name, debug_sql: bool = False):
    """
    Create the database and the registry, if they do not exist yet.
    """
    whale_registry = _open_registry(db, name, debug_sql)
    _LOGGER.info(f"Registry {name} at {db}, next token id {whale_registry.next_token_id}")
    return whale_registry.next_token_id


def mint(
    owner: str,
    minter: str = None,
    db: str = config.db_path,
    name: str = config.registry_name,
    debug_sql: bool = False,
):
    """
    Mint a whale to owner and print its id.
    """
    whale_registry = _open_registry(db, name, debug_sql)
    return whale_registry.mint(owner, minter)


def owner(
    token_id: int,
    db: str = config.db_path,
    name: str = config.registry_name,
):
    """
    Print the owner of a whale.
    """
    return _open_registry(db, name).owner_of(token_id)


def serve(host: str = "127.0.0.1", port: int = 8000):
    """
    Serve the api. The database is taken from the environment, see api/config.py
    """
    uvicorn.run("whale_registry.api.server:app", host=host, port=port)


def build_contract(type: str, script, args=()):
    script = Path(script)
    command = [
        sys.executable,
        "-m",
        "opshin",
        "build",
        type,
        script,
        *args,
        "--recursion-limit",
        "2000",
        "-O2",
    ]
    subprocess.run(command, check=True)


def build(unique_id: str = "whales", registry_nft_policy: str = None, registry_nft_name: str = None):
    """
    Compile the on-chain contracts with opshin.
    The whale policy can only be built once the registry NFT is known.
    """
    build_contract("spending", registry.__file__)
    build_contract(
        "minting",
        registry_nft.__file__,
        args=[plutus_cbor_dumps(PlutusByteString(unique_id.encode())).hex()],
    )
    if registry_nft_policy is None or registry_nft_name is None:
        _LOGGER.info("Registry NFT not given, skipping the whale policy")
        return
    build_contract(
        "minting",
        whale_nft.__file__,
        args=[
            Token(
                bytes.fromhex(registry_nft_policy), bytes.fromhex(registry_nft_name)
            )
            .to_cbor()
            .hex()
        ],
    )


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    fire.Fire(
        {
            "init": init,
            "mint": mint,
            "owner": owner,
            "serve": serve,
            "build": build,
        }
    )
