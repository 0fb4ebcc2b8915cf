import os

from ..registry.registry import allow_list, open_minting
from ..watcher.watcher import POLL_INTERVAL, POLL_LIMIT, WHALE_THRESHOLD

db_path = os.environ.get("WHALE_REGISTRY_DB", "whale_registry.db")
registry_name = os.environ.get("WHALE_REGISTRY_NAME", "whales")

# comma separated, empty means anyone may mint
minters = [
    m.strip()
    for m in os.environ.get("WHALE_REGISTRY_MINTERS", "").split(",")
    if m.strip()
]

poll_limit = int(os.environ.get("WHALE_WATCHER_POLL_LIMIT", POLL_LIMIT))
poll_interval = float(os.environ.get("WHALE_WATCHER_POLL_INTERVAL", POLL_INTERVAL))
value_threshold = int(os.environ.get("WHALE_WATCHER_THRESHOLD", WHALE_THRESHOLD))
watcher_minter = os.environ.get("WHALE_WATCHER_MINTER") or (
    minters[0] if minters else None
)


def minter_policy(minters=minters):
    if minters:
        return allow_list(minters)
    return open_minting()
