import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Path
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel
from starlette.responses import Response

from . import config
from ..onchain.util import whale_token_name
from ..registry.db import DbTokenRegistry, init_db
from ..registry.errors import (
    InvalidRecipient,
    Unauthorized,
    UnknownToken,
    WatcherError,
)
from ..registry.registry import TokenRegistry
from ..watcher.transfers import QueueTransferSource, Transfer
from ..watcher.watcher import TransferWatcher

# logger setup
_LOGGER = logging.getLogger(__name__)


app = FastAPI(
    default_response_class=ORJSONResponse,
    title="Whale Registry API.",
    description="The Whale Registry API mints whale NFTs and answers who owns them.",
    version="0.0.1",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_registry: Optional[TokenRegistry] = None
_watcher: Optional[TransferWatcher] = None
_transfer_source = QueueTransferSource()


def get_registry() -> TokenRegistry:
    global _registry
    if _registry is None:
        init_db(config.db_path)
        _registry = DbTokenRegistry(config.registry_name, config.minter_policy())
    return _registry


def get_transfer_source() -> QueueTransferSource:
    return _transfer_source


def get_watcher() -> TransferWatcher:
    global _watcher
    if _watcher is None:
        _watcher = TransferWatcher(
            get_registry(),
            get_transfer_source(),
            poll_limit=config.poll_limit,
            poll_interval=config.poll_interval,
            value_threshold=config.value_threshold,
            minter=config.watcher_minter,
        )
    return _watcher


def add_cachecontrol(response: Response, max_age: int, directive: str = "public"):
    # see https://developer.mozilla.org/en-US/docs/Web/HTTP/Headers/Cache-Control
    response.headers["Cache-Control"] = f"{directive}, max-age={max_age}"


class MintRequest(BaseModel):
    owner: str
    minter: Optional[str] = None


class TransferReport(BaseModel):
    from_address: str
    to_address: str
    value: int


def whale_json(token_id: int, owner: str) -> dict:
    return {
        "token_id": token_id,
        "owner": owner,
        "asset_name": whale_token_name(token_id).hex(),
    }


#################################################################################################
#                                            Endpoints                                          #
#################################################################################################

TokenIdPath = Path(description="Id of a whale", examples=[0, 1, 2], ge=0)


@app.get("/api/v1/health")
def health(registry: TokenRegistry = Depends(get_registry)):
    return ORJSONResponse(
        {
            "status": "ok",
            "next_token_id": registry.next_token_id,
        }
    )


@app.post("/api/v1/whales", status_code=201)
def mint_whale(request: MintRequest, registry: TokenRegistry = Depends(get_registry)):
    """
    Mint a new whale to the given owner.
    """
    try:
        token_id = registry.mint(request.owner, request.minter)
    except InvalidRecipient as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Unauthorized as e:
        raise HTTPException(status_code=403, detail=str(e))
    return ORJSONResponse(
        whale_json(token_id, registry.owner_of(token_id)), status_code=201
    )


@app.get("/api/v1/whales/stats")
def whale_stats(registry: TokenRegistry = Depends(get_registry)):
    """
    Number of whales minted so far.
    """
    return ORJSONResponse(
        {
            "total_minted": registry.total_minted(),
            "next_token_id": registry.next_token_id,
        }
    )


@app.get("/api/v1/whales/{token_id}")
def whale_detail(
    token_id: int = TokenIdPath,
    registry: TokenRegistry = Depends(get_registry),
):
    """
    Get the owner of a whale.
    """
    try:
        owner = registry.owner_of(token_id)
    except UnknownToken as e:
        raise HTTPException(status_code=404, detail=str(e))
    result = ORJSONResponse(whale_json(token_id, owner))
    # whales are never transferred by this registry
    add_cachecontrol(result, max_age=3600)
    return result


@app.get("/api/v1/watcher")
def watcher_status(watcher: TransferWatcher = Depends(get_watcher)):
    """
    Whether the watcher is polling, how often it polled and what it saw.
    """
    return ORJSONResponse(
        {
            "is_polling": watcher.is_polling,
            "poll_count": watcher.poll_count,
            "logs": watcher.logs,
        }
    )


@app.post("/api/v1/watcher/start")
def watcher_start(watcher: TransferWatcher = Depends(get_watcher)):
    try:
        return ORJSONResponse({"message": watcher.start()})
    except WatcherError as e:
        raise HTTPException(status_code=409, detail=str(e))


@app.post("/api/v1/watcher/stop")
def watcher_stop(watcher: TransferWatcher = Depends(get_watcher)):
    try:
        return ORJSONResponse({"message": watcher.stop()})
    except WatcherError as e:
        raise HTTPException(status_code=409, detail=str(e))


@app.post("/api/v1/watcher/transfers", status_code=202)
def watcher_transfers(
    transfers: List[TransferReport],
    source: QueueTransferSource = Depends(get_transfer_source),
):
    """
    Report transfers observed on the watched token, processed on the next poll.
    """
    source.push(
        *(Transfer(t.from_address, t.to_address, t.value) for t in transfers)
    )
    return ORJSONResponse({"queued": len(transfers)}, status_code=202)
