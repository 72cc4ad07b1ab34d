"""Network settings endpoints: public network versus a private node."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from netnook.api.v1.dependencies import RuntimeDep
from netnook.schemas.api import NetworkConnectRequest, NetworkStatus
from netnook.services.connection import parse_config_text
from netnook.services.runtime import FeedRuntime

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/network", tags=["network"])


def _status(runtime: FeedRuntime) -> NetworkStatus:
    config = runtime.connection.config
    return NetworkStatus(
        online=runtime.is_online,
        using_custom_config=runtime.using_custom_config,
        state=runtime.connection.state.value,
        database_url=config.database_url if config else None,
    )


@router.get("", response_model=NetworkStatus)
async def get_network(runtime: RuntimeDep) -> NetworkStatus:
    return _status(runtime)


@router.post("/custom", response_model=NetworkStatus)
async def connect_custom(payload: NetworkConnectRequest, runtime: RuntimeDep) -> NetworkStatus:
    """Connect to a private node and remember it.

    The previous connection is restored when the node is unreachable.
    """
    config = payload.config
    if config is None:
        try:
            config = parse_config_text(payload.config_text or "")
        except ValueError as err:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
    if not config.database_url:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Configuration is missing databaseURL",
        )

    if not await runtime.connect_custom(config):
        logger.warning("Private node %s rejected the connection", config.database_url)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Connection failed. Check your config.",
        )
    return _status(runtime)


@router.delete("/custom", response_model=NetworkStatus)
async def reset_network(runtime: RuntimeDep) -> NetworkStatus:
    """Forget the private node and return to the public network."""
    await runtime.reset_to_default()
    return _status(runtime)
