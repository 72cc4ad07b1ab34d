"""Feed endpoints: the merged view of the remote snapshot and local cache."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status

from netnook.api.v1.dependencies import RuntimeDep
from netnook.schemas.api import FeedResponse
from netnook.schemas.content import ContentItem
from netnook.services.merge import GLOBAL_TAB, filter_feed

router = APIRouter(prefix="/feed", tags=["feed"])


@router.get("", response_model=FeedResponse)
async def list_feed(
    runtime: RuntimeDep,
    tab: Annotated[str, Query(description="global, education, news or entertainment")] = GLOBAL_TAB,
    q: Annotated[str | None, Query(max_length=200, description="Search term")] = None,
) -> FeedResponse:
    """Return the merged feed filtered by tab and search term."""
    try:
        items = filter_feed(runtime.feed(), tab, q)
    except ValueError as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown tab: {tab}",
        ) from err
    return FeedResponse(items=items, online=runtime.is_online, tab=tab, query=q)


@router.get("/{cid}", response_model=ContentItem)
async def get_item(cid: str, runtime: RuntimeDep) -> ContentItem:
    """Return one item, asking the remote store when it is outside the window."""
    item = runtime.state.find(cid)
    if item is None:
        channel = runtime.connection.active_channel()
        if channel is not None:
            item = await channel.fetch(cid)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return item
