"""Post lifecycle and interaction endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from netnook.api.v1.dependencies import RuntimeDep, raise_for_result
from netnook.schemas.api import (
    ActionResponse,
    CommentCreateRequest,
    PostCreateRequest,
    PostEditRequest,
    SaveRequest,
)
from netnook.services.post_service import Attachment
from netnook.services.results import ActionResult

router = APIRouter(prefix="/posts", tags=["posts"])


def _respond(result: ActionResult) -> ActionResponse:
    raise_for_result(result)
    return ActionResponse(item=result.item, message=result.message, ref=result.ref)


@router.post("", response_model=ActionResponse, status_code=status.HTTP_201_CREATED)
async def create_post(payload: PostCreateRequest, runtime: RuntimeDep) -> ActionResponse:
    """Create a post locally and try to publish it.

    Returns 201 even when the upload failed; the post is then Pending and the
    response carries the upload error as ``message``.
    """
    attachment = None
    if payload.attachment:
        if not payload.attachment.startswith("data:"):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Attachment must be a data URL",
            )
        attachment = Attachment.from_data_url(payload.attachment)

    result = await runtime.posts.create(payload.text, attachment, payload.category)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A post needs text or an attachment",
        )
    return _respond(result)


@router.post("/{cid}/retry", response_model=ActionResponse)
async def retry_post(cid: str, runtime: RuntimeDep) -> ActionResponse:
    """Upload a Pending post again."""
    return _respond(await runtime.posts.retry(cid))


@router.patch("/{cid}", response_model=ActionResponse)
async def edit_post(cid: str, payload: PostEditRequest, runtime: RuntimeDep) -> ActionResponse:
    return _respond(await runtime.posts.edit(cid, payload.text))


@router.delete("/{cid}", response_model=ActionResponse)
async def delete_post(cid: str, runtime: RuntimeDep) -> ActionResponse:
    return _respond(await runtime.posts.delete(cid))


@router.post("/{cid}/save", response_model=ActionResponse)
async def save_post(
    cid: str,
    runtime: RuntimeDep,
    payload: SaveRequest | None = None,
) -> ActionResponse:
    """Copy a visible post into the private cache."""
    category = payload.category if payload else None
    return _respond(runtime.posts.save_to_private(cid, category))


@router.post("/{cid}/like", response_model=ActionResponse)
async def toggle_like(cid: str, runtime: RuntimeDep) -> ActionResponse:
    return _respond(await runtime.interactions.toggle_like(cid))


@router.post("/{cid}/comments", response_model=ActionResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(cid: str, payload: CommentCreateRequest, runtime: RuntimeDep) -> ActionResponse:
    """Add a comment; ``ref`` is the key the remote store assigned."""
    return _respond(await runtime.interactions.add_comment(cid, payload.text))
