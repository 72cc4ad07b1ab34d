"""Session endpoints: sign-in handover, sign-out and profile setup."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from netnook.api.v1.dependencies import RuntimeDep
from netnook.schemas.api import ProfileUpdateRequest, SessionResponse, SignInRequest
from netnook.schemas.profile import ProviderIdentity
from netnook.services.runtime import FeedRuntime

router = APIRouter(prefix="/session", tags=["session"])


def _session(runtime: FeedRuntime) -> SessionResponse:
    identity = runtime.identity
    return SessionResponse(
        signed_in=identity.current is not None,
        device_id=identity.device_id,
        actor_id=identity.actor_id,
        needs_profile_setup=identity.needs_profile_setup,
        profile=identity.current,
    )


@router.get("", response_model=SessionResponse)
async def get_session(runtime: RuntimeDep) -> SessionResponse:
    return _session(runtime)


@router.post("", response_model=SessionResponse)
async def sign_in(payload: SignInRequest, runtime: RuntimeDep) -> SessionResponse:
    """Accept an identity from a completed front-end sign-in flow."""
    identity = ProviderIdentity(
        uid=payload.uid,
        display_name=payload.display_name,
        photo_url=payload.photo_url,
        email=payload.email,
    )
    if await runtime.identity.sign_in(identity) is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Sign in failed")
    return _session(runtime)


@router.delete("", response_model=SessionResponse)
async def sign_out(runtime: RuntimeDep) -> SessionResponse:
    await runtime.identity.sign_out()
    return _session(runtime)


@router.put("/profile", response_model=SessionResponse)
async def update_profile(payload: ProfileUpdateRequest, runtime: RuntimeDep) -> SessionResponse:
    """Complete or edit the signed-in profile."""
    if runtime.identity.current is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Sign in first")
    await runtime.identity.save_profile(payload.display_name, payload.profession, payload.photo_url)
    return _session(runtime)
