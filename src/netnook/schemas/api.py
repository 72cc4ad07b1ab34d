"""Request and response schemas for the local HTTP API."""

from __future__ import annotations

from pydantic import Field, model_validator

from netnook.schemas.connection import RemoteConfig
from netnook.schemas.content import Category, ContentItem, WireModel
from netnook.schemas.profile import UserProfile


class PostCreateRequest(WireModel):
    """Schema for creating a new post."""

    text: str = Field("", max_length=20000, description="Post body, or the caption of an attachment")
    category: Category | None = Field(None, description="Local category; defaults to education")
    attachment: str | None = Field(None, description="Attachment encoded as a data URL")


class PostEditRequest(WireModel):
    """Schema for editing a post's body or caption."""

    text: str = Field(..., max_length=20000)


class CommentCreateRequest(WireModel):
    """Schema for adding a comment."""

    text: str = Field(..., max_length=5000)


class SaveRequest(WireModel):
    """Schema for saving a post to the private cache."""

    category: Category | None = None


class ActionResponse(WireModel):
    """Outcome of a successful feed action."""

    item: ContentItem | None = None
    message: str | None = None
    ref: str | None = None


class FeedResponse(WireModel):
    """The merged feed as currently visible."""

    items: list[ContentItem]
    online: bool
    tab: str
    query: str | None = None


class NetworkConnectRequest(WireModel):
    """A private node configuration, either as an object or pasted text."""

    config: RemoteConfig | None = None
    config_text: str | None = None

    @model_validator(mode="after")
    def check_one_source(self) -> NetworkConnectRequest:
        if self.config is None and not (self.config_text or "").strip():
            raise ValueError("Provide either config or configText")
        return self


class NetworkStatus(WireModel):
    """Current remote connection as seen by the client."""

    online: bool
    using_custom_config: bool
    state: str
    database_url: str | None = Field(default=None, alias="databaseURL")


class SignInRequest(WireModel):
    """Identity handed over by a front-end that completed sign-in."""

    uid: str = Field(..., min_length=1)
    display_name: str | None = None
    photo_url: str | None = Field(default=None, alias="photoURL")
    email: str | None = None


class ProfileUpdateRequest(WireModel):
    """Schema for completing or editing the signed-in profile."""

    display_name: str = Field(..., min_length=1, max_length=100)
    profession: str = Field(..., min_length=1, max_length=100)
    photo_url: str | None = Field(default=None, alias="photoURL")


class SessionResponse(WireModel):
    """Who is acting right now."""

    signed_in: bool
    device_id: str
    actor_id: str
    needs_profile_setup: bool
    profile: UserProfile | None = None
