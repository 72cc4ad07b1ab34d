"""Identity and profile schemas."""

from __future__ import annotations

from pydantic import Field

from netnook.schemas.content import WireModel


class ProviderIdentity(WireModel):
    """Identity as reported by the identity provider."""

    uid: str
    display_name: str | None = None
    photo_url: str | None = Field(default=None, alias="photoURL")
    email: str | None = None


class ProfileExtension(WireModel):
    """Profile fields the identity provider does not model, stored locally."""

    profession: str = ""


class UserProfile(WireModel):
    """Provider identity joined with its local extension."""

    uid: str
    display_name: str | None = None
    photo_url: str | None = Field(default=None, alias="photoURL")
    email: str | None = None
    profession: str = ""
