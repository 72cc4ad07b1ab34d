"""Remote connection configuration schema."""

from __future__ import annotations

from pydantic import Field

from netnook.schemas.content import WireModel


class RemoteConfig(WireModel):
    """Client configuration for a remote store.

    Mirrors the Firebase web configuration object so a pasted config can be
    validated directly. Two equal configs address the same connection.
    """

    api_key: str | None = None
    auth_domain: str | None = None
    database_url: str | None = Field(default=None, alias="databaseURL")
    project_id: str | None = None
    storage_bucket: str | None = None
    messaging_sender_id: str | None = None
    app_id: str | None = None
    auth_token: str | None = None
