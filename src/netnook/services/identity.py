"""Identity boundary and the profile join.

The identity provider knows uid, display name, photo and email. Profession
is stored locally per uid and joined onto the provider identity every time
the identity changes.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

from netnook.repositories.local_store import LocalCacheStore
from netnook.schemas.content import ContentItem
from netnook.schemas.profile import ProfileExtension, ProviderIdentity, UserProfile
from netnook.services.subscription import Subscription

logger = logging.getLogger(__name__)

ANONYMOUS_AUTHOR = "Anonymous"
ANONYMOUS_COMMENTER = "NetNooker"

IdentityCallback = Callable[[ProviderIdentity | None], None]


def join_profile(identity: ProviderIdentity, extension: ProfileExtension | None) -> UserProfile:
    """Combine a provider identity with its locally stored extension."""
    return UserProfile(
        uid=identity.uid,
        display_name=identity.display_name,
        photo_url=identity.photo_url,
        email=identity.email,
        profession=extension.profession if extension else "",
    )


class IdentityProvider(ABC):
    """Source of the signed-in identity."""

    @abstractmethod
    def subscribe(self, callback: IdentityCallback) -> Subscription:
        """Report the current identity now and on every change."""

    @abstractmethod
    async def sign_in(self, identity: ProviderIdentity) -> ProviderIdentity | None:
        """Sign in and return the provider's view of the identity."""

    @abstractmethod
    async def sign_out(self) -> None:
        """Sign the current identity out."""

    @abstractmethod
    async def update_profile(self, display_name: str, photo_url: str | None = None) -> bool:
        """Update the provider-held profile fields of the current identity."""


class LocalIdentityProvider(IdentityProvider):
    """In-process identity provider.

    A front-end that completed its own sign-in flow hands the resulting
    identity to ``sign_in``; listeners are notified synchronously.
    """

    def __init__(self) -> None:
        self.current: ProviderIdentity | None = None
        self._listeners: list[IdentityCallback] = []

    def subscribe(self, callback: IdentityCallback) -> Subscription:
        self._listeners.append(callback)

        def _release() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        callback(self.current)
        return Subscription(_release, name="identity")

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self.current)

    async def sign_in(self, identity: ProviderIdentity) -> ProviderIdentity | None:
        self.current = identity
        self._notify()
        return identity

    async def sign_out(self) -> None:
        self.current = None
        self._notify()

    async def update_profile(self, display_name: str, photo_url: str | None = None) -> bool:
        if self.current is None:
            return False
        self.current = self.current.model_copy(
            update={"display_name": display_name, "photo_url": photo_url}
        )
        self._notify()
        return True


class IdentitySession:
    """Tracks who is acting: the joined signed-in profile or the device identity."""

    def __init__(self, store: LocalCacheStore, provider: IdentityProvider | None = None) -> None:
        self.store = store
        self.provider = provider or LocalIdentityProvider()
        self.current: UserProfile | None = None
        self.needs_profile_setup = False

    @property
    def device_id(self) -> str:
        return self.store.device_id()

    @property
    def actor_id(self) -> str:
        """Id used for authorship, likes and comments."""
        return self.current.uid if self.current else self.device_id

    @property
    def author_name(self) -> str:
        if self.current and self.current.display_name:
            return self.current.display_name
        return ANONYMOUS_AUTHOR

    @property
    def commenter_name(self) -> str:
        if self.current and self.current.display_name:
            return self.current.display_name
        return ANONYMOUS_COMMENTER

    def is_author(self, item: ContentItem) -> bool:
        """Return True when the acting identity (or this device) wrote ``item``."""
        if self.current is not None and item.author_id == self.current.uid:
            return True
        return item.author_id == self.device_id

    def watch(self) -> Subscription:
        """Follow the provider's identity changes."""
        return self.provider.subscribe(self.on_identity_change)

    def on_identity_change(self, identity: ProviderIdentity | None) -> None:
        """Join the provider identity with its stored extension."""
        if identity is None:
            self.current = None
            self.needs_profile_setup = False
            return
        extension = self.store.load_profile_extension(identity.uid)
        self.current = join_profile(identity, extension)
        self.needs_profile_setup = not self.current.profession
        logger.info("Identity changed to %s", identity.uid)

    async def sign_in(self, identity: ProviderIdentity) -> UserProfile | None:
        signed_in = await self.provider.sign_in(identity)
        if signed_in is None:
            return None
        # Providers that do not notify listeners still get their identity joined.
        if self.current is None or self.current.uid != signed_in.uid:
            self.on_identity_change(signed_in)
        return self.current

    async def sign_out(self) -> None:
        await self.provider.sign_out()
        self.on_identity_change(None)

    async def save_profile(
        self,
        display_name: str,
        profession: str,
        photo_url: str | None = None,
    ) -> UserProfile | None:
        """Update the provider profile and store the profession locally."""
        if self.current is None:
            return None
        uid = self.current.uid
        # Stored first so the provider notification joins the new profession.
        self.store.save_profile_extension(uid, ProfileExtension(profession=profession))
        if not await self.provider.update_profile(display_name, photo_url):
            logger.warning("Identity provider rejected profile update for %s", uid)
        self.current = UserProfile(
            uid=uid,
            display_name=display_name,
            photo_url=photo_url,
            email=self.current.email,
            profession=profession,
        )
        self.needs_profile_setup = False
        return self.current
