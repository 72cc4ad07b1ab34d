"""Durable local cache backed by the ``local_record`` table."""
from __future__ import annotations

import json
import logging
import secrets
import string

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from netnook.db.session import SessionLocal
from netnook.models.local_record import LocalRecord
from netnook.schemas.connection import RemoteConfig
from netnook.schemas.content import AppState
from netnook.schemas.profile import ProfileExtension

__all__ = ["LocalCacheStore"]

logger = logging.getLogger(__name__)

DATA_KEY = "netnook_data_v1"
CONFIG_KEY = "netnook_wifi_config_v1"
DEVICE_KEY = "netnook_local_user_id"
PROFILE_KEY_PREFIX = "netnook_profile_"

_DEVICE_ALPHABET = string.ascii_lowercase + string.digits
DEVICE_ID_LENGTH = 9


class LocalCacheStore:
    """Wholesale-replace storage for the feed cache and device-local settings.

    Every ``save`` commits before returning, so the next ``load`` in the
    same process observes it. Malformed stored documents never raise; they
    load as the empty default.
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self._session_factory = session_factory or SessionLocal
        self._device_id: str | None = None

    def _get(self, key: str) -> str | None:
        with self._session_factory() as db:
            return db.execute(
                select(LocalRecord.value).where(LocalRecord.key == key)
            ).scalar_one_or_none()

    def _put(self, key: str, value: str) -> None:
        with self._session_factory() as db:
            db.merge(LocalRecord(key=key, value=value))
            db.commit()

    def _delete(self, key: str) -> None:
        with self._session_factory() as db:
            record = db.get(LocalRecord, key)
            if record is not None:
                db.delete(record)
                db.commit()

    def load(self) -> AppState:
        """Return the cached feed state, or an empty one."""
        stored = self._get(DATA_KEY)
        if not stored:
            return AppState()
        try:
            return AppState.model_validate_json(stored)
        except ValidationError as exc:
            logger.warning("Discarding malformed local feed state: %s", exc.error_count())
            return AppState()

    def save(self, state: AppState) -> None:
        """Replace the cached feed state."""
        self._put(DATA_KEY, state.model_dump_json(by_alias=True, exclude_none=True))

    def device_id(self) -> str:
        """Return this device's anonymous identity, minting it on first use."""
        if self._device_id is None:
            stored = self._get(DEVICE_KEY)
            if not stored:
                suffix = "".join(secrets.choice(_DEVICE_ALPHABET) for _ in range(DEVICE_ID_LENGTH))
                stored = f"user_{suffix}"
                self._put(DEVICE_KEY, stored)
                logger.info("Minted local device identity %s", stored)
            self._device_id = stored
        return self._device_id

    def load_connection_config(self) -> RemoteConfig | None:
        """Return the saved custom remote configuration, if any."""
        stored = self._get(CONFIG_KEY)
        if not stored:
            return None
        try:
            return RemoteConfig.model_validate_json(stored)
        except ValidationError:
            logger.warning("Ignoring malformed saved connection config")
            return None

    def save_connection_config(self, config: RemoteConfig) -> None:
        self._put(CONFIG_KEY, config.model_dump_json(by_alias=True, exclude_none=True))

    def clear_connection_config(self) -> None:
        self._delete(CONFIG_KEY)

    def load_profile_extension(self, uid: str) -> ProfileExtension | None:
        """Return the locally stored profile extension for ``uid``."""
        stored = self._get(PROFILE_KEY_PREFIX + uid)
        if not stored:
            return None
        try:
            return ProfileExtension.model_validate(json.loads(stored))
        except (ValueError, ValidationError):
            logger.warning("Ignoring malformed profile extension for %s", uid)
            return None

    def save_profile_extension(self, uid: str, extension: ProfileExtension) -> None:
        self._put(PROFILE_KEY_PREFIX + uid, extension.model_dump_json(by_alias=True))
