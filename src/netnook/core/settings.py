"""Application settings and configuration.

This module defines all configuration options for the NetNook feed core.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from netnook.utils.hash import SUPPORTED_ALGORITHMS


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="NetNook", alias="NETNOOK_APP_NAME")
    app_version: str = Field(default="0.1.0", alias="NETNOOK_APP_VERSION")
    debug: bool = Field(default=False, alias="NETNOOK_DEBUG")
    log_level: str = Field(default="INFO", alias="NETNOOK_LOG_LEVEL")

    # Local cache database
    database_url: str = Field(default="sqlite:///./netnook.db", alias="NETNOOK_DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="NETNOOK_SQL_DEBUG")

    # Feed shape
    feed_window_size: int = Field(default=50, alias="NETNOOK_FEED_WINDOW_SIZE")
    # "$key" needs no index rule; "timestamp" needs ".indexOn" on the posts node
    feed_order_by: str = Field(default="$key", alias="NETNOOK_FEED_ORDER_BY")
    caption_max_length: int = Field(default=30, alias="NETNOOK_CAPTION_MAX_LENGTH")

    # Content identifiers
    cid_prefix: str = Field(default="Qm", alias="NETNOOK_CID_PREFIX")
    cid_hex_length: int = Field(default=44, alias="NETNOOK_CID_HEX_LENGTH")
    cid_algorithm: str = Field(default="sha256", alias="NETNOOK_CID_ALGORITHM")

    # Default public remote
    remote_enabled: bool = Field(default=True, alias="NETNOOK_REMOTE_ENABLED")
    remote_api_key: str | None = Field(default=None, alias="NETNOOK_REMOTE_API_KEY")
    remote_auth_domain: str = Field(
        default="global-cache-network.firebaseapp.com",
        alias="NETNOOK_REMOTE_AUTH_DOMAIN",
    )
    remote_database_url: str | None = Field(
        default="https://global-cache-network-default-rtdb.firebaseio.com",
        alias="NETNOOK_REMOTE_DATABASE_URL",
    )
    remote_project_id: str = Field(
        default="global-cache-network",
        alias="NETNOOK_REMOTE_PROJECT_ID",
    )
    remote_auth_token: str | None = Field(default=None, alias="NETNOOK_REMOTE_AUTH_TOKEN")

    # Remote transport behaviour
    remote_http_timeout_seconds: float = Field(
        default=10.0,
        alias="NETNOOK_REMOTE_HTTP_TIMEOUT_SECONDS",
    )
    remote_stream_retry_seconds: float = Field(
        default=2.0,
        alias="NETNOOK_REMOTE_STREAM_RETRY_SECONDS",
    )
    remote_probe_on_connect: bool = Field(
        default=False,
        alias="NETNOOK_REMOTE_PROBE_ON_CONNECT",
    )

    # CORS configuration for the local front-end
    cors_origins: list[str] = Field(
        default=["*"],
        alias="NETNOOK_CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="NETNOOK_CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        alias="NETNOOK_CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="NETNOOK_CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @field_validator("cid_algorithm")
    @classmethod
    def _known_cid_algorithm(cls, value: str) -> str:
        if value not in SUPPORTED_ALGORITHMS:
            raise ValueError(f"cid_algorithm must be one of {', '.join(SUPPORTED_ALGORITHMS)}")
        return value

    @property
    def cid_length(self) -> int:
        """Return the full length of a rendered content identifier."""
        return len(self.cid_prefix) + self.cid_hex_length


settings = Settings()
