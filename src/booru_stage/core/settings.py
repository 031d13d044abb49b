"""Application settings and configuration.

Values come from environment variables (or a ``.env`` file) under the alias
shown on each field. Upload limits and remote-content options live here too so
a deployment can tune them without code changes.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the API and the post services.

    Services take an explicit instance, defaulting to the module-level
    ``settings``, so tests can inject tighter limits with ``model_copy``.
    """

    app_name: str = Field(default="Booru Stage", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")

    # Bearer tokens identifying uploaders
    secret_key: str = Field(alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 30,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Storage
    database_url: str = Field(default="sqlite:///./booru.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Upload limits (bytes)
    max_post_size: int = Field(default=10 * 1024 * 1024, alias="MAX_POST_SIZE", gt=0)
    max_custom_thumbnail_size: int = Field(
        default=1024 * 1024,
        alias="MAX_CUSTOM_THUMBNAIL_SIZE",
        gt=0,
    )
    post_name_max_attempts: int = Field(default=100, alias="POST_NAME_MAX_ATTEMPTS", ge=1)

    # Remote content
    fetch_timeout_seconds: float = Field(default=15.0, alias="FETCH_TIMEOUT_SECONDS", gt=0)
    youtube_thumbnail_url: str = Field(
        default="https://img.youtube.com/vi/{video_id}/mqdefault.jpg",
        alias="YOUTUBE_THUMBNAIL_URL",
    )

    # Tag list read by the frontend's autocomplete
    tags_export_path: str = Field(default="./data/tags.json", alias="TAGS_EXPORT_PATH")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    logs_path: str | None = Field(default=None, alias="LOGS_PATH")
    log_buffer_capacity: int = Field(default=100, alias="LOG_BUFFER_CAPACITY", ge=1)

    # CORS for browser clients
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("youtube_thumbnail_url")
    @classmethod
    def _needs_video_id(cls, value: str) -> str:
        if "{video_id}" not in value:
            raise ValueError("YOUTUBE_THUMBNAIL_URL must contain a {video_id} placeholder")
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


settings = Settings()  # type: ignore[call-arg]
