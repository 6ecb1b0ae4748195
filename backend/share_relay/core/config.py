from functools import lru_cache
from typing import Literal

from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

from share_relay.models import ShareRecord


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        protected_namespaces=(),
        extra="ignore",
    )

    env: Literal["local", "prod", "test"] = Field(default="local", alias="ENV")
    debug: bool = Field(default=False, alias="DEBUG")
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3000, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    storage_backend: Literal["cloudinary", "s3", "local"] = Field(
        default="cloudinary", alias="STORAGE_BACKEND"
    )
    storage_folder: str = Field(default="famy_share_uploads", alias="STORAGE_FOLDER")

    cloudinary_cloud_name: str = Field(default="", alias="CLOUD_NAME")
    cloudinary_api_key: str = Field(default="", alias="API_KEY")
    cloudinary_api_secret: str = Field(default="", alias="API_SECRET")

    s3_endpoint: HttpUrl | None = Field(default=None, alias="S3_ENDPOINT_URL")
    s3_access_key: str = Field(default="change-me", alias="S3_ACCESS_KEY")
    s3_secret_key: str = Field(default="change-me", alias="S3_SECRET_KEY")
    s3_region: str | None = Field(default=None, alias="S3_REGION")
    s3_bucket_uploads: str = Field(default="share-uploads", alias="S3_BUCKET_UPLOADS")
    s3_public_base_url: str | None = Field(default=None, alias="S3_PUBLIC_BASE_URL")
    s3_presigned_ttl: int = Field(default=604800, alias="S3_PRESIGNED_TTL")

    local_storage_dir: str = Field(default="./storage", alias="LOCAL_STORAGE_DIR")
    public_base_url: str = Field(default="http://localhost:3000", alias="PUBLIC_BASE_URL")

    # None keeps the relay unbounded, like the upstream provider calls themselves.
    upstream_timeout: float | None = Field(default=None, alias="UPSTREAM_TIMEOUT")
    max_upload_bytes: int | None = Field(default=None, alias="MAX_UPLOAD_BYTES")
    id_collision_attempts: int = Field(default=1, ge=1, alias="ID_COLLISION_ATTEMPTS")

    seed_records: dict[str, ShareRecord] = Field(default_factory=dict, alias="SEED_RECORDS")


@lru_cache
def get_settings() -> Settings:
    return Settings()
