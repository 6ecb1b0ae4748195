import asyncio
import base64
import logging
import re
from pathlib import Path
from typing import Final
from urllib.parse import quote
from uuid import uuid4

import boto3
import cloudinary.uploader
from botocore.client import Config

from share_relay.core.config import get_settings

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE: Final[str] = "application/octet-stream"


def _sanitize_filename(filename: str) -> str:
    name = Path(filename).name
    name = re.sub(r"[^A-Za-z0-9._-]+", "_", name)
    return name or "file"


class BaseStorageService:
    """Blob store that keeps uploads under the configured folder."""

    scheme: str = ""

    def __init__(self) -> None:
        self.settings = get_settings()

    def generate_upload_key(self, filename: str) -> str:
        safe_name = _sanitize_filename(filename)
        return f"{self.settings.storage_folder}/{uuid4()}_{safe_name}"

    async def store(self, data: bytes, filename: str, content_type: str | None) -> str:
        """Upload ``data`` and return a URL the relay can fetch it back from."""
        raise NotImplementedError


class StorageService(BaseStorageService):
    """S3-compatible blob store."""

    scheme: Final[str] = "s3"

    def __init__(self) -> None:
        super().__init__()
        session = boto3.session.Session()
        self.client = session.client(
            "s3",
            endpoint_url=str(self.settings.s3_endpoint) if self.settings.s3_endpoint else None,
            aws_access_key_id=self.settings.s3_access_key,
            aws_secret_access_key=self.settings.s3_secret_key,
            region_name=self.settings.s3_region,
            config=Config(signature_version="s3v4"),
        )
        self.bucket = self.settings.s3_bucket_uploads

    def create_presigned_get(self, key: str, expires_in: int = 900) -> str:
        return self.client.generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket, "Key": key},
            ExpiresIn=expires_in,
        )

    def public_url(self, key: str) -> str:
        base_url = self.settings.s3_public_base_url
        if base_url:
            return f"{base_url.rstrip('/')}/{quote(key)}"
        return self.create_presigned_get(key, expires_in=self.settings.s3_presigned_ttl)

    async def store(self, data: bytes, filename: str, content_type: str | None) -> str:
        key = self.generate_upload_key(filename)

        def _upload() -> None:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type or DEFAULT_CONTENT_TYPE,
            )

        await asyncio.to_thread(_upload)
        return self.public_url(key)


class CloudinaryStorageService(BaseStorageService):
    """Cloudinary media store; uploads go through a base64 data URI."""

    scheme: Final[str] = "cloudinary"

    def __init__(self) -> None:
        super().__init__()
        self.credentials = {
            "cloud_name": self.settings.cloudinary_cloud_name,
            "api_key": self.settings.cloudinary_api_key,
            "api_secret": self.settings.cloudinary_api_secret,
        }

    @staticmethod
    def to_data_uri(data: bytes, content_type: str | None) -> str:
        encoded = base64.b64encode(data).decode("ascii")
        return f"data:{content_type or DEFAULT_CONTENT_TYPE};base64,{encoded}"

    async def store(self, data: bytes, filename: str, content_type: str | None) -> str:
        data_uri = self.to_data_uri(data, content_type)

        def _upload() -> dict:
            return cloudinary.uploader.upload(
                data_uri,
                resource_type="auto",
                folder=self.settings.storage_folder,
                **self.credentials,
            )

        result = await asyncio.to_thread(_upload)
        secure_url = result.get("secure_url")
        if not secure_url:
            raise RuntimeError("Cloudinary response did not include a secure_url")
        return secure_url


class LocalStorageService(BaseStorageService):
    """Local filesystem storage intended for development use."""

    scheme: Final[str] = "local"

    def __init__(self) -> None:
        super().__init__()
        self.base_path = Path(self.settings.local_storage_dir).resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _key_path(self, key: str) -> Path:
        # Prevent directory traversal by resolving inside base path
        candidate = self.base_path.joinpath(*Path(key).parts).resolve()
        if not candidate.is_relative_to(self.base_path):
            raise ValueError("Invalid storage key")
        return candidate

    def public_url(self, key: str) -> str:
        return f"{self.settings.public_base_url.rstrip('/')}/blobs/{quote(key)}"

    async def store(self, data: bytes, filename: str, content_type: str | None) -> str:
        key = self.generate_upload_key(filename)
        target = self._key_path(key)
        target.parent.mkdir(parents=True, exist_ok=True)

        def _write() -> None:
            target.write_bytes(data)

        await asyncio.to_thread(_write)
        logger.debug("Wrote %d bytes to %s", len(data), target)
        return self.public_url(key)

    def open_for_download(self, key: str) -> Path:
        path = self._key_path(key)
        if not path.is_file():
            raise FileNotFoundError(key)
        return path


_storage_service: BaseStorageService | None = None


def get_storage_service() -> BaseStorageService:
    global _storage_service
    if _storage_service is None:
        settings = get_settings()
        if settings.storage_backend == "local":
            _storage_service = LocalStorageService()
        elif settings.storage_backend == "s3":
            _storage_service = StorageService()
        else:
            _storage_service = CloudinaryStorageService()
    return _storage_service


def reset_storage_service() -> None:
    global _storage_service
    _storage_service = None
