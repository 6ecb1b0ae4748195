from __future__ import annotations

import logging
from collections.abc import AsyncIterator

import httpx

from share_relay.core.config import get_settings
from share_relay.core.errors import (
    FileTooLarge,
    NoFileReceived,
    NotFound,
    RelayFetchFailed,
    UploadFailed,
)
from share_relay.core.ids import generate_unique_id
from share_relay.models import ShareRecord
from share_relay.services.registry import ShareRegistry
from share_relay.services.storage import BaseStorageService

logger = logging.getLogger(__name__)


class RelayService:
    """Moves files between uploaders, the blob store and downloaders."""

    def __init__(
        self,
        registry: ShareRegistry,
        storage: BaseStorageService,
        http_client: httpx.AsyncClient,
    ) -> None:
        self.settings = get_settings()
        self.registry = registry
        self.storage = storage
        self.http_client = http_client

    def mint_identifier(self) -> str:
        attempts = self.settings.id_collision_attempts
        unique_id = generate_unique_id()
        # With a single attempt the draw is used as-is; a clash overwrites.
        for _ in range(attempts - 1):
            if unique_id not in self.registry:
                break
            logger.warning("Identifier %s already registered; drawing again", unique_id)
            unique_id = generate_unique_id()
        return unique_id

    async def upload(
        self,
        data: bytes | None,
        filename: str | None,
        content_type: str | None,
    ) -> tuple[str, ShareRecord]:
        if data is None:
            raise NoFileReceived()

        max_bytes = self.settings.max_upload_bytes
        if max_bytes is not None and len(data) > max_bytes:
            logger.info("Rejected %s: %d bytes exceeds %d", filename, len(data), max_bytes)
            raise FileTooLarge()

        file_name = filename or ""
        try:
            file_url = await self.storage.store(data, file_name, content_type)
        except Exception as exc:
            logger.exception("Blob store upload failed for %s", file_name)
            raise UploadFailed() from exc

        unique_id = self.mint_identifier()
        record = ShareRecord(file_name=file_name, file_url=file_url)
        self.registry.put(unique_id, record)
        logger.info("File uploaded to %s. Stored as ID: %s", file_url, unique_id)
        return unique_id, record

    def lookup(self, unique_id: str) -> ShareRecord:
        record = self.registry.get(unique_id)
        if record is None or not record.file_url:
            logger.error("Download failed: ID %s not found", unique_id)
            raise NotFound()
        return record

    async def open_upstream(self, record: ShareRecord) -> httpx.Response:
        logger.info("Fetching %s from storage", record.file_url)
        request = self.http_client.build_request("GET", record.file_url)
        try:
            response = await self.http_client.send(request, stream=True)
        except httpx.HTTPError as exc:
            logger.error("Upstream request to %s failed: %s", record.file_url, exc)
            raise RelayFetchFailed() from exc

        if response.is_error:
            await response.aclose()
            logger.error(
                "Upstream %s answered %d", record.file_url, response.status_code
            )
            raise RelayFetchFailed()
        return response

    async def stream_body(self, response: httpx.Response) -> AsyncIterator[bytes]:
        """Yield the upstream body and always release the connection.

        Errors after the first chunk can only truncate the download, so they
        are logged and re-raised to abort the client connection.
        """
        try:
            async for chunk in response.aiter_bytes():
                yield chunk
        except httpx.HTTPError as exc:
            logger.error("Upstream stream from %s broke: %s", response.request.url, exc)
            raise RelayFetchFailed() from exc
        finally:
            await response.aclose()
