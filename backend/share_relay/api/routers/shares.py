import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from starlette.datastructures import UploadFile

from share_relay.api.deps import get_relay_service
from share_relay.schemas import UploadResponse
from share_relay.services.relay import RelayService

logger = logging.getLogger(__name__)

UPLOAD_FIELD = "sharedFiles"

router = APIRouter(tags=["shares"])


@router.post("/upload", response_model=UploadResponse, response_model_by_alias=True)
async def upload_file(
    request: Request,
    relay: RelayService = Depends(get_relay_service),
) -> UploadResponse:
    logger.info("Received POST request at /upload")
    data = filename = content_type = None
    async with request.form() as form:
        # A plain text field under the file name counts as no file at all.
        shared_file = form.get(UPLOAD_FIELD)
        if isinstance(shared_file, UploadFile):
            data = await shared_file.read()
            filename = shared_file.filename
            content_type = shared_file.content_type

    unique_id, record = await relay.upload(data, filename, content_type)
    return UploadResponse(
        unique_id=unique_id,
        file_name=record.file_name,
        file_url=record.file_url,
    )


@router.get("/{unique_id}")
async def download_file(
    unique_id: str,
    relay: RelayService = Depends(get_relay_service),
) -> StreamingResponse:
    logger.info("Received GET request for download ID: %s", unique_id)
    record = relay.lookup(unique_id)
    headers = {"Content-Disposition": f'attachment; filename="{record.file_name}"'}

    upstream = await relay.open_upstream(record)
    try:
        return StreamingResponse(
            relay.stream_body(upstream),
            media_type="application/octet-stream",
            headers=headers,
        )
    except Exception:
        await upstream.aclose()
        raise
