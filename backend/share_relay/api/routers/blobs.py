from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import FileResponse

from share_relay.api.deps import get_local_storage
from share_relay.services.storage import LocalStorageService

router = APIRouter(prefix="/blobs", tags=["blobs"])


@router.get("/{object_path:path}", name="download_blob")
async def download_blob(
    object_path: str,
    storage: LocalStorageService = Depends(get_local_storage),
) -> FileResponse:
    try:
        path = storage.open_for_download(object_path)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid object key") from None
    except FileNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found") from None
    return FileResponse(path)
