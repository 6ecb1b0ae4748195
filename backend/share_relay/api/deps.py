from fastapi import Request

from share_relay.services.relay import RelayService
from share_relay.services.storage import LocalStorageService, get_storage_service


def get_relay_service(request: Request) -> RelayService:
    return request.app.state.relay_service


def get_local_storage() -> LocalStorageService:
    storage = get_storage_service()
    if not isinstance(storage, LocalStorageService):
        raise RuntimeError("Local blob serving requires STORAGE_BACKEND=local")
    return storage
