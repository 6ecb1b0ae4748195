from share_relay.schemas.share import ErrorResponse, UploadResponse

__all__ = [
    "UploadResponse",
    "ErrorResponse",
]
