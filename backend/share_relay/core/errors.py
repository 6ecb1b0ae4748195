class RelayError(Exception):
    """Base class for failures surfaced to HTTP callers.

    ``message`` is the static text sent back to the client; ``json_body``
    selects between the ``{"status": "error", ...}`` envelope used by the
    upload route and the plain-text body used by downloads.
    """

    status_code: int = 500
    message: str = "Internal server error."
    json_body: bool = True

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.message)


class NoFileReceived(RelayError):
    status_code = 400
    message = "No file received."


class FileTooLarge(RelayError):
    status_code = 413
    message = "File exceeds the maximum allowed size."


class UploadFailed(RelayError):
    status_code = 500
    message = "Server failed to process and save the file."


class NotFound(RelayError):
    status_code = 404
    message = "File not found or link has expired."
    json_body = False


class RelayFetchFailed(RelayError):
    status_code = 500
    message = "Error retrieving file from storage (Request failed)."
    json_body = False
