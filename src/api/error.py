from fastapi import status
from libs.result import Error

# Use case error codes mapped to HTTP status
CLIENT_ERROR_STATUS = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "UNAUTHORIZED": status.HTTP_401_UNAUTHORIZED,
    "INVALID_API_KEY": status.HTTP_401_UNAUTHORIZED,
    "SIGNATURE_REQUEST_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "SIGNED_DOCUMENT_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "SIGNATURE_REQUEST_ALREADY_SIGNED": status.HTTP_409_CONFLICT,
    "CONCURRENT_UPDATE": status.HTTP_409_CONFLICT,
    "SIGNATURE_REQUEST_EXPIRED": status.HTTP_410_GONE,
}

UPSTREAM_ERROR_CODES = {
    "DOCUMENT_FETCH_FAILED",
    "DOCUMENT_INVALID",
    "DOCUMENT_STORE_FAILED",
}


class ClientError(Exception):
    def __init__(self, base_error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


class ServerError(Exception):
    """Server side failure; upstream errors use 502 and keep their message"""

    def __init__(self, base_error: Error, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)

    @property
    def is_upstream(self) -> bool:
        return self.status_code == status.HTTP_502_BAD_GATEWAY


def raise_for_error(error: Error):
    if error.code in CLIENT_ERROR_STATUS:
        raise ClientError(error, status_code=CLIENT_ERROR_STATUS[error.code])
    if error.code in UPSTREAM_ERROR_CODES:
        raise ServerError(error, status_code=status.HTTP_502_BAD_GATEWAY)
    raise ServerError(error)
