from typing import NoReturn

from fastapi import status
from audit_retention.libs.result import Error

# Business error codes surfaced as client errors; anything else is a ServerError
CLIENT_ERROR_STATUS = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "UNKNOWN_PRINCIPAL": status.HTTP_400_BAD_REQUEST,
    "INSUFFICIENT_ROLE": status.HTTP_403_FORBIDDEN,
    "ACCESS_DENIED": status.HTTP_403_FORBIDDEN,
    "DOCUMENT_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "CONTRACT_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "INVALID_STATE": status.HTTP_409_CONFLICT,
}


class ClientError(Exception):
    def __init__(self, base_error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)


def raise_for_error(error: Error) -> NoReturn:
    """Raise the API exception for a use case error"""
    status_code = CLIENT_ERROR_STATUS.get(error.code)
    if status_code is not None:
        raise ClientError(error, status_code=status_code)
    raise ServerError(error)
