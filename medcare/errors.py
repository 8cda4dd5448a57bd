from fastapi import status


class BookingServiceError(Exception):
    """Base error, carries the error kind and the HTTP status it maps to"""

    kind = "internal"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class ValidationError(BookingServiceError):
    """Required input is missing or malformed"""

    kind = "validation"
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(BookingServiceError):
    """No booking matches the identifier"""

    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class StorageError(BookingServiceError):
    """Any failure raised by the store, including malformed identifiers"""

    kind = "storage"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
