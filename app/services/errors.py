from fastapi import status


class BookshopError(Exception):
    """Base class for errors surfaced by the catalog and the rental ledger."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal error"

    def __init__(self, detail: str = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidRequest(BookshopError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class NotFound(BookshopError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class Conflict(BookshopError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict with current state"


class Unauthorized(BookshopError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Admin key required"


class InternalError(BookshopError):
    pass
