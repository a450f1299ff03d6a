class PouchAdminError(Exception):
    """Base error for the admin client."""

    pass


class APIError(PouchAdminError):
    """Raised when the key-management API call fails.

    ``str(error)`` is the backend's ``error`` message, verbatim, so it can be
    shown to the operator as-is.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class CatalogError(PouchAdminError):
    """Raised when a plugin catalog payload cannot be parsed."""

    pass


class KeyNotFoundError(PouchAdminError):
    """Raised when a key id is not in the backend's key list."""

    pass
