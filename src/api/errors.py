# src/api/errors.py

"""Error taxonomy for remote catalog calls."""


class CatalogError(Exception):
    """Base class for every failure reported by the products API."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        server_message: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.server_message = server_message


class TransportError(CatalogError):
    """Network failure or an HTTP status with no specific meaning."""


class NotFoundError(CatalogError):
    """The server confirmed the requested product does not exist."""


class ValidationError(CatalogError):
    """The server rejected the submitted payload."""
