"""Custom exceptions for the shop ledger application."""

class ShopError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['success'] = False
        rv['error'] = self.message
        return rv

class ValidationError(ShopError):
    """Raised when a required field is missing or empty."""
    def __init__(self, message, payload=None):
        super().__init__(message, 400, payload)

class NotFoundError(ShopError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)

class ServiceError(ShopError):
    """Raised when the database or another upstream service fails.

    The upstream message is passed through verbatim.
    """
    def __init__(self, message, payload=None):
        super().__init__(message, 500, payload)
