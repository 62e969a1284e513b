"""
Errors raised by the paste manager. Each carries the HTTP status and the
message shown to clients.
"""
from typing import Optional


class PasteError(Exception):
    """Base class for paste manager errors."""

    status_code = 500
    message = "An unspecified error occurred with the paste manager"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class InvalidUrlError(PasteError):
    status_code = 400
    message = "The specified URL is invalid, or is the wrong length"


class InvalidContentError(PasteError):
    status_code = 400
    message = "The specified content is invalid, or is the wrong length"


class InvalidPasswordError(PasteError):
    status_code = 400
    message = "The specified password is invalid, or is the wrong length"


class PasteAlreadyExistsError(PasteError):
    status_code = 409
    message = "A paste with this URL already exists"


class PasteNotFoundError(PasteError):
    status_code = 404
    message = "No paste with this URL has been found"


class IncorrectPasswordError(PasteError):
    status_code = 401
    message = "The specified password is incorrect"


class PasteStorageError(PasteError):
    """A storage fault during a paste operation. ``cause`` holds the storage error."""

    status_code = 500
    message = "The paste storage failed to process the request"

    def __init__(self, cause: Exception):
        super().__init__()
        self.cause = cause
