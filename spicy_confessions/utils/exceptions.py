"""
Domain errors raised by the service layer.

Routers translate these into HTTP responses; every error carries a message
that can be shown to the user as-is.
"""
from typing import Optional


class ConfessionsError(Exception):
    """Base class for errors raised by the confessions services"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfessionValidationError(ConfessionsError):
    """Input rejected before any database call"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class IdentityRequiredError(ConfessionValidationError):
    """Neither a platform fid nor an anonymous identifier was supplied"""

    def __init__(self, message: str = "Either user_fid or user_identifier must be provided"):
        super().__init__(message, field="identity")


class AlreadyLikedError(ConfessionsError):
    """The identity already has a like row for this confession"""

    def __init__(self, confession_id: int, message: str = "You have already liked this confession"):
        super().__init__(message)
        self.confession_id = confession_id


class StoreError(ConfessionsError):
    """The database rejected or failed a query"""
