class StoreError(Exception):
    code = "unknown"

    def __init__(self, message: str = ""):
        self.message = message or self.__class__.__doc__ or self.code
        super().__init__(self.message)


class PermissionDenied(StoreError):
    """Missing or insufficient permissions."""

    code = "permission-denied"


class NotFound(StoreError):
    """The requested document does not exist."""

    code = "not-found"


class Unavailable(StoreError):
    """The document store could not be reached."""

    code = "unavailable"


def describe_error(error: Exception, doing: str) -> str:
    """
    Turn an exception raised while `doing` something into the message shown
    to the user.
    """
    if isinstance(error, PermissionDenied):
        return f"Permission denied: you cannot {doing}."
    if isinstance(error, NotFound):
        return f"Could not {doing}: it no longer exists. It may have been removed by someone else."
    if isinstance(error, Unavailable):
        return f"Failed to {doing} due to a network error. Please try again."
    return f"Failed to {doing}. Please try again."
