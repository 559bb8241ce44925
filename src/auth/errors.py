class AuthError(Exception):
    """An error reported by the authentication provider, keyed by its code."""

    def __init__(self, code: str, message: str = ""):
        self.code = code
        self.message = message or code
        super().__init__(f"{code}: {self.message}")


EMAIL_IN_USE = "auth/email-already-in-use"
INVALID_EMAIL = "auth/invalid-email"
WEAK_PASSWORD = "auth/weak-password"
USER_NOT_FOUND = "auth/user-not-found"
WRONG_PASSWORD = "auth/wrong-password"
USER_DISABLED = "auth/user-disabled"
TOO_MANY_REQUESTS = "auth/too-many-requests"
NETWORK_REQUEST_FAILED = "auth/network-request-failed"
OPERATION_NOT_ALLOWED = "auth/operation-not-allowed"
NO_CURRENT_USER = "auth/no-current-user"
