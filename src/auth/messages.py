from typing import Dict

from auth import errors

LOGIN_MESSAGES: Dict[str, str] = {
    errors.USER_NOT_FOUND: "No account found with this email address.",
    errors.WRONG_PASSWORD: "Incorrect password. Please try again.",
    errors.INVALID_EMAIL: "Please enter a valid email address.",
    errors.USER_DISABLED: "This account has been disabled.",
    errors.TOO_MANY_REQUESTS: "Too many failed attempts. Please try again later.",
    errors.NETWORK_REQUEST_FAILED: "Network error. Please check your connection.",
}
LOGIN_DEFAULT = "Login failed. Please check your credentials."

SIGNUP_MESSAGES: Dict[str, str] = {
    errors.EMAIL_IN_USE: "This email is already registered. Please login instead.",
    errors.INVALID_EMAIL: "Invalid email address. Please check and try again.",
    errors.OPERATION_NOT_ALLOWED: "Email/password authentication is not enabled.",
    errors.WEAK_PASSWORD: "Password is too weak. Please use at least 6 characters.",
    errors.NETWORK_REQUEST_FAILED: "Network error. Please check your connection.",
}
SIGNUP_DEFAULT = "Failed to create account. Please try again."


def login_message(error: errors.AuthError) -> str:
    return LOGIN_MESSAGES.get(error.code, LOGIN_DEFAULT)


def signup_message(error: errors.AuthError) -> str:
    return SIGNUP_MESSAGES.get(error.code, f"{SIGNUP_DEFAULT} Error: {error.message}")
