"""
Authentication exceptions for azsharedblob.

Author: azsharedblob contributors
"""


class AuthenticationError(Exception):
    """Base exception for credential and signing errors."""

    def __init__(self, message: str, error_code: str = "AuthenticationFailed"):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class InvalidAccountKeyError(AuthenticationError):
    """Raised when the shared account key is not valid base64.

    This is a configuration error: it is raised at signing time instead of
    being returned as a result, because no request can ever succeed with it.
    """

    def __init__(self, message: str = "Account key is not valid base64"):
        super().__init__(message, "InvalidAccountKey")


class UnsupportedCredentialError(AuthenticationError):
    """Raised when a credential type cannot sign requests."""

    def __init__(self, credential_type: str):
        super().__init__(
            f"Unsupported credential type: {credential_type}",
            "UnsupportedCredential"
        )
