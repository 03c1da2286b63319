"""
azsharedblob authentication module.

Provides credentials and SharedKey request signing for Azure Blob Storage.

Author: azsharedblob contributors
"""

from azsharedblob.auth.exceptions import (
    AuthenticationError,
    InvalidAccountKeyError,
    UnsupportedCredentialError,
)
from azsharedblob.auth.credentials import (
    Credential,
    SharedKeyCredential,
)
from azsharedblob.auth.sharedkey import (
    compute_signature,
    decode_account_key,
    format_authorization_header,
)

__all__ = [
    # Exceptions
    "AuthenticationError",
    "InvalidAccountKeyError",
    "UnsupportedCredentialError",
    # Credentials
    "Credential",
    "SharedKeyCredential",
    # SharedKey signing
    "compute_signature",
    "decode_account_key",
    "format_authorization_header",
]
