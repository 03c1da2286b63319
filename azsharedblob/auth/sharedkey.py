"""
SharedKey signing for Azure Blob Storage requests.

Signature = Base64(HMAC-SHA256(UTF8(StringToSign), Base64Decode(AccountKey)))

Reference: https://docs.microsoft.com/en-us/rest/api/storageservices/authorize-with-shared-key

Author: azsharedblob contributors
"""

import base64
import binascii
import hashlib
import hmac
import logging

from azsharedblob.auth.exceptions import InvalidAccountKeyError

logger = logging.getLogger(__name__)

SHARED_KEY_SCHEME = "SharedKey"
SHARED_KEY_LITE_SCHEME = "SharedKeyLite"


def decode_account_key(account_key: str) -> bytes:
    """
    Decode a base64-encoded account key.

    Args:
        account_key: Base64-encoded account key

    Returns:
        Raw key bytes

    Raises:
        InvalidAccountKeyError: If the key is empty or not valid base64
    """
    if not account_key:
        raise InvalidAccountKeyError("Account key is missing")

    try:
        return base64.b64decode(account_key, validate=True)
    except (binascii.Error, ValueError) as e:
        logger.error("Account key could not be decoded")
        raise InvalidAccountKeyError(f"Account key is not valid base64: {e}") from e


def compute_signature(canonical_string: str, account_key: str) -> str:
    """
    Compute HMAC-SHA256 signature.

    Args:
        canonical_string: Canonical string to sign
        account_key: Base64-encoded account key

    Returns:
        Base64-encoded signature

    Raises:
        InvalidAccountKeyError: If the account key cannot be decoded
    """
    key_bytes = decode_account_key(account_key)

    signature_bytes = hmac.new(
        key_bytes,
        canonical_string.encode("utf-8"),
        hashlib.sha256
    ).digest()

    return base64.b64encode(signature_bytes).decode("utf-8")


def format_authorization_header(account_name: str, signature: str, is_lite: bool = False) -> str:
    """
    Build the Authorization header value.

    Format: "SharedKey account:signature" or "SharedKeyLite account:signature"
    """
    scheme = SHARED_KEY_LITE_SCHEME if is_lite else SHARED_KEY_SCHEME
    return f"{scheme} {account_name}:{signature}"
