"""Tests for SharedKey signing and credentials."""

import base64
import hashlib
import hmac

import pytest

from azsharedblob.auth import (
    Credential,
    InvalidAccountKeyError,
    SharedKeyCredential,
    compute_signature,
    decode_account_key,
    format_authorization_header,
)

ACCOUNT_KEY = base64.b64encode(b"super-secret-account-key-bytes!!").decode()
STRING_TO_SIGN = "PUT\n\n\n\n\n\n\n\n\n\n\n\nx-ms-version:2023-05-03\n/myaccount/mycontainer\nrestype:container"


class TestComputeSignature:
    """Test HMAC-SHA256 signature computation."""

    def test_matches_reference_hmac(self):
        """Signature is base64(HMAC-SHA256(key, utf8(string)))."""
        expected = base64.b64encode(
            hmac.new(
                b"super-secret-account-key-bytes!!",
                STRING_TO_SIGN.encode("utf-8"),
                hashlib.sha256,
            ).digest()
        ).decode()

        assert compute_signature(STRING_TO_SIGN, ACCOUNT_KEY) == expected

    def test_deterministic(self):
        """Same string and key always give the same signature."""
        first = compute_signature(STRING_TO_SIGN, ACCOUNT_KEY)
        second = compute_signature(STRING_TO_SIGN, ACCOUNT_KEY)

        assert first == second

    def test_one_byte_change_changes_signature(self):
        """Changing a single character produces a different signature."""
        changed = STRING_TO_SIGN.replace("PUT", "PUS", 1)

        assert compute_signature(changed, ACCOUNT_KEY) != compute_signature(STRING_TO_SIGN, ACCOUNT_KEY)

    def test_different_key_changes_signature(self):
        """Different keys give different signatures."""
        other_key = base64.b64encode(b"another-key").decode()

        assert compute_signature(STRING_TO_SIGN, other_key) != compute_signature(STRING_TO_SIGN, ACCOUNT_KEY)

    def test_non_ascii_string_is_utf8_encoded(self):
        """Non-ASCII characters are signed as UTF-8."""
        text = "GET\n/myaccount/c/café"
        expected = base64.b64encode(
            hmac.new(
                b"super-secret-account-key-bytes!!",
                text.encode("utf-8"),
                hashlib.sha256,
            ).digest()
        ).decode()

        assert compute_signature(text, ACCOUNT_KEY) == expected


class TestDecodeAccountKey:
    """Test account key decoding."""

    def test_valid_key(self):
        assert decode_account_key(ACCOUNT_KEY) == b"super-secret-account-key-bytes!!"

    @pytest.mark.parametrize("bad_key", ["not base64!!", "abc", "****"])
    def test_invalid_key_raises(self, bad_key):
        """Malformed base64 is a configuration error."""
        with pytest.raises(InvalidAccountKeyError) as exc_info:
            decode_account_key(bad_key)

        assert exc_info.value.error_code == "InvalidAccountKey"

    def test_empty_key_raises(self):
        with pytest.raises(InvalidAccountKeyError, match="missing"):
            decode_account_key("")


class TestAuthorizationHeader:
    """Test Authorization header formatting."""

    def test_shared_key(self):
        assert format_authorization_header("myaccount", "sig=") == "SharedKey myaccount:sig="

    def test_shared_key_lite(self):
        assert format_authorization_header("myaccount", "sig=", is_lite=True) == "SharedKeyLite myaccount:sig="


class TestSharedKeyCredential:
    """Test the SharedKey credential."""

    def test_is_credential(self):
        credential = SharedKeyCredential("myaccount", ACCOUNT_KEY)

        assert isinstance(credential, Credential)
        assert credential.account_name == "myaccount"

    def test_authorization_header(self):
        credential = SharedKeyCredential("myaccount", ACCOUNT_KEY)
        signature = compute_signature(STRING_TO_SIGN, ACCOUNT_KEY)

        assert credential.authorization_header(STRING_TO_SIGN) == f"SharedKey myaccount:{signature}"

    def test_lite_authorization_header(self):
        credential = SharedKeyCredential("myaccount", ACCOUNT_KEY, is_lite=True)
        signature = compute_signature(STRING_TO_SIGN, ACCOUNT_KEY)

        assert credential.authorization_header(STRING_TO_SIGN) == f"SharedKeyLite myaccount:{signature}"

    def test_invalid_key_detected_at_signing_time(self):
        """Construction succeeds; signing fails."""
        credential = SharedKeyCredential("myaccount", "%%%invalid%%%")

        with pytest.raises(InvalidAccountKeyError):
            credential.authorization_header(STRING_TO_SIGN)

    def test_key_not_in_repr(self):
        credential = SharedKeyCredential("myaccount", ACCOUNT_KEY)

        assert ACCOUNT_KEY not in repr(credential)
