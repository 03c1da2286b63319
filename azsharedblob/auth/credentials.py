"""Credentials able to authorize Azure Blob Storage requests.

A credential is anything that can turn a canonical string into an
``Authorization`` header value. The canonicalizer and request builder only
depend on that capability, so new schemes can be added as new subclasses.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from azsharedblob.auth.sharedkey import compute_signature, format_authorization_header


class Credential(ABC):
    """Capability: produce an Authorization header for a canonical string."""

    @property
    @abstractmethod
    def account_name(self) -> str:
        """Storage account the credential belongs to."""

    @abstractmethod
    def authorization_header(self, string_to_sign: str) -> str:
        """Return the ``Authorization`` header value for ``string_to_sign``."""


@dataclass(frozen=True)
class SharedKeyCredential(Credential):
    """Account name plus base64-encoded shared key.

    The key is only decoded when a request is signed; an invalid key raises
    :class:`~azsharedblob.auth.exceptions.InvalidAccountKeyError` then.
    """

    name: str
    key: str = field(repr=False)
    is_lite: bool = False

    @property
    def account_name(self) -> str:
        return self.name

    def authorization_header(self, string_to_sign: str) -> str:
        signature = compute_signature(string_to_sign, self.key)
        return format_authorization_header(self.name, signature, self.is_lite)
