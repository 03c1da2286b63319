"""Request canonicalization for Azure SharedKey authentication.

Builds the string-to-sign for Blob service requests. The service rebuilds
the same string from the request it receives and compares signatures, so
every line here has to match byte-for-byte.

Reference: https://docs.microsoft.com/en-us/rest/api/storageservices/authorize-with-shared-key
"""

import re
from dataclasses import dataclass
from typing import List, Mapping, Tuple
from urllib.parse import parse_qsl, urlsplit

BLOB_HOST_SUFFIX = ".blob.core.windows.net"

# Order is fixed by the service.
STANDARD_HEADERS: Tuple[str, ...] = (
    "Content-Encoding",
    "Content-Language",
    "Content-Length",
    "Content-MD5",
    "Content-Type",
    "Date",
    "If-Modified-Since",
    "If-Match",
    "If-None-Match",
    "If-Unmodified-Since",
    "Range",
)

MS_HEADER_PREFIX = "x-ms-"

_WHITESPACE_RUN = re.compile(r"[ \n]+")


@dataclass(frozen=True)
class CanonicalizedRequest:
    """Result of request canonicalization."""

    string_to_sign: str
    canonical_headers: str
    canonical_resource: str


def account_from_host(host: str, host_suffix: str = BLOB_HOST_SUFFIX) -> str:
    """Strip the blob service suffix from a host name.

    Example:
        >>> account_from_host("myaccount.blob.core.windows.net")
        'myaccount'
    """
    return host.replace(host_suffix, "")


def clean_header_value(value: str) -> str:
    """Trim a header value and collapse inner runs of spaces/newlines."""
    return _WHITESPACE_RUN.sub(" ", value.strip())


class RequestCanonicalizer:
    """Canonicalize HTTP requests for Azure SharedKey authentication.

    Example:
        canonicalizer = RequestCanonicalizer()
        result = canonicalizer.canonicalize(
            method="PUT",
            url="https://myaccount.blob.core.windows.net/container?restype=container",
            headers={
                "x-ms-version": "2023-05-03",
                "x-ms-date": "Mon, 19 Oct 2026 10:30:00 GMT"
            },
        )
        # result.string_to_sign contains the full canonical string
    """

    def __init__(self, host_suffix: str = BLOB_HOST_SUFFIX):
        """Initialize canonicalizer.

        Args:
            host_suffix: Suffix stripped from the URL host to get the account name
        """
        self.host_suffix = host_suffix

    def canonicalize(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
    ) -> CanonicalizedRequest:
        """Canonicalize an HTTP request for SharedKey authentication.

        Args:
            method: HTTP method, used verbatim
            url: Full request URL (percent-encoded)
            headers: Final request headers, any casing

        Returns:
            CanonicalizedRequest with string-to-sign and components
        """
        canonical_headers = self._build_canonical_headers(headers)
        canonical_resource = self._build_canonical_resource(url)

        parts = [method]
        parts.extend(self._standard_header_values(headers))
        if canonical_headers:
            parts.append(canonical_headers)
        parts.append(canonical_resource)

        return CanonicalizedRequest(
            string_to_sign="\n".join(parts),
            canonical_headers=canonical_headers,
            canonical_resource=canonical_resource,
        )

    def _standard_header_values(self, headers: Mapping[str, str]) -> List[str]:
        """Values of the fixed header set, empty string when absent."""
        headers_lower = {name.lower(): value for name, value in headers.items()}

        values = []
        for name in STANDARD_HEADERS:
            value = headers_lower.get(name.lower()) or ""
            # A zero-length body is signed as an empty line, not "0"
            if name == "Content-Length" and value == "0":
                value = ""
            values.append(value)
        return values

    def _build_canonical_headers(self, headers: Mapping[str, str]) -> str:
        """Build canonicalized headers string.

        Rules:
        1. Include all headers starting with "x-ms-" (any casing)
        2. Lowercase header names
        3. Sort by name (ordinal)
        4. Trim values and collapse runs of spaces/newlines
        5. Format as "name:value", one per line

        Example:
            >>> headers = {
            ...     "x-ms-version": "2023-05-03",
            ...     "X-MS-Date": "Mon, 19 Oct 2026 10:30:00 GMT",
            ...     "Content-Type": "application/xml"
            ... }
            >>> print(RequestCanonicalizer()._build_canonical_headers(headers))
            x-ms-date:Mon, 19 Oct 2026 10:30:00 GMT
            x-ms-version:2023-05-03
        """
        ms_headers: List[Tuple[str, str]] = []

        for name, value in headers.items():
            name_lower = clean_header_value(name).lower()
            if name_lower.startswith(MS_HEADER_PREFIX):
                ms_headers.append((name_lower, clean_header_value(str(value))))

        ms_headers.sort(key=lambda item: item[0])

        return "\n".join(f"{name}:{value}" for name, value in ms_headers)

    def _build_canonical_resource(self, url: str) -> str:
        """Build canonicalized resource string.

        Format:
            /account-name/percent-encoded-path
            param1:value1
            param2:value2

        Query values are decoded; parameters are sorted by name and a
        parameter without a value keeps its empty value.

        Example:
            >>> url = "https://myaccount.blob.core.windows.net/c/b?comp=block&blockid=YQ%3D%3D"
            >>> print(RequestCanonicalizer()._build_canonical_resource(url))
            /myaccount/c/b
            blockid:YQ==
            comp:block
        """
        parsed = urlsplit(url)

        account_name = account_from_host(parsed.hostname or "", self.host_suffix)
        lines = [f"/{account_name}{parsed.path}"]

        query_items = parse_qsl(parsed.query, keep_blank_values=True)
        for name, value in sorted(query_items, key=lambda item: item[0]):
            lines.append(f"{name}:{value}")

        return "\n".join(lines)
