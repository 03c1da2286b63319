"""Shared fixtures: an in-memory blob service behind httpx.MockTransport."""

import base64
from typing import Dict, List, Optional, Set

import httpx
import pytest

from azsharedblob.auth import SharedKeyCredential
from azsharedblob.auth.sharedkey import compute_signature
from azsharedblob.protocol.canonicalizer import RequestCanonicalizer
from azsharedblob.services.blob.models import BlockList

ACCOUNT_NAME = "myaccount"
ACCOUNT_KEY = base64.b64encode(b"fake-blob-service-account-key").decode()


def error_response(status_code: int, code: str, message: str) -> httpx.Response:
    body = (
        '<?xml version="1.0" encoding="utf-8"?>'
        f"<Error><Code>{code}</Code><Message>{message}</Message></Error>"
    ).encode()
    return httpx.Response(
        status_code,
        content=body,
        headers={"Content-Type": "application/xml", "x-ms-error-code": code},
    )


class FakeBlobService:
    """Records requests, verifies SharedKey signatures and stores blocks."""

    def __init__(self, account_key: str = ACCOUNT_KEY):
        self.account_key = account_key
        self.canonicalizer = RequestCanonicalizer()
        self.requests: List[httpx.Request] = []
        self.containers: Set[str] = set()
        self.staged: Dict[str, bytes] = {}
        self.blobs: Dict[str, bytes] = {}
        # 1-based index of the stage request to reject, and the response to use
        self.fail_stage_at: Optional[int] = None
        self.stage_failure = error_response(500, "InternalError", "Block write failed.")
        self.fail_commit: Optional[httpx.Response] = None

    @property
    def stage_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.params.get("comp") == "block"]

    @property
    def commit_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.params.get("comp") == "blocklist"]

    def _signature_valid(self, request: httpx.Request) -> bool:
        headers = {k: v for k, v in request.headers.items() if k.lower() != "authorization"}
        canonical = self.canonicalizer.canonicalize(request.method, str(request.url), headers)
        signature = compute_signature(canonical.string_to_sign, self.account_key)
        return request.headers.get("Authorization") == f"SharedKey {ACCOUNT_NAME}:{signature}"

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if not self._signature_valid(request):
            return error_response(401, "AuthenticationFailed", "Server failed to authenticate the request.")

        params = request.url.params
        path = request.url.path.lstrip("/")

        if params.get("restype") == "container":
            if request.method == "HEAD":
                return httpx.Response(200 if path in self.containers else 404)
            if request.method == "PUT":
                if path in self.containers:
                    return error_response(409, "ContainerAlreadyExists", "The specified container already exists.")
                self.containers.add(path)
                return httpx.Response(201)

        if params.get("comp") == "block":
            if self.fail_stage_at == len(self.stage_requests):
                return self.stage_failure
            self.staged[params["blockid"]] = request.content
            return httpx.Response(201)

        if params.get("comp") == "blocklist":
            if self.fail_commit is not None:
                return self.fail_commit
            block_list = BlockList.from_xml(request.content)
            self.blobs[path] = b"".join(self.staged[block_id] for block_id in block_list.latest)
            return httpx.Response(201)

        return error_response(400, "InvalidUri", "Unsupported request.")


@pytest.fixture
def credential():
    return SharedKeyCredential(ACCOUNT_NAME, ACCOUNT_KEY)


@pytest.fixture
def service():
    return FakeBlobService()


@pytest.fixture
async def http_client(service):
    client = httpx.AsyncClient(transport=httpx.MockTransport(service))
    yield client
    await client.aclose()
