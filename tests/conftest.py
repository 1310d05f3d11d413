import json
from typing import Dict, List, Optional, Tuple

import httpx
import pytest

from onshape_stl_mcp_server.client import OnshapeClient
from onshape_stl_mcp_server.config import OnshapeSettings

DOCUMENT_ID = "d0c0000000000000000000aa"
WORKSPACE_ID = "w0rk000000000000000000bb"
BLOB_ID = "b10b000000000000000000cc"


class FakeOnshape:
    """In-memory stand-in for the three Onshape endpoints, recording every call."""

    def __init__(self, failures: Optional[Dict[str, Tuple[int, str]]] = None, import_body: str = ""):
        self.failures = failures or {}
        self.import_body = import_body
        self.calls: List[Tuple[str, httpx.Request]] = []

    @staticmethod
    def step_for(request: httpx.Request) -> str:
        path = request.url.path
        if path.endswith("/documents"):
            return "create"
        if "/blobelements/" in path:
            return "upload"
        if path.endswith("/import"):
            return "import"
        raise AssertionError(f"unexpected Onshape call: {request.method} {request.url}")

    @property
    def steps(self) -> List[str]:
        return [step for step, _ in self.calls]

    def request_for(self, step: str) -> httpx.Request:
        for name, request in self.calls:
            if name == step:
                return request
        raise AssertionError(f"no {step} call recorded")

    def handler(self, request: httpx.Request) -> httpx.Response:
        request.read()
        step = self.step_for(request)
        self.calls.append((step, request))

        if step in self.failures:
            status, body = self.failures[step]
            return httpx.Response(status, text=body)

        if step == "create":
            body = json.loads(request.content)
            return httpx.Response(
                200,
                json={"id": DOCUMENT_ID, "name": body["name"], "defaultWorkspace": {"id": WORKSPACE_ID}},
            )
        if step == "upload":
            return httpx.Response(200, json={"id": BLOB_ID})
        return httpx.Response(200, text=self.import_body)


@pytest.fixture
def settings() -> OnshapeSettings:
    return OnshapeSettings(
        access_key="access-key",
        secret_key="secret-key",
        api_url="https://cad.onshape.com/api/v6",
        _env_file=None,
    )


@pytest.fixture
def fake_onshape() -> FakeOnshape:
    return FakeOnshape()


def make_client(settings: OnshapeSettings, fake: FakeOnshape) -> OnshapeClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(fake.handler))
    return OnshapeClient(settings, http_client=http)


@pytest.fixture
def client(settings, fake_onshape) -> OnshapeClient:
    return make_client(settings, fake_onshape)
