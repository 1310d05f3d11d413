import asyncio

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import DOCUMENT_ID, FakeOnshape
from onshape_stl_api.main import app
from onshape_stl_api.routers.imports import get_client
from onshape_stl_mcp_server.client import OnshapeClient


@pytest.fixture
def api(settings):
    opened = []

    def _bind(fake: FakeOnshape) -> TestClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(fake.handler))
        opened.append(http)
        client = OnshapeClient(settings, http_client=http)
        app.dependency_overrides[get_client] = lambda: client
        return TestClient(app)

    yield _bind
    app.dependency_overrides.clear()
    for http in opened:
        asyncio.run(http.aclose())


def test_index_lists_routes(api):
    response = api(FakeOnshape()).get("/")

    assert response.status_code == 200
    assert response.json()["name"] == "onshape-stl-api"


def test_import_creates_document(api):
    fake = FakeOnshape()
    response = api(fake).post("/imports/", json={"stl": "solid t\nendsolid t", "documentName": "Widget"})

    assert response.status_code == 201
    body = response.json()
    assert body["document_id"] == DOCUMENT_ID
    assert body["document_name"] == "Widget"
    assert body["url"] == f"https://cad.onshape.com/documents/{DOCUMENT_ID}"
    assert fake.steps == ["create", "upload", "import"]


def test_empty_stl_is_unprocessable(api):
    fake = FakeOnshape()
    response = api(fake).post("/imports/", json={"stl": ""})

    assert response.status_code == 422
    assert fake.calls == []


def test_upstream_failure_maps_to_bad_gateway(api):
    fake = FakeOnshape(failures={"upload": (500, "boom")})
    response = api(fake).post("/imports/", json={"stl": "solid t\nendsolid t"})

    assert response.status_code == 502
    assert response.json()["detail"] == "Onshape API Error 500: boom"
    assert fake.steps == ["create", "upload"]
