"""Async client for the handful of Onshape REST endpoints the importer uses."""
from __future__ import annotations

import json
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx
import structlog

from .config import OnshapeSettings
from .errors import OnshapeAPIError, OnshapeError, OnshapeTransportError
from .schemas import CreatedDocument, UploadedBlob

logger = structlog.get_logger(__name__)

BLOB_CONTENT_TYPE = "application/octet-stream"
# Characters left unescaped in a URI component.
_URI_COMPONENT_SAFE = "!~*'()"


class OnshapeClient:
    """Thin wrapper over ``httpx.AsyncClient`` that speaks Onshape.

    Headers are derived from the settings once, at construction, and reused
    for every request. Non-2xx responses raise :class:`OnshapeAPIError`.
    """

    def __init__(self, settings: OnshapeSettings, http_client: Optional[httpx.AsyncClient] = None) -> None:
        self._settings = settings
        self._base_url = settings.api_url.rstrip("/")
        self._headers = {
            "Authorization": settings.auth_header,
            "Accept": "application/json",
        }
        self._owns_http = http_client is None
        if http_client is None:
            kwargs: Dict[str, Any] = {}
            if settings.timeout is not None:
                kwargs["timeout"] = settings.timeout
            http_client = httpx.AsyncClient(**kwargs)
        self._http = http_client

    async def __aenter__(self) -> "OnshapeClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    def document_url(self, document_id: str) -> str:
        return f"{self._settings.web_url}/documents/{document_id}"

    # ------------------------------------------------------------------
    # Endpoints
    async def create_document(self, name: str, public: bool = False) -> CreatedDocument:
        data = await self._request(
            "POST", "/documents", step="create_document", json={"name": name, "public": public}
        )
        try:
            return CreatedDocument(
                id=data["id"],
                name=data.get("name", name),
                default_workspace_id=data["defaultWorkspace"]["id"],
            )
        except (KeyError, TypeError) as exc:
            raise OnshapeError(
                f"Unexpected document payload from Onshape: missing {exc}", step="create_document"
            ) from exc

    async def upload_blob(
        self, document_id: str, workspace_id: str, filename: str, content: bytes
    ) -> UploadedBlob:
        path = (
            f"/blobelements/d/{document_id}/w/{workspace_id}"
            f"?encodedFilename={quote(filename, safe=_URI_COMPONENT_SAFE)}"
        )
        data = await self._request(
            "POST",
            path,
            step="upload_blob",
            files={"file": (filename, content, BLOB_CONTENT_TYPE)},
        )
        try:
            return UploadedBlob(id=data["id"])
        except (KeyError, TypeError) as exc:
            raise OnshapeError(
                f"Unexpected blob payload from Onshape: missing {exc}", step="upload_blob"
            ) from exc

    async def import_blob(
        self,
        document_id: str,
        workspace_id: str,
        blob_element_id: str,
        create_new_part_studio: bool = False,
    ) -> Dict[str, Any]:
        return await self._request(
            "POST",
            f"/partstudios/d/{document_id}/w/{workspace_id}/import",
            step="import_blob",
            json={
                "format": "STL",
                "blobElementId": blob_element_id,
                "importIntoPartStudio": True,
                "createNewPartStudio": create_new_part_studio,
            },
        )

    # ------------------------------------------------------------------
    async def _request(
        self,
        method: str,
        path: str,
        *,
        step: str,
        json: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        url = f"{self._base_url}{path}"
        logger.debug("onshape_request", step=step, method=method, url=url)
        try:
            # httpx sets the JSON or multipart content type (with boundary) itself.
            response = await self._http.request(method, url, headers=self._headers, json=json, files=files)
        except httpx.HTTPError as exc:
            raise OnshapeTransportError(str(exc) or type(exc).__name__, step=step) from exc

        logger.debug("onshape_response", step=step, status=response.status_code)
        if not response.is_success:
            raise OnshapeAPIError(response.status_code, response.text, step=step)
        return _decode_body(response, step)


def _decode_body(response: httpx.Response, step: str) -> Dict[str, Any]:
    text = response.text
    if not text:
        return {}
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise OnshapeError(f"Onshape returned invalid JSON: {exc}", step=step) from exc
    return data if isinstance(data, dict) else {"items": data}


__all__ = ["BLOB_CONTENT_TYPE", "OnshapeClient"]
