from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status

from onshape_stl_mcp_server.client import OnshapeClient
from onshape_stl_mcp_server.errors import OnshapeError
from onshape_stl_mcp_server.importer import import_stl
from onshape_stl_mcp_server.schemas import ImportStlRequest, ImportStlResult


def get_client(request: Request) -> OnshapeClient:
    client = getattr(request.app.state, "onshape_client", None)
    if client is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Onshape client not configured")
    return client


router = APIRouter(prefix="/imports", tags=["imports"])


@router.post("/", response_model=ImportStlResult, status_code=status.HTTP_201_CREATED)
async def create_import(payload: ImportStlRequest, client: OnshapeClient = Depends(get_client)) -> ImportStlResult:
    try:
        return await import_stl(client, payload)
    except OnshapeError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.message) from exc
