"""Pydantic schemas shared by the MCP tool and the HTTP API."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_FILENAME = "model.stl"


class ImportStlRequest(BaseModel):
    stl: str = Field(..., min_length=1, description="ASCII STL content to import into Onshape.")
    documentName: Optional[str] = Field(
        default=None, description="Name for the new Onshape document (default: 'AI Model <ISO date>')."
    )
    filename: Optional[str] = Field(
        default=None, description=f"Filename for the STL blob (default: '{DEFAULT_FILENAME}')."
    )
    createNewPartStudio: Optional[bool] = Field(
        default=None, description="Create a new Part Studio for the STL import (default false)."
    )


class CreatedDocument(BaseModel):
    """Subset of the Onshape document payload the import needs."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    default_workspace_id: str


class UploadedBlob(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str


class ImportStlResult(BaseModel):
    document_name: str = Field(..., description="Name given to the created document.")
    document_id: str = Field(..., description="Identifier of the created Onshape document.")
    workspace_id: str = Field(..., description="Default workspace the STL was imported into.")
    blob_element_id: str = Field(..., description="Identifier of the uploaded STL blob element.")
    url: str = Field(..., description="Direct link to the document in the Onshape web UI.")

    def message(self) -> str:
        return (
            "Imported STL into Onshape!\n"
            f"Document: {self.document_name}\n"
            f"ID: {self.document_id}\n"
            f"View: {self.url}"
        )


class HealthResponse(BaseModel):
    status: str = Field("ok", description="Service status indicator.")
    name: str = Field(..., description="Server name.")
    version: str = Field(..., description="Version string reported by the server.")
    api_url: str = Field(..., description="Onshape API base URL requests are sent to.")


__all__ = [
    "DEFAULT_FILENAME",
    "CreatedDocument",
    "HealthResponse",
    "ImportStlRequest",
    "ImportStlResult",
    "UploadedBlob",
]
