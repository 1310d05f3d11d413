"""Create document, upload blob, import into a Part Studio.

Each step needs the identifiers returned by the previous one, so the calls
run strictly in order. The first failing step raises and nothing after it is
attempted; a document that was already created is left in place.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

import structlog

from .client import OnshapeClient
from .errors import OnshapeError
from .schemas import DEFAULT_FILENAME, ImportStlRequest, ImportStlResult

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def default_document_name(now: Optional[datetime] = None) -> str:
    """``AI Model <ISO timestamp>``, e.g. ``AI Model 2026-10-18T23:31:00.123456Z``."""

    stamp = (now or _utcnow()).astimezone(timezone.utc)
    return f"AI Model {stamp.isoformat(timespec='microseconds').replace('+00:00', 'Z')}"


async def import_stl(
    client: OnshapeClient,
    request: ImportStlRequest,
    clock: Clock = _utcnow,
) -> ImportStlResult:
    """Run the three Onshape calls for one STL payload.

    Raises :class:`OnshapeError` from whichever step fails first.
    """

    doc_name = request.documentName if request.documentName is not None else default_document_name(clock())
    filename = request.filename if request.filename is not None else DEFAULT_FILENAME
    create_new = bool(request.createNewPartStudio)
    log = logger.bind(document_name=doc_name, filename=filename)

    try:
        document = await client.create_document(doc_name, public=False)
        log = log.bind(document_id=document.id, workspace_id=document.default_workspace_id)
        log.info("document_created")

        blob = await client.upload_blob(
            document.id,
            document.default_workspace_id,
            filename,
            request.stl.encode("utf-8"),
        )
        log = log.bind(blob_element_id=blob.id)
        log.info("blob_uploaded", size=len(request.stl))

        await client.import_blob(
            document.id,
            document.default_workspace_id,
            blob.id,
            create_new_part_studio=create_new,
        )
    except OnshapeError as exc:
        log.warning("stl_import_failed", step=exc.step, error=exc.message)
        raise

    log.info("stl_imported", create_new_part_studio=create_new)
    return ImportStlResult(
        document_name=document.name,
        document_id=document.id,
        workspace_id=document.default_workspace_id,
        blob_element_id=blob.id,
        url=client.document_url(document.id),
    )


__all__ = ["default_document_name", "import_stl"]
