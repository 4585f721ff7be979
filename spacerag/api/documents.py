"""
Document ingestion and management endpoints.
Ingest runs chunk -> embed -> store; deletion and visibility act on the
chunk store only.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel
from spacerag.api.deps import ServiceContainer, get_container
from spacerag.core.exception import InputError
from spacerag.core.logger import logger
from spacerag.core.monitor import track_latency
from spacerag.ingestion.pdf_loader import get_pdf_metadata

router = APIRouter()


class IngestTextRequest(BaseModel):
    title: str
    text: str
    split: bool = True


class VisibilityRequest(BaseModel):
    visible: bool


class DocumentResponse(BaseModel):
    """Response model for document endpoints."""
    document_id: str
    space_id: str
    title: str
    num_chunks: int
    visible: bool
    created_at: str
    metadata: Optional[dict] = None


def _document(doc, metadata: Optional[dict] = None) -> DocumentResponse:
    return DocumentResponse(
        document_id=doc.document_id,
        space_id=doc.space_id,
        title=doc.title,
        num_chunks=len(doc.chunk_texts),
        visible=doc.visible,
        created_at=doc.created_at,
        metadata=metadata,
    )


@router.post("/spaces/{space_id}/documents", response_model=DocumentResponse, status_code=201)
@track_latency
async def ingest_text(space_id: str, body: IngestTextRequest, container: ServiceContainer = Depends(get_container)):
    container.spaces.get_space(space_id)
    doc = await run_in_threadpool(container.pipeline.ingest, space_id, body.title, body.text, body.split)
    return _document(doc)


@router.post("/spaces/{space_id}/documents/upload", response_model=DocumentResponse, status_code=201)
@track_latency
async def upload_pdf(
    space_id: str,
    file: UploadFile = File(...),
    title: Optional[str] = Query(None, description="Document title (defaults to the file name)"),
    container: ServiceContainer = Depends(get_container),
):
    """
    Upload a PDF, extract its text and index it in the space.
    The uploaded bytes are not kept.
    """
    container.spaces.get_space(space_id)
    logger.info(f"Received file upload: {file.filename}")

    file_bytes = await file.read()
    if not file_bytes:
        raise InputError("Uploaded file is empty")

    pdf_metadata = get_pdf_metadata(file_bytes)
    doc_title = title or pdf_metadata.get("title") or file.filename

    doc = await run_in_threadpool(container.pipeline.ingest_pdf, space_id, doc_title, file_bytes)
    return _document(doc, metadata={"pages": pdf_metadata.get("page_count"), "filename": file.filename})


@router.get("/spaces/{space_id}/documents", response_model=List[DocumentResponse])
async def list_documents(
    space_id: str,
    include_hidden: bool = Query(True, description="Include documents hidden from retrieval"),
    container: ServiceContainer = Depends(get_container),
):
    container.spaces.get_space(space_id)
    return [_document(d) for d in container.store.fetch_all(space_id, include_hidden=include_hidden)]


@router.delete("/documents/{document_id}")
async def delete_document(document_id: str, container: ServiceContainer = Depends(get_container)):
    doc = container.store.delete_document(document_id)
    return {"message": f"Document {document_id} deleted", "space_id": doc.space_id}


@router.patch("/documents/{document_id}/visibility", response_model=DocumentResponse)
async def set_visibility(document_id: str, body: VisibilityRequest, container: ServiceContainer = Depends(get_container)):
    return _document(container.store.set_visibility(document_id, body.visible))
