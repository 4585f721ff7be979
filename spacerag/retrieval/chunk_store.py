"""
Per-space persistence of document chunks and their embedding vectors.
Each document is written as one unit: its chunk texts and vectors are
index-aligned and never visible separately.
"""

import uuid
import threading
from dataclasses import dataclass, field, asdict, replace
from datetime import datetime
from typing import Dict, List, Optional
from spacerag.core.logger import logger
from spacerag.core.exception import InputError, NotFoundError
from spacerag.ingestion.chunker import merge_chunks
from spacerag.retrieval.storage import save_snapshot, load_snapshot


@dataclass
class StoredDocument:
    document_id: str
    space_id: str
    title: str
    chunk_texts: List[str]
    chunk_vectors: List[List[float]]
    chunk_overlap: int = 0
    visible: bool = True
    created_at: str = field(default_factory=lambda: datetime.utcnow().isoformat())

    @property
    def text(self) -> str:
        """Whole document text rebuilt from its overlapping chunks."""
        return merge_chunks(self.chunk_texts, self.chunk_overlap)

    @property
    def dimension(self) -> int:
        return len(self.chunk_vectors[0]) if self.chunk_vectors else 0

    def copy(self) -> "StoredDocument":
        return replace(
            self,
            chunk_texts=list(self.chunk_texts),
            chunk_vectors=[list(v) for v in self.chunk_vectors],
        )


class ChunkStore:
    """
    Thread-safe document/chunk store keyed by space id.

    With `persist_path` set, the whole store is snapshotted to JSON after
    every mutation and reloaded on construction.
    """

    def __init__(self, persist_path: Optional[str] = None):
        self.persist_path = persist_path
        self._lock = threading.Lock()
        self._documents: Dict[str, StoredDocument] = {}

        if persist_path:
            payload = load_snapshot(persist_path) or {"documents": []}
            for raw in payload["documents"]:
                doc = StoredDocument(**raw)
                self._documents[doc.document_id] = doc
            logger.info(f"ChunkStore loaded {len(self._documents)} documents")

    def _commit(self, documents: Dict[str, StoredDocument]):
        # Snapshot first so a failed write leaves the in-memory view untouched
        if self.persist_path:
            save_snapshot(
                self.persist_path,
                {"documents": [asdict(d) for d in documents.values()]},
            )
        self._documents = documents

    def _space_dimension(self, space_id: str) -> Optional[int]:
        for doc in self._documents.values():
            if doc.space_id == space_id:
                return doc.dimension
        return None

    def _require(self, document_id: str) -> StoredDocument:
        doc = self._documents.get(document_id)
        if doc is None:
            raise NotFoundError(f"Document not found: {document_id}")
        return doc

    def append(
        self,
        space_id: str,
        title: str,
        chunk_texts: List[str],
        chunk_vectors: List[List[float]],
        chunk_overlap: int = 0,
    ) -> StoredDocument:
        if not space_id:
            raise InputError("space_id is required")
        if not title or not title.strip():
            raise InputError("Document title is required")
        if not chunk_texts or not chunk_vectors:
            raise InputError("A document needs at least one chunk and one vector")
        if len(chunk_texts) != len(chunk_vectors):
            raise InputError(
                f"Chunk/vector length mismatch: {len(chunk_texts)} texts, {len(chunk_vectors)} vectors"
            )

        dims = {len(v) for v in chunk_vectors}
        if len(dims) != 1 or 0 in dims:
            raise InputError("All chunk vectors must be non-empty and share one dimension")
        dim = dims.pop()

        doc = StoredDocument(
            document_id=str(uuid.uuid4()),
            space_id=space_id,
            title=title.strip(),
            chunk_texts=[str(t) for t in chunk_texts],
            chunk_vectors=[[float(x) for x in v] for v in chunk_vectors],
            chunk_overlap=chunk_overlap,
        )

        with self._lock:
            existing = self._space_dimension(space_id)
            if existing is not None and existing != dim:
                raise InputError(
                    f"Vector dimension {dim} does not match space dimension {existing}"
                )

            documents = dict(self._documents)
            documents[doc.document_id] = doc
            self._commit(documents)

        logger.info(f"Space {space_id}: stored '{doc.title}' with {len(chunk_texts)} chunks")
        return doc.copy()

    def get(self, document_id: str) -> StoredDocument:
        with self._lock:
            return self._require(document_id).copy()

    def fetch_all(self, space_id: str, include_hidden: bool = False) -> List[StoredDocument]:
        """
        Documents of a space in insertion order.

        Hidden documents are left out unless `include_hidden` is set; they do
        not take part in retrieval.
        """
        with self._lock:
            return [
                doc.copy()
                for doc in self._documents.values()
                if doc.space_id == space_id and (include_hidden or doc.visible)
            ]

    def delete_document(self, document_id: str) -> StoredDocument:
        with self._lock:
            doc = self._require(document_id)
            documents = dict(self._documents)
            del documents[document_id]
            self._commit(documents)

        logger.info(f"Deleted document {document_id} from space {doc.space_id}")
        return doc

    def set_visibility(self, document_id: str, visible: bool) -> StoredDocument:
        with self._lock:
            doc = replace(self._require(document_id), visible=bool(visible))
            documents = dict(self._documents)
            documents[document_id] = doc
            self._commit(documents)

        logger.info(f"Document {document_id} visible={doc.visible}")
        return doc.copy()

    def delete_space(self, space_id: str) -> int:
        with self._lock:
            documents = {
                doc_id: doc
                for doc_id, doc in self._documents.items()
                if doc.space_id != space_id
            }
            removed = len(self._documents) - len(documents)
            if removed:
                self._commit(documents)

        logger.info(f"Space {space_id}: deleted {removed} documents")
        return removed

    def dimension(self, space_id: str) -> Optional[int]:
        with self._lock:
            return self._space_dimension(space_id)
