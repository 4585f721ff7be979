from typing import Optional
from ..core.logger import logger
from ..core.exception import InputError
from ..retrieval.chunk_store import ChunkStore, StoredDocument
from .chunker import TextChunker
from .embedder import EmbeddingProvider
from .pdf_loader import extract_pdf_text


class IngestionPipeline:
    """
    text -> chunks -> vectors -> one stored document.
    Nothing is written unless every chunk was embedded.
    """

    def __init__(
        self,
        embedder: EmbeddingProvider,
        store: ChunkStore,
        chunker: Optional[TextChunker] = None,
    ):
        self.embedder = embedder
        self.store = store
        self.chunker = chunker or TextChunker()

    def ingest(self, space_id: str, title: str, raw_text: str, split: bool = True) -> StoredDocument:
        """
        Args:
            space_id: Target space
            title: Document title
            raw_text: Extracted document text
            split: Chunk the text; when False the whole text is one chunk
        """
        if not space_id:
            raise InputError("space_id is required")
        if not title or not title.strip():
            raise InputError("Document title is required")
        if raw_text is None or not raw_text.strip():
            raise InputError("Document has no text to ingest")

        if split:
            chunks = self.chunker.split_text(raw_text)
            overlap = self.chunker.chunk_overlap
        else:
            chunks = [raw_text]
            overlap = 0

        vectors = self.embedder.embed_batch(chunks)

        doc = self.store.append(space_id, title, chunks, vectors, chunk_overlap=overlap)
        logger.info(f"Ingested '{title}' into space {space_id} ({len(chunks)} chunks)")
        return doc

    def ingest_pdf(self, space_id: str, title: str, pdf_bytes: bytes) -> StoredDocument:
        text = extract_pdf_text(pdf_bytes)
        if not text.strip():
            raise InputError(f"No text could be extracted from '{title}'")
        return self.ingest(space_id, title, text)
