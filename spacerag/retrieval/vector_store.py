"""
Similarity index built per query from a space's stored chunks.
Nothing here is persisted; an index is a read-only view for one search.
"""

from dataclasses import dataclass
from typing import List, Sequence
import numpy as np
from ..core.logger import logger
from ..core.exception import InputError, ProviderError
from .chunk_store import StoredDocument


@dataclass
class RetrievalHit:
    text: str
    score: float
    document_id: str
    title: str
    chunk_index: int


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """dot(a, b) / (|a| * |b|), defined as 0.0 when either norm is zero."""
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)

    norm = np.linalg.norm(a) * np.linalg.norm(b)
    if norm == 0:
        return 0.0
    return float(np.dot(a, b) / norm)


def _normalize_rows(matrix: np.ndarray) -> np.ndarray:
    norms = np.linalg.norm(matrix, axis=1, keepdims=True)
    # zero rows stay zero so their similarity comes out as 0
    return np.divide(matrix, norms, out=np.zeros_like(matrix), where=norms > 0)


class CosineIndex:
    """
    Brute-force cosine search, O(N*D) per query.
    Ties keep the original (document, chunk) order.
    """

    def __init__(self, texts: List[str], vectors: np.ndarray, refs: List[tuple]):
        self.texts = texts
        self.vectors = vectors
        self.refs = refs  # (document_id, title, chunk_index) per row

    @classmethod
    def _flatten(cls, documents: Sequence[StoredDocument]):
        texts, vectors, refs = [], [], []
        for doc in documents:
            for i, (text, vector) in enumerate(zip(doc.chunk_texts, doc.chunk_vectors)):
                texts.append(text)
                vectors.append(vector)
                refs.append((doc.document_id, doc.title, i))
        return texts, vectors, refs

    @classmethod
    def build(cls, documents: Sequence[StoredDocument]) -> "CosineIndex":
        texts, vectors, refs = cls._flatten(documents)

        if vectors:
            if len({len(v) for v in vectors}) != 1:
                raise InputError("Chunk vectors in one index must share one dimension")
            matrix = np.asarray(vectors, dtype=np.float64)
        else:
            matrix = np.zeros((0, 0), dtype=np.float64)

        logger.info(f"Built cosine index with {len(texts)} chunks")
        return cls(texts, _normalize_rows(matrix), refs)

    def __len__(self) -> int:
        return len(self.texts)

    @property
    def dimension(self) -> int:
        return self.vectors.shape[1] if len(self) else 0

    def _query(self, query_vector: Sequence[float]) -> np.ndarray:
        query = np.asarray(query_vector, dtype=np.float64).reshape(-1)
        if query.shape[0] != self.dimension:
            raise ProviderError(
                f"Query vector dimension {query.shape[0]} does not match index dimension {self.dimension}"
            )
        norm = np.linalg.norm(query)
        return query / norm if norm > 0 else query

    def _hit(self, row: int, score: float) -> RetrievalHit:
        document_id, title, chunk_index = self.refs[row]
        return RetrievalHit(
            text=self.texts[row],
            score=float(score),
            document_id=document_id,
            title=title,
            chunk_index=chunk_index,
        )

    def search(self, query_vector: Sequence[float], k: int) -> List[RetrievalHit]:
        if len(self) == 0 or k <= 0:
            return []

        scores = self.vectors @ self._query(query_vector)
        order = np.argsort(-scores, kind="stable")[: min(k, len(self))]

        return [self._hit(int(row), scores[row]) for row in order]


class FaissCosineIndex(CosineIndex):
    """
    Same contract as CosineIndex, backed by a faiss flat inner-product
    index over L2-normalised vectors.
    """

    def __init__(self, texts, vectors, refs):
        super().__init__(texts, vectors, refs)
        self.index = None

        if len(texts):
            import faiss

            self.index = faiss.IndexFlatIP(self.dimension)
            self.index.add(self.vectors.astype("float32"))

    def search(self, query_vector: Sequence[float], k: int) -> List[RetrievalHit]:
        if self.index is None or k <= 0:
            return []

        k = min(k, len(self))
        query_np = self._query(query_vector).astype("float32").reshape(1, -1)
        distances, indices = self.index.search(query_np, k)

        found = [
            (float(score), int(row))
            for score, row in zip(distances[0], indices[0])
            if row != -1
        ]
        # faiss gives no ordering guarantee among equal scores
        found.sort(key=lambda item: (-item[0], item[1]))

        return [self._hit(row, score) for score, row in found]


INDEX_BACKENDS = {
    "numpy": CosineIndex,
    "faiss": FaissCosineIndex,
}


def build_index(documents: Sequence[StoredDocument], backend: str = "numpy") -> CosineIndex:
    index_cls = INDEX_BACKENDS.get(backend)
    if index_cls is None:
        raise InputError(f"Unknown index backend: {backend}")
    return index_cls.build(documents)
