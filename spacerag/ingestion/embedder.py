from abc import ABC, abstractmethod
from typing import List
from ..core.logger import logger
from ..core.exception import InputError, ProviderError


class EmbeddingProvider(ABC):
    """
    Maps text to fixed-length float vectors.

    `embed_batch` exists only to cut call overhead; it must give the same
    vectors as calling `embed` per item.
    """

    @abstractmethod
    def _encode(self, texts: List[str]) -> List[List[float]]:
        pass

    def embed_batch(self, texts: List[str]) -> List[List[float]]:
        if not texts:
            raise InputError("No texts provided for embedding")

        vectors = self._encode(list(texts))

        if len(vectors) != len(texts):
            raise ProviderError(
                f"Embedding provider returned {len(vectors)} vectors for {len(texts)} texts"
            )
        if len({len(v) for v in vectors}) > 1:
            raise ProviderError("Embedding provider returned vectors of mixed dimension")

        return [[float(x) for x in v] for v in vectors]

    def embed(self, text: str) -> List[float]:
        return self.embed_batch([text])[0]


class SentenceTransformerEmbedder(EmbeddingProvider):
    def __init__(self, model_name: str = "sentence-transformers/all-MiniLM-L6-v2"):
        self.model_name = model_name
        self.model = None
        self._load_model()

    def _load_model(self):
        from sentence_transformers import SentenceTransformer

        logger.info(f"Loading embedding model: {self.model_name}")
        try:
            self.model = SentenceTransformer(self.model_name)
        except Exception as e:
            logger.exception("Embedding model load failed")
            raise ProviderError(e) from e

    @property
    def dimension(self) -> int:
        return self.model.get_sentence_embedding_dimension()

    def _encode(self, texts: List[str]) -> List[List[float]]:
        logger.info(f"Embedding {len(texts)} chunks")
        try:
            return self.model.encode(texts, show_progress_bar=False).tolist()
        except Exception as e:
            logger.exception("Embedding failed")
            raise ProviderError(e) from e
