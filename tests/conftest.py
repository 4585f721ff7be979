import re
import pytest
from fastapi.testclient import TestClient
from spacerag.agents.rag_agent import RAGOrchestrator
from spacerag.api.deps import ServiceContainer, get_container
from spacerag.core.exception import ProviderError
from spacerag.ingestion.chunker import TextChunker
from spacerag.ingestion.embedder import EmbeddingProvider
from spacerag.ingestion.pipeline import IngestionPipeline
from spacerag.main import app
from spacerag.retrieval.chunk_store import ChunkStore
from spacerag.retrieval.space_store import SpaceRegistry

VOCAB = [
    "paris", "capital", "france", "berlin", "germany", "rome", "italy",
    "cell", "mitochondria", "energy", "python", "language", "leave", "policy",
]


class KeywordEmbedder(EmbeddingProvider):
    """Deterministic bag-of-words vectors over a small vocabulary."""

    def __init__(self):
        self.calls = []

    def _encode(self, texts):
        self.calls.append(list(texts))
        vectors = []
        for text in texts:
            tokens = re.findall(r"[a-z]+", text.lower())
            vectors.append([float(tokens.count(word)) for word in VOCAB])
        return vectors


class FailingEmbedder(EmbeddingProvider):
    def _encode(self, texts):
        raise ProviderError("embedding quota exceeded")


class FakeLLM:
    def __init__(self, reply="Paris is the capital of France."):
        self.reply = reply
        self.error = None
        self.calls = []

    def generate(self, prompt, system_prompt=None):
        self.calls.append({"prompt": prompt, "system_prompt": system_prompt})
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def embedder():
    return KeywordEmbedder()


@pytest.fixture
def failing_embedder():
    return FailingEmbedder()


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def store():
    return ChunkStore()


@pytest.fixture
def pipeline(embedder, store):
    return IngestionPipeline(embedder=embedder, store=store, chunker=TextChunker(200, 40))


@pytest.fixture
def orchestrator(embedder, fake_llm, store):
    return RAGOrchestrator(embedder=embedder, llm=fake_llm, store=store)


@pytest.fixture
def container(store, pipeline, orchestrator):
    return ServiceContainer(
        store=store,
        spaces=SpaceRegistry(),
        pipeline=pipeline,
        orchestrator=orchestrator,
    )


@pytest.fixture
def client(container):
    app.dependency_overrides[get_container] = lambda: container
    yield TestClient(app)
    app.dependency_overrides.clear()
