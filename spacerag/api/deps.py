"""
Service wiring for the HTTP layer. Routes depend on `get_container`, which
tests replace through `app.dependency_overrides`.
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from spacerag.core.config import Settings, settings
from spacerag.core.logger import logger
from spacerag.agents.rag_agent import RAGConfig, RAGOrchestrator
from spacerag.generation.llm import LLMClient
from spacerag.ingestion.chunker import TextChunker
from spacerag.ingestion.embedder import SentenceTransformerEmbedder
from spacerag.ingestion.pipeline import IngestionPipeline
from spacerag.retrieval.chunk_store import ChunkStore
from spacerag.retrieval.space_store import SpaceRegistry


@dataclass
class ServiceContainer:
    store: ChunkStore
    spaces: SpaceRegistry
    pipeline: IngestionPipeline
    orchestrator: RAGOrchestrator


def build_container(config: Settings) -> ServiceContainer:
    store = ChunkStore(persist_path=os.path.join(config.STORE_DIR, "chunks.json"))
    spaces = SpaceRegistry(persist_path=os.path.join(config.STORE_DIR, "spaces.json"))

    embedder = SentenceTransformerEmbedder(config.EMBEDDING_MODEL)
    llm = LLMClient(
        api_url=config.LLM_API_URL,
        api_key=config.LLM_API_KEY,
        model=config.LLM_MODEL,
        timeout=config.LLM_TIMEOUT,
        temperature=config.LLM_TEMPERATURE,
        max_tokens=config.LLM_MAX_TOKENS,
    )

    pipeline = IngestionPipeline(
        embedder=embedder,
        store=store,
        chunker=TextChunker(config.CHUNK_SIZE, config.CHUNK_OVERLAP),
    )
    orchestrator = RAGOrchestrator(
        embedder=embedder,
        llm=llm,
        store=store,
        config=RAGConfig(
            top_k=config.TOP_K,
            sample_question_count=config.SAMPLE_QUESTION_COUNT,
            max_corpus_chars=config.MAX_CORPUS_CHARS,
            index_backend=config.INDEX_BACKEND,
        ),
    )

    logger.info(
        f"Services ready ({config.ENVIRONMENT}, store: {config.STORE_DIR}, "
        f"embedding dim: {embedder.dimension})"
    )
    return ServiceContainer(store=store, spaces=spaces, pipeline=pipeline, orchestrator=orchestrator)


@lru_cache(maxsize=1)
def get_container() -> ServiceContainer:
    return build_container(settings)
