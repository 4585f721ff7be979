"""
RAG Orchestrator for space question answering.
Chooses between sample-question generation (empty prompt) and a grounded
answer (non-empty prompt) for one request. No state survives a request.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union
from spacerag.core.logger import logger
from spacerag.core.exception import InputError, NotFoundError
from spacerag.generation.llm import LLMClient
from spacerag.generation.prompt import (
    SYSTEM_PROMPT,
    build_context,
    build_grounded_message,
    build_quiz_prompt,
    build_sample_questions_prompt,
    build_summary_prompt,
)
from spacerag.ingestion.embedder import EmbeddingProvider
from spacerag.retrieval.chunk_store import ChunkStore, StoredDocument
from spacerag.retrieval.vector_store import RetrievalHit, build_index

# "1. ", "2) ", "(3) ", "4: ", "- ", "* ", "• "
_ENUMERATION = re.compile(r"^\s*(?:(?:\(?\d+[.):]|[-*•](?=\s))\s*)+")


@dataclass
class RAGConfig:
    """Configuration for RAG orchestrator."""
    top_k: int = 3
    sample_question_count: int = 3
    max_corpus_chars: int = 12000
    index_backend: str = "numpy"


@dataclass
class QueryRequest:
    space_id: str
    prompt: str = ""

    @classmethod
    def create(cls, space_id: Optional[str], prompt: Optional[str] = None) -> "QueryRequest":
        if not isinstance(space_id, str) or not space_id.strip():
            raise InputError("space_id is required")
        if prompt is not None and not isinstance(prompt, str):
            raise InputError("prompt must be a string")
        return cls(space_id=space_id.strip(), prompt=(prompt or "").strip())


@dataclass
class GroundedAnswer:
    context_summary: str
    response: str
    hits: List[RetrievalHit] = field(default_factory=list)


@dataclass
class SampleQuestions:
    sample_questions: List[str]


def parse_sample_questions(raw: str, limit: int = 3) -> List[str]:
    """
    One question per non-blank line with any leading enumeration removed.
    Returns at most `limit` questions; fewer if the model gave fewer.
    """
    questions = []
    for line in raw.splitlines():
        question = _ENUMERATION.sub("", line).strip()
        if not question:
            continue
        questions.append(question)
        if len(questions) >= limit:
            break
    return questions


class RAGOrchestrator:
    """
    Top-level answering flow over one space's stored chunks.
    Provider failures propagate unchanged; nothing is retried here.
    """

    def __init__(
        self,
        embedder: EmbeddingProvider,
        llm: LLMClient,
        store: ChunkStore,
        config: Optional[RAGConfig] = None,
    ):
        """
        Args:
            embedder: Embedding provider used for query vectors
            llm: Chat model client
            store: Chunk store holding the spaces' documents
            config: Optional RAG configuration
        """
        self.embedder = embedder
        self.llm = llm
        self.store = store
        self.config = config or RAGConfig()

    def _documents(self, space_id: str) -> List[StoredDocument]:
        documents = self.store.fetch_all(space_id)
        if not documents:
            raise NotFoundError(f"No corpus for collection {space_id}")
        return documents

    def _search(self, prompt: str, documents: Sequence[StoredDocument], k: int) -> List[RetrievalHit]:
        query_vector = self.embedder.embed(prompt)
        index = build_index(documents, backend=self.config.index_backend)
        hits = index.search(query_vector, k)
        logger.info(f"Retrieved {len(hits)} of {len(index)} chunks")
        return hits

    def retrieve(self, space_id: str, prompt: str, k: Optional[int] = None) -> List[RetrievalHit]:
        request = QueryRequest.create(space_id, prompt)
        if not request.prompt:
            raise InputError("prompt is required for retrieval")
        k = self.config.top_k if k is None else k
        return self._search(request.prompt, self._documents(request.space_id), k)

    def answer(self, space_id: str, prompt: Optional[str] = None) -> Union[GroundedAnswer, SampleQuestions]:
        request = QueryRequest.create(space_id, prompt)
        documents = self._documents(request.space_id)

        if not request.prompt:
            return self._sample_questions(documents)
        return self._grounded_answer(request.prompt, documents)

    def _sample_questions(self, documents: Sequence[StoredDocument]) -> SampleQuestions:
        count = self.config.sample_question_count
        instruction = build_sample_questions_prompt(
            [doc.text for doc in documents],
            count=count,
            max_chars=self.config.max_corpus_chars,
        )

        raw = self.llm.generate(instruction, system_prompt=SYSTEM_PROMPT)
        questions = parse_sample_questions(raw, limit=count)

        logger.info(f"Generated {len(questions)} sample questions from {len(documents)} documents")
        return SampleQuestions(sample_questions=questions)

    def _grounded_answer(self, prompt: str, documents: Sequence[StoredDocument]) -> GroundedAnswer:
        hits = self._search(prompt, documents, self.config.top_k)
        context = build_context(hits)

        raw = self.llm.generate(build_grounded_message(prompt, context), system_prompt=SYSTEM_PROMPT)

        logger.info(f"Answered prompt with {len(hits)} context chunks")
        return GroundedAnswer(context_summary=context, response=raw.strip(), hits=hits)

    def _corpus(self, space_id: str, document_id: Optional[str]) -> List[str]:
        if document_id:
            doc = self.store.get(document_id)
            if doc.space_id != space_id:
                raise NotFoundError(f"Document {document_id} not found in space {space_id}")
            return [doc.text]
        return [doc.text for doc in self._documents(space_id)]

    def summarize(self, space_id: str, document_id: Optional[str] = None) -> str:
        request = QueryRequest.create(space_id)
        corpus = self._corpus(request.space_id, document_id)

        instruction = build_summary_prompt(corpus, max_chars=self.config.max_corpus_chars)
        return self.llm.generate(instruction, system_prompt=SYSTEM_PROMPT).strip()

    def generate_quiz(self, space_id: str, num_questions: int = 5, document_id: Optional[str] = None) -> str:
        request = QueryRequest.create(space_id)
        if num_questions < 1:
            raise InputError("num_questions must be at least 1")
        corpus = self._corpus(request.space_id, document_id)

        instruction = build_quiz_prompt(corpus, num_questions=num_questions, max_chars=self.config.max_corpus_chars)
        return self.llm.generate(instruction, system_prompt=SYSTEM_PROMPT).strip()
