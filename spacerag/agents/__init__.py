"""
Answering orchestration for space question answering.
Provides the grounded-answer / sample-question flow and its result types.
"""

from spacerag.agents.rag_agent import (
    RAGOrchestrator,
    RAGConfig,
    QueryRequest,
    GroundedAnswer,
    SampleQuestions,
    parse_sample_questions,
)

__all__ = [
    "RAGOrchestrator",
    "RAGConfig",
    "QueryRequest",
    "GroundedAnswer",
    "SampleQuestions",
    "parse_sample_questions",
]
