"""
Prompt assembly for grounded answering and whole-corpus instructions
"""

from typing import List, Sequence, Union

CONTENT_LABEL = "Content: "

SYSTEM_PROMPT = (
    "You are a course assistant for a shared study space. "
    "Answer the student's question using the provided context when it is relevant. "
    "Be concise and factual. If the context does not contain the answer, say so "
    "instead of guessing."
)


def build_context(hits: Sequence) -> str:
    """
    Ranked chunk texts, each labelled and separated by a blank line.
    Empty when nothing was retrieved.
    """
    return "\n\n".join(f"{CONTENT_LABEL}{hit.text}" for hit in hits)


def build_grounded_message(prompt: str, context: str) -> str:
    if not context:
        return prompt
    return f"Context:\n{context}\n\nQuestion: {prompt}"


def join_corpus(content: Union[str, Sequence[str]], max_chars: int = 0) -> str:
    """Join document texts; truncate to `max_chars` when it is positive."""
    if isinstance(content, str):
        corpus = content
    else:
        corpus = "\n\n".join(c for c in content if c)

    if max_chars > 0 and len(corpus) > max_chars:
        corpus = corpus[:max_chars]
    return corpus


def build_sample_questions_prompt(content: Union[str, List[str]], count: int = 3, max_chars: int = 0) -> str:
    corpus = join_corpus(content, max_chars)

    return f"""
Below is material uploaded to a study space.

Material:
{corpus}

Write {count} short questions a student could ask about this material.
Put each question on its own line. Do not add answers or any other text.
"""


def build_summary_prompt(content: Union[str, List[str]], max_chars: int = 0) -> str:
    corpus = join_corpus(content, max_chars)

    return f"""
Summarize the following material for a student.
Cover the main ideas in a few short paragraphs and keep key terms.

Material:
{corpus}

Summary:
"""


def build_quiz_prompt(content: Union[str, List[str]], num_questions: int = 5, max_chars: int = 0) -> str:
    corpus = join_corpus(content, max_chars)

    return f"""
Create a multiple-choice quiz from the following material.

Rules:
- Write exactly {num_questions} questions
- Give four options labelled A-D for each question
- Mark the correct option after each question as "Answer: <letter>"
- Only ask about facts stated in the material

Material:
{corpus}

Quiz:
"""
