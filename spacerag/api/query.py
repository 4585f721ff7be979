from typing import Optional
from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel
from spacerag.api.deps import ServiceContainer, get_container
from spacerag.agents.rag_agent import SampleQuestions
from spacerag.core.exception import NotFoundError
from spacerag.core.monitor import track_latency

router = APIRouter()


class QueryBody(BaseModel):
    prompt: str = ""
    chat_id: Optional[str] = None


class SummaryBody(BaseModel):
    document_id: Optional[str] = None


class QuizBody(BaseModel):
    num_questions: int = 5
    document_id: Optional[str] = None


@router.post("/spaces/{space_id}/query")
@track_latency
async def query_space(space_id: str, body: QueryBody, container: ServiceContainer = Depends(get_container)):
    container.spaces.get_space(space_id)

    chat = None
    if body.chat_id:
        chat = container.spaces.get_chat(body.chat_id)
        if chat.space_id != space_id:
            raise NotFoundError(f"Chat {body.chat_id} not found in space {space_id}")

    result = await run_in_threadpool(container.orchestrator.answer, space_id, body.prompt)

    if isinstance(result, SampleQuestions):
        return {"sampleQuestions": result.sample_questions}

    if chat is not None:
        container.spaces.append_message(chat.chat_id, "user", body.prompt)
        container.spaces.append_message(chat.chat_id, "assistant", result.response)

    return {
        "contextSummary": result.context_summary,
        "response": result.response,
        "sources": [
            {
                "document_id": hit.document_id,
                "title": hit.title,
                "chunk_index": hit.chunk_index,
                "score": round(hit.score, 4),
            }
            for hit in result.hits
        ],
    }


@router.post("/spaces/{space_id}/summary")
@track_latency
async def summarize_space(space_id: str, body: SummaryBody, container: ServiceContainer = Depends(get_container)):
    container.spaces.get_space(space_id)
    summary = await run_in_threadpool(container.orchestrator.summarize, space_id, body.document_id)
    return {"summary": summary}


@router.post("/spaces/{space_id}/quiz")
@track_latency
async def quiz_space(space_id: str, body: QuizBody, container: ServiceContainer = Depends(get_container)):
    container.spaces.get_space(space_id)
    quiz = await run_in_threadpool(
        container.orchestrator.generate_quiz, space_id, body.num_questions, body.document_id
    )
    return {"quiz": quiz}
