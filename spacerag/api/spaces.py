"""
Space, member and chat endpoints.
Chats can be shared with other users through their member list.
Deleting a space also removes its documents and chats.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from spacerag.api.deps import ServiceContainer, get_container
from spacerag.core.exception import NotFoundError
from spacerag.core.monitor import track_latency

router = APIRouter()


class CreateSpaceRequest(BaseModel):
    name: str
    owner_id: str


class MemberRequest(BaseModel):
    member_id: str


class CreateChatRequest(BaseModel):
    owner_id: str
    name: str


class SpaceResponse(BaseModel):
    space_id: str
    name: str
    owner_id: str
    members: List[str]
    created_at: str


class ChatResponse(BaseModel):
    chat_id: str
    space_id: str
    owner_id: str
    name: str
    members: List[str]
    messages: List[dict]
    created_at: str


def _space(space) -> SpaceResponse:
    return SpaceResponse(
        space_id=space.space_id,
        name=space.name,
        owner_id=space.owner_id,
        members=list(space.members),
        created_at=space.created_at,
    )


def _chat(chat) -> ChatResponse:
    return ChatResponse(
        chat_id=chat.chat_id,
        space_id=chat.space_id,
        owner_id=chat.owner_id,
        name=chat.name,
        members=list(chat.members),
        messages=list(chat.messages),
        created_at=chat.created_at,
    )


@router.post("/spaces", response_model=SpaceResponse, status_code=201)
@track_latency
async def create_space(body: CreateSpaceRequest, container: ServiceContainer = Depends(get_container)):
    return _space(container.spaces.create_space(body.name, body.owner_id))


@router.get("/spaces", response_model=List[SpaceResponse])
async def list_spaces(
    member_id: Optional[str] = Query(None, description="Only spaces this user belongs to"),
    container: ServiceContainer = Depends(get_container),
):
    return [_space(s) for s in container.spaces.list_spaces(member_id)]


@router.get("/spaces/{space_id}", response_model=SpaceResponse)
async def get_space(space_id: str, container: ServiceContainer = Depends(get_container)):
    return _space(container.spaces.get_space(space_id))


@router.delete("/spaces/{space_id}")
@track_latency
async def delete_space(space_id: str, container: ServiceContainer = Depends(get_container)):
    chats_deleted = container.spaces.delete_space(space_id)
    documents_deleted = container.store.delete_space(space_id)
    return {
        "message": f"Space {space_id} deleted",
        "documents_deleted": documents_deleted,
        "chats_deleted": chats_deleted,
    }


@router.post("/spaces/{space_id}/members", response_model=SpaceResponse)
async def add_member(space_id: str, body: MemberRequest, container: ServiceContainer = Depends(get_container)):
    return _space(container.spaces.add_member(space_id, body.member_id))


@router.delete("/spaces/{space_id}/members/{member_id}", response_model=SpaceResponse)
async def remove_member(space_id: str, member_id: str, container: ServiceContainer = Depends(get_container)):
    return _space(container.spaces.remove_member(space_id, member_id))


@router.post("/spaces/{space_id}/chats", response_model=ChatResponse, status_code=201)
async def create_chat(space_id: str, body: CreateChatRequest, container: ServiceContainer = Depends(get_container)):
    return _chat(container.spaces.create_chat(space_id, body.owner_id, body.name))


@router.get("/spaces/{space_id}/chats", response_model=List[ChatResponse])
async def list_chats(
    space_id: str,
    member_id: Optional[str] = Query(None, description="Only chats shared with this user"),
    container: ServiceContainer = Depends(get_container),
):
    return [_chat(c) for c in container.spaces.list_chats(space_id, member_id)]


def _space_chat(container: ServiceContainer, space_id: str, chat_id: str):
    chat = container.spaces.get_chat(chat_id)
    if chat.space_id != space_id:
        raise NotFoundError(f"Chat {chat_id} not found in space {space_id}")
    return chat


@router.post("/spaces/{space_id}/chats/{chat_id}/members", response_model=ChatResponse)
async def add_chat_member(
    space_id: str, chat_id: str, body: MemberRequest, container: ServiceContainer = Depends(get_container)
):
    _space_chat(container, space_id, chat_id)
    return _chat(container.spaces.add_chat_member(chat_id, body.member_id))


@router.delete("/spaces/{space_id}/chats/{chat_id}/members/{member_id}", response_model=ChatResponse)
async def remove_chat_member(
    space_id: str, chat_id: str, member_id: str, container: ServiceContainer = Depends(get_container)
):
    _space_chat(container, space_id, chat_id)
    return _chat(container.spaces.remove_chat_member(chat_id, member_id))
