"""
Spaces (named document collections with an owner and members) and the
chats held inside them. A chat is shared through its member list.
Plain bookkeeping: no permission rules here.
"""

import uuid
import threading
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Dict, List, Optional
from spacerag.core.logger import logger
from spacerag.core.exception import InputError, NotFoundError
from spacerag.retrieval.storage import save_snapshot, load_snapshot


def _now() -> str:
    return datetime.utcnow().isoformat()


@dataclass
class Space:
    space_id: str
    name: str
    owner_id: str
    members: List[str] = field(default_factory=list)
    created_at: str = field(default_factory=_now)


@dataclass
class Chat:
    chat_id: str
    space_id: str
    owner_id: str
    name: str
    members: List[str] = field(default_factory=list)
    messages: List[Dict[str, str]] = field(default_factory=list)
    created_at: str = field(default_factory=_now)


class SpaceRegistry:
    """
    Keeps spaces and their chats, optionally snapshotted to JSON.
    """

    def __init__(self, persist_path: Optional[str] = None):
        self.persist_path = persist_path
        self._lock = threading.Lock()
        self.spaces: Dict[str, Space] = {}
        self.chats: Dict[str, Chat] = {}

        if persist_path:
            payload = load_snapshot(persist_path) or {}
            for raw in payload.get("spaces", []):
                space = Space(**raw)
                self.spaces[space.space_id] = space
            for raw in payload.get("chats", []):
                chat = Chat(**raw)
                self.chats[chat.chat_id] = chat

        logger.info(f"SpaceRegistry initialized with {len(self.spaces)} spaces")

    def _save(self):
        if self.persist_path:
            save_snapshot(
                self.persist_path,
                {
                    "spaces": [asdict(s) for s in self.spaces.values()],
                    "chats": [asdict(c) for c in self.chats.values()],
                },
            )

    def _require_space(self, space_id: str) -> Space:
        space = self.spaces.get(space_id)
        if space is None:
            raise NotFoundError(f"Space not found: {space_id}")
        return space

    def _require_chat(self, chat_id: str) -> Chat:
        chat = self.chats.get(chat_id)
        if chat is None:
            raise NotFoundError(f"Chat not found: {chat_id}")
        return chat

    # ---------- Spaces ----------

    def create_space(self, name: str, owner_id: str, space_id: Optional[str] = None) -> Space:
        if not name or not name.strip():
            raise InputError("Space name is required")
        if not owner_id:
            raise InputError("Space owner is required")

        space = Space(
            space_id=space_id or str(uuid.uuid4()),
            name=name.strip(),
            owner_id=owner_id,
            members=[owner_id],
        )

        with self._lock:
            if space.space_id in self.spaces:
                raise InputError(f"Space already exists: {space.space_id}")
            self.spaces[space.space_id] = space
            self._save()

        logger.info(f"Created space {space.space_id} ({space.name})")
        return space

    def get_space(self, space_id: str) -> Space:
        with self._lock:
            return self._require_space(space_id)

    def list_spaces(self, member_id: Optional[str] = None) -> List[Space]:
        with self._lock:
            return [
                s for s in self.spaces.values()
                if member_id is None or member_id in s.members
            ]

    def add_member(self, space_id: str, member_id: str) -> Space:
        if not member_id:
            raise InputError("member_id is required")

        with self._lock:
            space = self._require_space(space_id)
            if member_id not in space.members:
                space.members.append(member_id)
                self._save()
        return space

    def remove_member(self, space_id: str, member_id: str) -> Space:
        with self._lock:
            space = self._require_space(space_id)
            if member_id in space.members:
                space.members.remove(member_id)
                self._save()
        return space

    def delete_space(self, space_id: str) -> int:
        """Delete a space and its chats. Returns the number of chats removed."""
        with self._lock:
            self._require_space(space_id)
            del self.spaces[space_id]

            chat_ids = [cid for cid, c in self.chats.items() if c.space_id == space_id]
            for cid in chat_ids:
                del self.chats[cid]
            self._save()

        logger.info(f"Deleted space {space_id} and {len(chat_ids)} chats")
        return len(chat_ids)

    # ---------- Chats ----------

    def create_chat(self, space_id: str, owner_id: str, name: str) -> Chat:
        if not name or not name.strip():
            raise InputError("Chat name is required")

        with self._lock:
            self._require_space(space_id)
            chat = Chat(
                chat_id=str(uuid.uuid4()),
                space_id=space_id,
                owner_id=owner_id,
                name=name.strip(),
                members=[owner_id],
            )
            self.chats[chat.chat_id] = chat
            self._save()
        return chat

    def get_chat(self, chat_id: str) -> Chat:
        with self._lock:
            return self._require_chat(chat_id)

    def list_chats(self, space_id: str, member_id: Optional[str] = None) -> List[Chat]:
        with self._lock:
            self._require_space(space_id)
            return [
                c for c in self.chats.values()
                if c.space_id == space_id and (member_id is None or member_id in c.members)
            ]

    def add_chat_member(self, chat_id: str, member_id: str) -> Chat:
        """Share a chat with another user. Adding an existing member is a no-op."""
        if not member_id:
            raise InputError("member_id is required")

        with self._lock:
            chat = self._require_chat(chat_id)
            if member_id not in chat.members:
                chat.members.append(member_id)
                self._save()
        return chat

    def remove_chat_member(self, chat_id: str, member_id: str) -> Chat:
        with self._lock:
            chat = self._require_chat(chat_id)
            if member_id == chat.owner_id:
                raise InputError("The chat owner cannot be removed")
            if member_id in chat.members:
                chat.members.remove(member_id)
                self._save()
        return chat

    def append_message(self, chat_id: str, role: str, content: str) -> Chat:
        with self._lock:
            chat = self._require_chat(chat_id)
            chat.messages.append({"role": role, "content": content})
            self._save()
        return chat
