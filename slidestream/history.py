"""Chat-history collaborators.

The pipeline only needs ``fetch(conversation_id)``; these stores make the
service runnable without an external chat backend.
"""

import asyncio
import json
from pathlib import Path
from typing import Dict, Iterable, List, Protocol, runtime_checkable

from slidestream.logger import logger
from slidestream.schema import ChatMessage


@runtime_checkable
class ChatHistory(Protocol):
    async def fetch(self, conversation_id: str) -> List[ChatMessage]:
        ...


class InMemoryChatHistory:
    """Conversation store kept in process memory."""

    def __init__(self):
        self._conversations: Dict[str, List[ChatMessage]] = {}

    def add(self, conversation_id: str, messages: Iterable[ChatMessage | dict]) -> None:
        stored = self._conversations.setdefault(conversation_id, [])
        for message in messages:
            stored.append(message if isinstance(message, ChatMessage) else ChatMessage(**message))

    async def fetch(self, conversation_id: str) -> List[ChatMessage]:
        return list(self._conversations.get(conversation_id, []))


class JsonDirectoryChatHistory:
    """Reads ``<directory>/<conversation_id>.json`` files.

    Each file holds either a list of ``{"role", "content"}`` objects or an
    object with a ``messages`` list in chronological order.
    """

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def _path_for(self, conversation_id: str) -> Path:
        path = (self.directory / f"{conversation_id}.json").resolve()
        if path.parent != self.directory.resolve():
            raise ValueError(f"Invalid conversation id: {conversation_id!r}")
        return path

    def _load(self, conversation_id: str) -> List[ChatMessage]:
        path = self._path_for(conversation_id)
        if not path.exists():
            logger.warning(f"Conversation not found: {conversation_id}")
            return []
        data = json.loads(path.read_text(encoding="utf-8"))
        if isinstance(data, dict):
            data = data.get("messages", [])
        return [
            ChatMessage(role=str(item.get("role", "user")), content=str(item.get("content") or ""))
            for item in data
        ]

    async def fetch(self, conversation_id: str) -> List[ChatMessage]:
        return await asyncio.to_thread(self._load, conversation_id)
