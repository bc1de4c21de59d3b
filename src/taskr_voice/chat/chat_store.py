# chat/chat_store.py

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from ..core.collection import OrderedCollection
from ..storage.gateway import CHAT_KEY, PersistenceGateway
from .chat_models import Author, ChatMessage, Role, new_message_id

logger = logging.getLogger(__name__)

WELCOME_TEMPLATE = "Hello! I am {name}. Press the mic to add a task, or ask me to list your tasks."


class ChatStore(OrderedCollection[ChatMessage]):
    """
    Append-only chat transcript (oldest first), persisted under CHAT_KEY.

    Messages are frozen once appended, so there is no update().
    An empty transcript is seeded with a single assistant welcome message.
    """

    key = CHAT_KEY
    insert_at_head = False

    def __init__(
        self,
        gateway: PersistenceGateway,
        *,
        assistant: Author,
        user: Author | None = None,
        load: bool = True,
    ) -> None:
        super().__init__(gateway)
        self.assistant = assistant
        self.user = user or Author(role=Role.USER, name="You")
        if load:
            self.load()

    def _decode(self, raw: dict[str, Any]) -> ChatMessage:
        return ChatMessage.from_dict(raw)

    def _on_loaded(self) -> None:
        if self._items:
            return
        welcome = ChatMessage(
            id=new_message_id(),
            text=WELCOME_TEMPLATE.format(name=self.assistant.name),
            created_at=datetime.now().astimezone(),
            author=self.assistant,
        )
        self._items.append(welcome)
        logger.debug("Chat seeded with welcome message id=%s", welcome.id)

    def add(self, text: str, author: Author) -> ChatMessage:
        message = ChatMessage(
            id=new_message_id(),
            text=text,
            created_at=datetime.now().astimezone(),
            author=author,
        )
        self.append(message)
        return message

    def add_user_message(self, text: str) -> ChatMessage:
        return self.add(text, self.user)

    def add_assistant_message(self, text: str) -> ChatMessage:
        return self.add(text, self.assistant)
