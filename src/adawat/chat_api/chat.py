from __future__ import annotations

import logging
from typing import AsyncIterator, List, Optional

from .models import Message
from .ollama_client import OllamaApiClient

logger = logging.getLogger(__name__)


class Chat:
    """A conversation held against an :class:`OllamaApiClient`.

    ``messages`` is the running history. Each :meth:`send` appends the user
    message before streaming and the full assistant reply once the stream has
    completed.
    """

    def __init__(self, client: OllamaApiClient, model: Optional[str] = None):
        self.client = client
        self.model = model or client.selected_model
        self.messages: List[Message] = []

    async def send(self, message: str) -> AsyncIterator[str]:
        """Stream the reply to ``message`` one fragment at a time.

        Raises ``ValueError`` before touching the history when neither the chat
        nor its client names a model; that is a caller error, not an Ollama one.
        Errors from the stream propagate as the client's ``OllamaError`` types.
        """
        if not self.model:
            raise ValueError("Chat has no model and the client has no selected model")
        self.messages.append(Message(role="user", content=message))
        payload = [m.to_ollama() for m in self.messages]

        parts: list[str] = []
        async for fragment in self.client.chat_stream(self.model, payload):
            parts.append(fragment)
            yield fragment

        self.messages.append(Message(role="assistant", content="".join(parts)))
        logger.debug(
            "[chat] model=%s turns=%d reply_chars=%d",
            self.model,
            len(self.messages),
            len(self.messages[-1].content or ""),
        )
