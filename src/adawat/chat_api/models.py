from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class Message(BaseModel):
    role: str  # system | user | assistant | tool
    content: Optional[str] = None
    images: Optional[List[str]] = None  # base64 encoded

    def to_ollama(self) -> dict:
        return self.model_dump(exclude_none=True)


class ChatRequest(BaseModel):
    message: Optional[str] = None
    model: Optional[str] = Field(
        None, description="Model to use; falls back to the server default."
    )
    history: List[Message] = Field(default_factory=list)


class ChatResponse(BaseModel):
    response: str
    history: List[Message]
