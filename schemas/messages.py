"""Inbound chat and email activity schemas."""
from typing import Optional

from pydantic import BaseModel


class ChatMessage(BaseModel):
    phone_number: Optional[str] = None
    timestamp: Optional[str] = None
    direction: str = "received"
    text: Optional[str] = None
    message_id: Optional[str] = None

    @property
    def is_sent(self) -> bool:
        return self.direction == "sent"


class EmailEvent(BaseModel):
    email: str
    timestamp: Optional[str] = None
    direction: str = "received"

    @property
    def is_sent(self) -> bool:
        return self.direction == "sent"
