from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from typing import Annotated, Optional
from datetime import datetime
from .user import AuthorRead


class MessageCreate(BaseModel):
    content: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=2000)]


class MessageRead(BaseModel):
    id: str = Field(validation_alias='message_id')
    sender_id: str
    receiver_id: str
    content: str
    is_read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ConversationSummary(BaseModel):
    user: Optional[AuthorRead] = None
    user_id: str
    last_message: MessageRead
    unread_count: int
