from typing import Optional
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from .user import AuthorRead

class CommentBase(BaseModel):
    content: str = Field(..., min_length=1, max_length=1000)

class CommentCreate(CommentBase):
    pass

class CommentRead(CommentBase):
    id: str = Field(validation_alias='comment_id')
    post_id: str
    author: AuthorRead
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
