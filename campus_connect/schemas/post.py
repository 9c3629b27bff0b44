from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime
from .user import AuthorRead


# Shared properties
class PostBase(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)
    image_url: Optional[str] = None

# Properties to receive on post creation
class PostCreate(PostBase):
    # author_id is set from the authenticated user in the endpoint
    pass

# Properties to receive on post update
class PostUpdate(BaseModel):
    content: Optional[str] = Field(None, min_length=1, max_length=5000)
    image_url: Optional[str] = None

    @field_validator("content")
    @classmethod
    def content_not_null(cls, value):
        if value is None:
            raise ValueError("content cannot be null")
        return value

# Properties to return to client
class PostRead(PostBase):
    id: str = Field(validation_alias='post_id')
    author: AuthorRead
    like_count: int = 0
    comment_count: int = 0
    liked_by_me: bool = False
    is_edited: bool = False
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
