from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime
from .enums import AnnouncementAudienceEnum, AnnouncementTypeEnum


class AnnouncementCreate(BaseModel):
    title: str = Field(..., min_length=5, max_length=200)
    content: str = Field(..., min_length=10, max_length=5000)
    type: AnnouncementTypeEnum = AnnouncementTypeEnum.GENERAL
    target_roles: List[AnnouncementAudienceEnum] = Field(
        default_factory=lambda: [AnnouncementAudienceEnum.ALL], min_length=1
    )
    expires_at: Optional[datetime] = None


class AnnouncementRead(AnnouncementCreate):
    id: str = Field(validation_alias='announcement_id')
    admin_id: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
