from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from .enums import ConnectionDecisionEnum, ConnectionRoleEnum, ConnectionStatusEnum
from .user import AuthorRead


class ConnectionCreate(BaseModel):
    # The requester is always the authenticated caller; only the target is sent.
    user_id: str
    message: Optional[str] = Field(None, max_length=500)


class ConnectionRespond(BaseModel):
    action: ConnectionDecisionEnum


class ConnectionRead(BaseModel):
    connection_id: str
    requester_id: str
    receiver_id: str
    status: ConnectionStatusEnum
    message: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ConnectionListItem(ConnectionRead):
    role: ConnectionRoleEnum
    # The other participant, when their profile still exists
    other_user: Optional[AuthorRead] = None


class ConnectionRequestResponse(BaseModel):
    connection_id: str
    created: bool
    message: str


class ConnectionRespondResponse(BaseModel):
    message: str
    connection: Optional[ConnectionRead] = None
