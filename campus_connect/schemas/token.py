from pydantic import BaseModel
from typing import Optional
from .enums import UserRoleEnum

class Token(BaseModel):
    access_token: str
    token_type: str
    user_id: Optional[str] = None
    role: Optional[UserRoleEnum] = None
    is_approved: Optional[bool] = None
