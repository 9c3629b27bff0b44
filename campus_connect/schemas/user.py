from pydantic import BaseModel, ConfigDict, EmailStr, Field, computed_field, field_validator, model_validator
from typing import List, Optional
from datetime import datetime
from .enums import UserRoleEnum

# Profile fields shared by registration, updates and reads
class UserBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    department: Optional[str] = None
    bio: Optional[str] = Field(None, max_length=500)
    skills: Optional[List[str]] = None
    avatar_url: Optional[str] = None
    github_url: Optional[str] = None
    linkedin_url: Optional[str] = None
    leetcode_url: Optional[str] = None
    portfolio_url: Optional[str] = None
    # Students
    batch_year: Optional[int] = Field(None, ge=2000)
    # Alumni
    graduation_year: Optional[int] = Field(None, ge=2000)
    current_company: Optional[str] = None
    current_position: Optional[str] = None
    experience_years: Optional[int] = Field(None, ge=0)
    is_mentorship_available: Optional[bool] = None
    # Admins
    position: Optional[str] = None

# Properties to receive on registration
class UserCreate(UserBase):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
    role: UserRoleEnum = UserRoleEnum.STUDENT

    @model_validator(mode="after")
    def check_role_fields(self):
        if self.role == UserRoleEnum.STUDENT and self.batch_year is None:
            raise ValueError("batch_year is required for students")
        if self.role == UserRoleEnum.ALUMNI and self.graduation_year is None:
            raise ValueError("graduation_year is required for alumni")
        return self

# Properties to receive on profile update. Role, email and approval are not editable here.
class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    department: Optional[str] = None
    bio: Optional[str] = Field(None, max_length=500)
    skills: Optional[List[str]] = None
    avatar_url: Optional[str] = None
    github_url: Optional[str] = None
    linkedin_url: Optional[str] = None
    leetcode_url: Optional[str] = None
    portfolio_url: Optional[str] = None
    batch_year: Optional[int] = Field(None, ge=2000)
    graduation_year: Optional[int] = Field(None, ge=2000)
    current_company: Optional[str] = None
    current_position: Optional[str] = None
    experience_years: Optional[int] = Field(None, ge=0)
    is_mentorship_available: Optional[bool] = None
    position: Optional[str] = None

    # Omit the field to leave the name as it is; it cannot be cleared.
    @field_validator("name")
    @classmethod
    def name_not_null(cls, value):
        if value is None:
            raise ValueError("name cannot be null")
        return value

# Properties to return to client
class UserRead(UserBase):
    email: EmailStr
    role: UserRoleEnum
    is_approved: bool
    is_active: bool = True
    created_at: datetime
    updated_at: Optional[datetime] = None

    # Firestore documents carry the id as 'user_id'; it is exposed as 'id'.
    orm_user_id: str = Field(validation_alias='user_id', exclude=True)

    @computed_field # type: ignore[misc]
    @property
    def id(self) -> str:
        return self.orm_user_id

    model_config = ConfigDict(from_attributes=True)


class AuthorRead(BaseModel):
    id: str = Field(validation_alias='user_id')
    name: str
    role: Optional[UserRoleEnum] = None
    avatar_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

