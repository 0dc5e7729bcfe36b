from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.models.user import Role, BeltLevel, MembershipPlan, Gender


# public summary used inside other responses (instructor, registrants, ...)
class UserSummary(BaseModel):
    id: UUID
    full_name: str
    email: EmailStr

    model_config = ConfigDict(from_attributes=True)


class StudentSummary(UserSummary):
    belt_level: BeltLevel


class UserResponse(BaseModel):
    id: UUID
    email: EmailStr
    full_name: str
    role: Role
    age: int
    gender: Gender
    profile_photo: str
    belt_level: BeltLevel
    membership_plan: MembershipPlan | None
    is_blocked: bool
    instructor_id: UUID | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfileResponse(UserResponse):
    instructor: UserSummary | None = None
    students: list[UserSummary] = []


# fields a user may change on their own profile
# role / password / blocked flag / belt / instructor are not editable here
class ProfileUpdateRequest(BaseModel):
    full_name: str | None = Field(default=None, min_length=1, max_length=100)
    age: int | None = Field(default=None, ge=3, le=120)
    gender: Gender | None = None
    membership_plan: MembershipPlan | None = None

    model_config = ConfigDict(extra="ignore")


class BeltUpdateRequest(BaseModel):
    belt_level: BeltLevel


class EmailRequest(BaseModel):
    subject: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)
