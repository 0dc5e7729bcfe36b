import uuid
from pydantic import BaseModel, EmailStr, Field, model_validator

from app.models.user import Role, Gender, MembershipPlan


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    full_name: str = Field(min_length=1, max_length=100)
    role: Role
    age: int = Field(ge=3, le=120)
    gender: Gender
    instructor: uuid.UUID | None = None
    membership_plan: MembershipPlan | None = None

    @model_validator(mode="after")
    def _student_fields(self):
        # students must pick a plan and an instructor; instructors have neither
        if self.role == Role.STUDENT:
            if self.membership_plan is None:
                raise ValueError("membership_plan is required for students")
            if self.instructor is None:
                raise ValueError("instructor is required for students")
        else:
            self.membership_plan = None
            self.instructor = None
        return self


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"


class QrVerifyRequest(BaseModel):
    token: str = Field(..., min_length=1)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=128)
