import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.exam import ExamStatus
from app.models.user import BeltLevel
from app.schemas.user import UserSummary, StudentSummary


class EligibilityRequirements(BaseModel):
    minimum_belt: BeltLevel
    minimum_training_months: int = Field(..., ge=0)

    @field_validator("minimum_belt")
    @classmethod
    def _not_black(cls, v: BeltLevel) -> BeltLevel:
        if v == BeltLevel.BLACK:
            raise ValueError("minimum_belt cannot be black")
        return v


# every field is optional here so a missing field reaches the service,
# which answers with the single "All fields are required" validation error
class ExamCreateRequest(BaseModel):
    exam_name: str | None = None
    exam_date: datetime | None = None
    max_registrants: int | None = Field(default=None, ge=1)
    target_belt: BeltLevel | None = None
    eligibility_requirements: EligibilityRequirements | None = None

    @field_validator("target_belt")
    @classmethod
    def _not_white(cls, v: BeltLevel | None) -> BeltLevel | None:
        if v == BeltLevel.WHITE:
            raise ValueError("target_belt cannot be white")
        return v


class ExamResultItem(BaseModel):
    student: uuid.UUID
    passed: bool = False
    notes: str | None = None


class ExamResultsRequest(BaseModel):
    results: list[ExamResultItem]


class ExamStatusUpdateRequest(BaseModel):
    status: ExamStatus


class ExamResultResponse(BaseModel):
    student_id: uuid.UUID
    passed: bool
    notes: str | None
    graded_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ExamResponse(BaseModel):
    id: uuid.UUID
    exam_name: str = Field(validation_alias="name")
    instructor: UserSummary
    exam_date: datetime
    max_registrants: int
    registrants: list[StudentSummary]
    target_belt: BeltLevel
    eligibility_requirements: EligibilityRequirements
    status: ExamStatus
    results: list[ExamResultResponse]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
