import uuid
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.models.payment import PaymentStatus
from app.models.user import MembershipPlan
from app.schemas.user import UserSummary


class PaymentCreateRequest(BaseModel):
    student: uuid.UUID
    amount: Decimal | None = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    due_date: datetime
    membership_plan: MembershipPlan | None = None
    status: PaymentStatus = PaymentStatus.PENDING


class PaymentResponse(BaseModel):
    id: uuid.UUID
    student_id: uuid.UUID
    instructor_id: uuid.UUID | None
    amount: Decimal
    due_date: datetime
    status: PaymentStatus
    membership_plan: MembershipPlan
    paid_date: datetime | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class InstructorPaymentResponse(PaymentResponse):
    student: UserSummary


PaymentStatusFilter = Literal["all", "pending", "paid", "overdue"]


class ReminderRequest(BaseModel):
    subject: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)
