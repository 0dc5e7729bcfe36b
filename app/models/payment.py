import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Numeric, Uuid, Index, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.clock import utcnow
from app.db.base import Base
from app.models.user import MembershipPlan, User


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


class Payment(Base):
    """Membership fee record for one billing period of one student.

    - instructor_id: copied from the student when the payment is created
    - amount: fixed fee for membership_plan at creation time
    - paid_date: set together with status=paid by the pay action
    """

    __tablename__ = "payments"
    __table_args__ = (
        Index("ix_payments_student_id", "student_id"),
        Index("ix_payments_instructor_id", "instructor_id"),
        Index("ix_payments_status_due_date", "status", "due_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    student_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    instructor_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id"), nullable=True)

    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    due_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    status: Mapped[PaymentStatus] = mapped_column(
        SAEnum(PaymentStatus, name="payment_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=PaymentStatus.PENDING,
    )
    membership_plan: Mapped[MembershipPlan] = mapped_column(
        SAEnum(MembershipPlan, name="membership_plan", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    paid_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    student: Mapped[User] = relationship(User, foreign_keys=[student_id])
    instructor: Mapped[User | None] = relationship(User, foreign_keys=[instructor_id])
