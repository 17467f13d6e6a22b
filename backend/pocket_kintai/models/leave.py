from sqlalchemy import Column, Integer, String, DateTime, Date, ForeignKey, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from pocket_kintai.core.database import Base
import enum


class LeaveType(str, enum.Enum):
    PAID = "PAID"
    UNPAID = "UNPAID"
    SICK = "SICK"
    OTHER = "OTHER"


class LeaveStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class LeaveRequest(Base):
    """Time-off application. PENDING -> APPROVED | REJECTED, never back."""
    __tablename__ = "leave_requests"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=False, index=True)
    leave_type = Column(String, nullable=False)
    reason = Column(Text, nullable=False)

    status = Column(String, default=LeaveStatus.PENDING.value, nullable=False, index=True)
    comment = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="leave_requests")
