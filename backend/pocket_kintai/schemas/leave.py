from datetime import date
from typing import Literal, Optional
from pydantic import field_validator
from pocket_kintai.models.leave import LeaveType
from pocket_kintai.schemas.base import CamelModel


class LeaveCreateRequest(CamelModel):
    start_date: date
    end_date: date
    leave_type: LeaveType
    reason: str

    @field_validator("reason")
    @classmethod
    def reason_required(cls, v: str) -> str:
        if not v:
            raise ValueError("Reason is required")
        return v


class LeaveUpdateRequest(CamelModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    leave_type: Optional[LeaveType] = None
    reason: Optional[str] = None

    @field_validator("reason")
    @classmethod
    def reason_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v:
            raise ValueError("Reason is required")
        return v


class LeaveStatusUpdateRequest(CamelModel):
    status: Literal["APPROVED", "REJECTED"]
    comment: Optional[str] = None
