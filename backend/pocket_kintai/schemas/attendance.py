from typing import Optional
from pydantic import Field
from pocket_kintai.schemas.base import CamelModel


class ClockInRequest(CamelModel):
    location: Optional[str] = None
    notes: Optional[str] = None


class ClockOutRequest(CamelModel):
    location: Optional[str] = None
    notes: Optional[str] = None
    break_minutes: Optional[int] = Field(None, ge=0, le=24 * 60)
