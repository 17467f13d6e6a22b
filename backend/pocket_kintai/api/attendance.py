"""Attendance API: clock in/out for the current day plus history and summaries."""
from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from pocket_kintai.api.deps import AuthContext, get_auth_context, get_now
from pocket_kintai.api.envelope import success
from pocket_kintai.core.database import get_db
from pocket_kintai.schemas.attendance import ClockInRequest, ClockOutRequest
from pocket_kintai.services.attendance import AttendanceService

router = APIRouter(prefix="/api/attendance", tags=["attendance"])


@router.post("/clock-in", status_code=status.HTTP_201_CREATED)
def clock_in(
    data: Optional[ClockInRequest] = None,
    ctx: AuthContext = Depends(get_auth_context),
    now: datetime = Depends(get_now),
    db: Session = Depends(get_db),
):
    record = AttendanceService(db).clock_in(ctx.user, data or ClockInRequest(), now)
    return success(record, "Clocked in")


@router.post("/clock-out")
def clock_out(
    data: Optional[ClockOutRequest] = None,
    ctx: AuthContext = Depends(get_auth_context),
    now: datetime = Depends(get_now),
    db: Session = Depends(get_db),
):
    record = AttendanceService(db).clock_out(ctx.user, data or ClockOutRequest(), now)
    return success(record, "Clocked out")


@router.get("/today")
def today_status(
    ctx: AuthContext = Depends(get_auth_context),
    now: datetime = Depends(get_now),
    db: Session = Depends(get_db),
):
    return success(AttendanceService(db).today(ctx.user, now))


@router.get("/records")
def list_records(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    ctx: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    return success(AttendanceService(db).records(ctx.user, start_date, end_date, page, limit))


@router.get("/summary")
def summary(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    ctx: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    return success(AttendanceService(db).summary(ctx.user, start_date, end_date))
