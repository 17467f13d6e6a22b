from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from pocket_kintai.api.deps import AuthContext, get_auth_context, require_admin
from pocket_kintai.api.envelope import success
from pocket_kintai.core.database import get_db
from pocket_kintai.schemas.leave import (
    LeaveCreateRequest,
    LeaveStatusUpdateRequest,
    LeaveUpdateRequest,
)
from pocket_kintai.services.leave import LeaveService

router = APIRouter(prefix="/api/leave", tags=["leave"])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_leave(
    data: LeaveCreateRequest,
    ctx: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    return success(LeaveService(db).create(ctx, data), "Leave request submitted")


@router.get("")
def list_leaves(
    status_filter: Optional[Literal["PENDING", "APPROVED", "REJECTED"]] = Query(None, alias="status"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    ctx: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    return success(
        LeaveService(db).list_leaves(ctx, status_filter, start_date, end_date, page, limit)
    )


@router.get("/{leave_id}")
def get_leave(
    leave_id: int,
    ctx: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    return success(LeaveService(db).get(ctx, leave_id))


@router.put("/{leave_id}")
def update_leave(
    leave_id: int,
    data: LeaveUpdateRequest,
    ctx: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    return success(LeaveService(db).update(ctx, leave_id, data), "Leave request updated")


@router.put("/{leave_id}/status")
def update_leave_status(
    leave_id: int,
    data: LeaveStatusUpdateRequest,
    ctx: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return success(LeaveService(db).update_status(ctx, leave_id, data), "Leave status updated")
