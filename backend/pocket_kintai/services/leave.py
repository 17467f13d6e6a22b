"""Leave requests: PENDING until an admin approves or rejects them, then frozen."""
import logging
from datetime import date
from typing import Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, joinedload

from pocket_kintai.api.deps import AuthContext
from pocket_kintai.api.envelope import pagination_dict
from pocket_kintai.core.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationFailedError,
)
from pocket_kintai.models.leave import LeaveRequest, LeaveStatus
from pocket_kintai.models.user import User
from pocket_kintai.schemas.leave import (
    LeaveCreateRequest,
    LeaveStatusUpdateRequest,
    LeaveUpdateRequest,
)
from pocket_kintai.schemas.serializers import leave_to_dict

logger = logging.getLogger(__name__)

DATE_ORDER_MESSAGE = "Start date must be on or before end date"


def _check_date_order(start: date, end: date) -> None:
    if start > end:
        raise ValidationFailedError(DATE_ORDER_MESSAGE)


class LeaveService:
    def __init__(self, db: Session):
        self.db = db

    def _get(self, ctx: AuthContext, leave_id: int) -> LeaveRequest:
        lr = (
            self.db.query(LeaveRequest)
            .options(joinedload(LeaveRequest.user))
            .filter(LeaveRequest.id == leave_id)
            .first()
        )
        # Another tenant's request is reported as missing
        if not lr or (ctx.company_id is not None and lr.user.company_id != ctx.company_id):
            raise NotFoundError("Leave request not found")
        return lr

    def create(self, ctx: AuthContext, data: LeaveCreateRequest) -> dict:
        _check_date_order(data.start_date, data.end_date)
        lr = LeaveRequest(
            user_id=ctx.user_id,
            start_date=data.start_date,
            end_date=data.end_date,
            leave_type=data.leave_type.value,
            reason=data.reason,
            status=LeaveStatus.PENDING.value,
        )
        self.db.add(lr)
        self.db.commit()
        self.db.refresh(lr)
        logger.info(
            "Leave request %s created by user %s (%s %s..%s)",
            lr.id, ctx.user_id, lr.leave_type, lr.start_date, lr.end_date,
        )
        return leave_to_dict(lr, include_user=True)

    def list_leaves(
        self,
        ctx: AuthContext,
        status: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        page: int = 1,
        limit: int = 10,
    ) -> dict:
        query = self.db.query(LeaveRequest).join(User, LeaveRequest.user_id == User.id)
        if not ctx.is_admin:
            query = query.filter(LeaveRequest.user_id == ctx.user_id)
        elif ctx.company_id is not None:
            query = query.filter(User.company_id == ctx.company_id)

        if status:
            query = query.filter(LeaveRequest.status == status)
        if start_date and end_date:
            query = query.filter(
                or_(
                    and_(LeaveRequest.start_date >= start_date, LeaveRequest.start_date <= end_date),
                    and_(LeaveRequest.end_date >= start_date, LeaveRequest.end_date <= end_date),
                )
            )

        total = query.count()
        rows = (
            query.options(joinedload(LeaveRequest.user))
            .order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return {
            "leaves": [leave_to_dict(lr, include_user=True) for lr in rows],
            "pagination": pagination_dict(page, limit, total),
        }

    def get(self, ctx: AuthContext, leave_id: int) -> dict:
        lr = self._get(ctx, leave_id)
        if lr.user_id != ctx.user_id and not ctx.is_admin:
            raise ForbiddenError("You do not have permission to view this leave request")
        return leave_to_dict(lr, include_user=True)

    def update(self, ctx: AuthContext, leave_id: int, data: LeaveUpdateRequest) -> dict:
        lr = self._get(ctx, leave_id)
        if lr.user_id != ctx.user_id:
            raise ForbiddenError("You can only update your own leave requests")
        if lr.status != LeaveStatus.PENDING.value:
            raise ConflictError("Only pending leave requests can be updated")

        start = data.start_date or lr.start_date
        end = data.end_date or lr.end_date
        _check_date_order(start, end)

        lr.start_date = start
        lr.end_date = end
        if data.leave_type is not None:
            lr.leave_type = data.leave_type.value
        if data.reason is not None:
            lr.reason = data.reason

        self.db.commit()
        self.db.refresh(lr)
        return leave_to_dict(lr, include_user=True)

    def update_status(self, ctx: AuthContext, leave_id: int, data: LeaveStatusUpdateRequest) -> dict:
        lr = self._get(ctx, leave_id)
        if lr.status != LeaveStatus.PENDING.value:
            raise ConflictError("Leave request has already been processed")

        lr.status = data.status
        lr.comment = data.comment
        self.db.commit()
        self.db.refresh(lr)

        logger.info(
            "Leave request %s %s by user %s", lr.id, lr.status.lower(), ctx.user_id
        )
        return leave_to_dict(lr, include_user=True)
