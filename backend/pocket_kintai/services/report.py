import csv
import io
import logging
from collections import defaultdict
from datetime import MAXYEAR, MINYEAR, date
from typing import Dict, List, Optional, Tuple

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from pocket_kintai.api.deps import AuthContext
from pocket_kintai.core.config import settings
from pocket_kintai.core.errors import ForbiddenError, NotFoundError, ValidationFailedError
from pocket_kintai.models.attendance import AttendanceRecord
from pocket_kintai.models.leave import LeaveRequest, LeaveStatus
from pocket_kintai.models.user import User, UserRole
from pocket_kintai.schemas.serializers import attendance_to_dict, leave_to_dict
from pocket_kintai.services.compliance import (
    build_compliance_report,
    compute_user_stats,
    empty_leave_counts,
    leave_count_by_type,
    month_bounds,
    period_dict,
    working_hours,
)

logger = logging.getLogger(__name__)

EXPORT_TYPES = ("attendance", "leave")
ATTENDANCE_CSV_HEADER = ["Date", "Clock In", "Clock Out", "Working Hours", "Notes"]
LEAVE_CSV_HEADER = ["Start Date", "End Date", "Leave Type", "Reason", "Status", "Comment"]


def validate_period(year: Optional[int], month: Optional[int]) -> Tuple[int, int]:
    if not year or not month:
        raise ValidationFailedError("Year and month are required")
    if not MINYEAR <= year <= MAXYEAR:
        raise ValidationFailedError(f"Year must be between {MINYEAR} and {MAXYEAR}")
    if not 1 <= month <= 12:
        raise ValidationFailedError("Month must be between 1 and 12")
    return year, month


class ReportService:
    """Monthly per-user, department, compliance and CSV reports."""

    def __init__(self, db: Session):
        self.db = db
        self.marker = settings.BREAK_SHORT_MARKER

    # ── Queries ──────────────────────────────────────────────────────

    def _scoped_users(self, ctx: AuthContext) -> List[User]:
        query = self.db.query(User).filter(User.role != UserRole.SUPER_ADMIN.value)
        if ctx.company_id is not None:
            query = query.filter(User.company_id == ctx.company_id)
        return query.order_by(User.id).all()

    def _records(self, first: date, last: date, user_ids: List[int]) -> List[AttendanceRecord]:
        if not user_ids:
            return []
        return (
            self.db.query(AttendanceRecord)
            .filter(
                AttendanceRecord.user_id.in_(user_ids),
                AttendanceRecord.date >= first,
                AttendanceRecord.date <= last,
            )
            .order_by(AttendanceRecord.date.asc())
            .all()
        )

    def _leaves(
        self, first: date, last: date, user_ids: List[int], approved_only: bool = True
    ) -> List[LeaveRequest]:
        if not user_ids:
            return []
        query = self.db.query(LeaveRequest).filter(
            LeaveRequest.user_id.in_(user_ids),
            or_(
                and_(LeaveRequest.start_date >= first, LeaveRequest.start_date <= last),
                and_(LeaveRequest.end_date >= first, LeaveRequest.end_date <= last),
            ),
        )
        if approved_only:
            query = query.filter(LeaveRequest.status == LeaveStatus.APPROVED.value)
        return query.order_by(LeaveRequest.start_date.asc()).all()

    def _target_user(self, ctx: AuthContext, user_id: int) -> User:
        if not ctx.is_admin and user_id != ctx.user_id:
            raise ForbiddenError("You do not have permission to access another user's report")
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user or (ctx.company_id is not None and user.company_id != ctx.company_id):
            raise NotFoundError("User not found")
        return user

    def _company_month(self, ctx: AuthContext, first: date, last: date):
        """Scoped users plus their month of records and approved leaves, keyed by user id."""
        users = self._scoped_users(ctx)
        user_ids = [u.id for u in users]
        records_by_user: Dict[int, list] = defaultdict(list)
        for r in self._records(first, last, user_ids):
            records_by_user[r.user_id].append(r)
        leaves_by_user: Dict[int, list] = defaultdict(list)
        for lr in self._leaves(first, last, user_ids):
            leaves_by_user[lr.user_id].append(lr)
        return users, records_by_user, leaves_by_user

    @staticmethod
    def _month_dates(year: int, month: int) -> Tuple[date, date]:
        start, end = month_bounds(year, month)
        return start.date(), end.date()

    # ── Reports ──────────────────────────────────────────────────────

    def user_report(self, ctx: AuthContext, user_id: int, year: int, month: int) -> dict:
        year, month = validate_period(year, month)
        user = self._target_user(ctx, user_id)
        first, last = self._month_dates(year, month)

        records = self._records(first, last, [user.id])
        leaves = self._leaves(first, last, [user.id])
        stats = compute_user_stats(user, records, leaves, self.marker)
        counts = leave_count_by_type(leaves)

        return {
            "user": {"id": user.id, "name": user.name, "email": user.email},
            "period": period_dict(year, month),
            "attendance": {
                "totalWorkingDays": stats.working_days,
                "totalWorkingHours": stats.working_hours,
                "averageWorkingHours": (
                    stats.working_hours / stats.working_days if stats.working_days else 0
                ),
                "dailyWorkingHours": stats.daily_hours,
                "records": [attendance_to_dict(r) for r in records],
            },
            "leave": {
                "totalLeaveDays": sum(counts.values()),
                "leaveCountByType": counts,
                "requests": [leave_to_dict(lr) for lr in leaves],
            },
        }

    def department_report(self, ctx: AuthContext, year: int, month: int) -> dict:
        year, month = validate_period(year, month)
        first, last = self._month_dates(year, month)

        users, records_by_user, leaves_by_user = self._company_month(ctx, first, last)

        user_reports = []
        summary_counts = empty_leave_counts()
        total_days = 0
        total_hours = 0.0
        for u in users:
            records = records_by_user[u.id]
            leaves = leaves_by_user[u.id]
            stats = compute_user_stats(u, records, leaves, self.marker)
            counts = leave_count_by_type(leaves)
            for key, value in counts.items():
                summary_counts[key] = summary_counts.get(key, 0) + value
            total_days += stats.working_days
            total_hours += stats.working_hours

            user_reports.append({
                "user": {"id": u.id, "name": u.name, "email": u.email, "role": u.role},
                "attendance": {
                    "totalWorkingDays": stats.working_days,
                    "totalWorkingHours": stats.working_hours,
                    "records": [attendance_to_dict(r) for r in records],
                },
                "leave": {
                    "totalLeaveDays": sum(counts.values()),
                    "leaveCountByType": counts,
                    "requests": [leave_to_dict(lr) for lr in leaves],
                },
            })

        return {
            "period": period_dict(year, month),
            "departmentSummary": {
                "totalUsers": len(users),
                "totalWorkingDays": total_days,
                "totalWorkingHours": total_hours,
                "averageWorkingHoursPerUser": total_hours / len(users) if users else 0,
                "totalLeaveDays": sum(summary_counts.values()),
                "leaveCountByType": summary_counts,
            },
            "userReports": user_reports,
        }

    def compliance_report(self, ctx: AuthContext, year: int, month: int) -> dict:
        year, month = validate_period(year, month)
        first, last = self._month_dates(year, month)

        users, records_by_user, leaves_by_user = self._company_month(ctx, first, last)

        stats = [
            compute_user_stats(u, records_by_user[u.id], leaves_by_user[u.id], self.marker)
            for u in users
        ]
        report = build_compliance_report(stats)
        logger.info(
            "Compliance report %04d-%02d for company %s: %d users, %d excessive overtime",
            year, month, ctx.company_id, len(users),
            report["complianceReport"]["overtimeStatus"]["excessiveOvertimeCount"],
        )
        return {"period": period_dict(year, month), **report}

    # ── CSV export ───────────────────────────────────────────────────

    def export_csv(
        self, ctx: AuthContext, user_id: int, year: int, month: int, export_type: str
    ) -> Tuple[str, str]:
        """Return (filename, csv text) for one user's month."""
        year, month = validate_period(year, month)
        if export_type not in EXPORT_TYPES:
            raise ValidationFailedError("Type must be either 'attendance' or 'leave'")
        user = self._target_user(ctx, user_id)
        first, last = self._month_dates(year, month)

        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        if export_type == "attendance":
            writer.writerow(ATTENDANCE_CSV_HEADER)
            for r in self._records(first, last, [user.id]):
                hours = ""
                if r.clock_in_time and r.clock_out_time:
                    hours = f"{working_hours(r.clock_in_time, r.clock_out_time):.2f}"
                writer.writerow([
                    r.date.isoformat(),
                    r.clock_in_time.strftime("%H:%M:%S") if r.clock_in_time else "",
                    r.clock_out_time.strftime("%H:%M:%S") if r.clock_out_time else "",
                    hours,
                    r.notes or "",
                ])
        else:
            writer.writerow(LEAVE_CSV_HEADER)
            for lr in self._leaves(first, last, [user.id], approved_only=False):
                writer.writerow([
                    lr.start_date.isoformat(),
                    lr.end_date.isoformat(),
                    lr.leave_type,
                    lr.reason,
                    lr.status,
                    lr.comment or "",
                ])

        filename = f"{export_type}_{user.id}_{year}_{month}.csv"
        return filename, buf.getvalue()
