"""Clock-in / clock-out and attendance history for the calling user."""
import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pocket_kintai.api.envelope import pagination_dict
from pocket_kintai.core.errors import ConflictError, NotFoundError, ValidationFailedError
from pocket_kintai.models.attendance import AttendanceRecord
from pocket_kintai.models.user import User
from pocket_kintai.schemas.attendance import ClockInRequest, ClockOutRequest
from pocket_kintai.schemas.serializers import attendance_to_dict
from pocket_kintai.services.compliance import working_hours

logger = logging.getLogger(__name__)

ALREADY_CLOCKED_IN = "Already clocked in today"


class AttendanceService:
    def __init__(self, db: Session):
        self.db = db

    def _today_record(self, user: User, today: date) -> Optional[AttendanceRecord]:
        return (
            self.db.query(AttendanceRecord)
            .filter(AttendanceRecord.user_id == user.id, AttendanceRecord.date == today)
            .first()
        )

    def clock_in(self, user: User, data: ClockInRequest, now: datetime) -> dict:
        today = now.date()
        if self._today_record(user, today):
            raise ConflictError(ALREADY_CLOCKED_IN)

        record = AttendanceRecord(
            user_id=user.id,
            date=today,
            clock_in_time=now,
            location=data.location,
            notes=data.notes,
        )
        self.db.add(record)
        try:
            self.db.commit()
        except IntegrityError:
            # A concurrent clock-in won the unique (user_id, date) race
            self.db.rollback()
            raise ConflictError(ALREADY_CLOCKED_IN)
        self.db.refresh(record)

        logger.info("User %s clocked in at %s", user.id, now.isoformat())
        return attendance_to_dict(record)

    def clock_out(self, user: User, data: ClockOutRequest, now: datetime) -> dict:
        record = self._today_record(user, now.date())
        if not record:
            raise NotFoundError("No attendance record found for today")
        if record.clock_out_time is not None:
            raise ConflictError("Already clocked out today")

        record.clock_out_time = now
        if data.location is not None:
            record.location = data.location
        if data.notes is not None:
            record.notes = data.notes
        if data.break_minutes is not None:
            record.break_minutes = data.break_minutes

        self.db.commit()
        self.db.refresh(record)

        logger.info("User %s clocked out at %s", user.id, now.isoformat())
        return attendance_to_dict(record)

    def today(self, user: User, now: datetime) -> dict:
        record = self._today_record(user, now.date())
        return {
            "isClockedIn": record is not None,
            "isClockedOut": bool(record and record.clock_out_time),
            "record": attendance_to_dict(record) if record else None,
        }

    def records(
        self,
        user: User,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        page: int = 1,
        limit: int = 10,
    ) -> dict:
        query = self.db.query(AttendanceRecord).filter(AttendanceRecord.user_id == user.id)
        if start_date and end_date:
            query = query.filter(
                AttendanceRecord.date >= start_date,
                AttendanceRecord.date <= end_date,
            )

        total = query.count()
        rows = (
            query.order_by(AttendanceRecord.date.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return {
            "records": [attendance_to_dict(r) for r in rows],
            "pagination": pagination_dict(page, limit, total),
        }

    def summary(self, user: User, start_date: Optional[date], end_date: Optional[date]) -> dict:
        """Hours over completed records between two dates, inclusive."""
        if not start_date or not end_date:
            raise ValidationFailedError("Start date and end date are required")

        rows = (
            self.db.query(AttendanceRecord)
            .filter(
                AttendanceRecord.user_id == user.id,
                AttendanceRecord.date >= start_date,
                AttendanceRecord.date <= end_date,
                AttendanceRecord.clock_out_time.isnot(None),
            )
            .order_by(AttendanceRecord.date.asc())
            .all()
        )

        daily = [
            {"date": r.date.isoformat(), "hours": working_hours(r.clock_in_time, r.clock_out_time)}
            for r in rows
        ]
        total_hours = sum(d["hours"] for d in daily)
        return {
            "totalWorkingHours": total_hours,
            "totalWorkingDays": len(daily),
            "averageWorkingHours": total_hours / len(daily) if daily else 0,
            "dailyWorkingHours": daily,
        }
