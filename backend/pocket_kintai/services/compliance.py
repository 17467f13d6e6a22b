"""Monthly attendance arithmetic: working hours, overtime, night/holiday work,
break compliance and paid-leave attainment.

Everything here works on rows that were already fetched, so it can be unit
tested without a database. Rules:

- Overtime = max(0, hours - 8) per day, summed over the month.
- More than 45 overtime hours in a month is "excessive".
- Night work is any time inside 22:00-05:00 (next day).
- Holiday work is any attendance on a Saturday or Sunday.
- Paid-leave target is 5 days.
- A day has an insufficient break when the recorded break is shorter than
  45 min for >6h or 60 min for >8h. Records without a break duration fall
  back to the notes marker (settings.BREAK_SHORT_MARKER).
"""
import calendar
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from pocket_kintai.models.leave import LeaveType

STANDARD_WORKING_HOURS = 8.0
EXCESSIVE_OVERTIME_HOURS = 45.0
PAID_LEAVE_TARGET_DAYS = 5
TOP_N = 10

NIGHT_START = time(22, 0)
NIGHT_END = time(5, 0)

# (worked more than N hours, minimum break in minutes), strictest first
BREAK_RULES = ((8.0, 60), (6.0, 45))


# ── Periods ──────────────────────────────────────────────────────────

def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    """First instant and last instant of a calendar month."""
    last_day = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1)
    end = datetime(year, month, last_day, 23, 59, 59, 999999)
    return start, end


def period_dict(year: int, month: int) -> dict:
    start, end = month_bounds(year, month)
    return {
        "year": year,
        "month": month,
        "startDate": start.date().isoformat(),
        "endDate": end.date().isoformat(),
    }


# ── Per-record rules ─────────────────────────────────────────────────

def working_hours(clock_in: Optional[datetime], clock_out: Optional[datetime]) -> float:
    if not clock_in or not clock_out:
        return 0.0
    return (clock_out - clock_in).total_seconds() / 3600.0


def overtime_hours(hours: float) -> float:
    return max(0.0, hours - STANDARD_WORKING_HOURS)


def is_holiday(day: date) -> bool:
    return day.weekday() >= 5


def night_hours(clock_in: Optional[datetime], clock_out: Optional[datetime]) -> float:
    """Hours of [clock_in, clock_out] falling inside any 22:00-05:00 window."""
    if not clock_in or not clock_out or clock_out <= clock_in:
        return 0.0

    total = 0.0
    # The window that opened the evening before clock-in may still be running
    day = clock_in.date() - timedelta(days=1)
    while day <= clock_out.date():
        window_start = datetime.combine(day, NIGHT_START)
        window_end = datetime.combine(day + timedelta(days=1), NIGHT_END)
        overlap_start = max(clock_in, window_start)
        overlap_end = min(clock_out, window_end)
        if overlap_end > overlap_start:
            total += (overlap_end - overlap_start).total_seconds() / 3600.0
        day += timedelta(days=1)
    return total


def required_break_minutes(hours: float) -> int:
    for threshold, minutes in BREAK_RULES:
        if hours > threshold:
            return minutes
    return 0


def has_insufficient_break(
    hours: float,
    break_minutes: Optional[int],
    notes: Optional[str],
    marker: str,
) -> bool:
    if break_minutes is not None:
        return break_minutes < required_break_minutes(hours)
    return bool(marker and notes and marker in notes)


def leave_days(start: date, end: date) -> int:
    return abs((end - start).days) + 1


def empty_leave_counts() -> Dict[str, int]:
    return {t.value: 0 for t in LeaveType}


def leave_count_by_type(leaves: Iterable) -> Dict[str, int]:
    counts = empty_leave_counts()
    for lr in leaves:
        counts[lr.leave_type] = counts.get(lr.leave_type, 0) + leave_days(lr.start_date, lr.end_date)
    return counts


def percent(numerator: float, denominator: float) -> float:
    if not denominator:
        return 0.0
    return numerator / denominator * 100.0


# ── Per-user monthly stats ───────────────────────────────────────────

@dataclass
class UserMonthStats:
    user_id: int
    name: str
    email: str
    role: str
    working_days: int = 0
    working_hours: float = 0.0
    overtime_hours: float = 0.0
    excess_days: int = 0
    holiday_work_days: int = 0
    holiday_work_hours: float = 0.0
    night_work_days: int = 0
    night_work_hours: float = 0.0
    insufficient_break_days: int = 0
    paid_leave_days: int = 0
    daily_hours: List[dict] = field(default_factory=list)

    @property
    def break_compliance_rate(self) -> float:
        return percent(self.working_days - self.insufficient_break_days, self.working_days)

    @property
    def paid_leave_rate(self) -> float:
        return min(100.0, percent(self.paid_leave_days, PAID_LEAVE_TARGET_DAYS))

    def identity(self) -> dict:
        return {
            "userId": self.user_id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
        }


def compute_user_stats(user, records: Iterable, leaves: Iterable, marker: str) -> UserMonthStats:
    """Aggregate one user's attendance records and approved leaves for a month."""
    stats = UserMonthStats(user_id=user.id, name=user.name, email=user.email, role=user.role)

    for r in records:
        stats.working_days += 1
        hours = working_hours(r.clock_in_time, r.clock_out_time)
        stats.working_hours += hours
        if r.clock_out_time:
            stats.daily_hours.append({"date": r.date.isoformat(), "hours": hours})

        ot = overtime_hours(hours)
        if ot > 0:
            stats.overtime_hours += ot
            stats.excess_days += 1

        if is_holiday(r.date):
            stats.holiday_work_days += 1
            stats.holiday_work_hours += hours

        nh = night_hours(r.clock_in_time, r.clock_out_time)
        if nh > 0:
            stats.night_work_days += 1
            stats.night_work_hours += nh

        if has_insufficient_break(hours, r.break_minutes, r.notes, marker):
            stats.insufficient_break_days += 1

    for lr in leaves:
        if lr.leave_type == LeaveType.PAID.value:
            stats.paid_leave_days += leave_days(lr.start_date, lr.end_date)

    return stats


def _top(stats: List[UserMonthStats], key, reverse: bool = True, keep=None) -> List[UserMonthStats]:
    candidates = [s for s in stats if (keep(s) if keep else key(s) > 0)]
    return sorted(candidates, key=key, reverse=reverse)[:TOP_N]


def _r(value: float, digits: int = 2) -> float:
    return round(value, digits)


# ── Company compliance report ────────────────────────────────────────

def build_compliance_report(stats: List[UserMonthStats]) -> dict:
    """Assemble companySummary + complianceReport from per-user stats."""
    total_users = len(stats)
    active_users = sum(1 for s in stats if s.working_days > 0)

    # Overtime
    total_overtime = sum(s.overtime_hours for s in stats)
    excessive = [s for s in stats if s.overtime_hours > EXCESSIVE_OVERTIME_HOURS]
    overtime_status = {
        "totalOvertimeHours": _r(total_overtime),
        "averageOvertimeHours": _r(total_overtime / total_users if total_users else 0.0),
        "excessiveOvertimeCount": len(excessive),
        "excessiveOvertimeRate": _r(percent(len(excessive), total_users), 1),
        "topOvertimeUsers": [
            {**s.identity(), "overtimeHours": _r(s.overtime_hours), "excessDays": s.excess_days}
            for s in _top(stats, key=lambda s: s.overtime_hours)
        ],
    }

    # Break time
    total_days = sum(s.working_days for s in stats)
    short_break_days = sum(s.insufficient_break_days for s in stats)
    break_status = {
        "totalWorkingDays": total_days,
        "insufficientBreakDays": short_break_days,
        "breakComplianceRate": _r(percent(total_days - short_break_days, total_days), 1),
        "insufficientBreakUsers": [
            {
                **s.identity(),
                "workingDays": s.working_days,
                "insufficientBreakDays": s.insufficient_break_days,
                "breakComplianceRate": _r(s.break_compliance_rate, 1),
            }
            for s in _top(stats, key=lambda s: s.insufficient_break_days)
        ],
    }

    # Holiday work
    holiday_users = [s for s in stats if s.holiday_work_days > 0]
    holiday_status = {
        "totalHolidayWorkDays": sum(s.holiday_work_days for s in stats),
        "totalHolidayWorkHours": _r(sum(s.holiday_work_hours for s in stats)),
        "holidayWorkUsers": len(holiday_users),
        "holidayWorkRate": _r(percent(len(holiday_users), total_users), 1),
        "topHolidayWorkUsers": [
            {
                **s.identity(),
                "holidayWorkDays": s.holiday_work_days,
                "holidayWorkHours": _r(s.holiday_work_hours),
            }
            for s in _top(
                stats,
                key=lambda s: (s.holiday_work_hours, s.holiday_work_days),
                keep=lambda s: s.holiday_work_days > 0,
            )
        ],
    }

    # Night work
    night_users = [s for s in stats if s.night_work_days > 0]
    night_status = {
        "totalNightWorkDays": sum(s.night_work_days for s in stats),
        "totalNightWorkHours": _r(sum(s.night_work_hours for s in stats)),
        "nightWorkUsers": len(night_users),
        "nightWorkRate": _r(percent(len(night_users), total_users), 1),
        "topNightWorkUsers": [
            {
                **s.identity(),
                "nightWorkDays": s.night_work_days,
                "nightWorkHours": _r(s.night_work_hours),
            }
            for s in _top(stats, key=lambda s: s.night_work_hours)
        ],
    }

    # Paid leave
    total_paid = sum(s.paid_leave_days for s in stats)
    achieved = [s for s in stats if s.paid_leave_days >= PAID_LEAVE_TARGET_DAYS]
    paid_leave_status = {
        "totalPaidLeaveDays": total_paid,
        "averagePaidLeaveDays": _r(total_paid / total_users if total_users else 0.0),
        "targetAchievedUsers": len(achieved),
        "targetAchievedRate": _r(percent(len(achieved), total_users), 1),
        "overallPaidLeaveRate": _r(
            min(100.0, percent(total_paid, total_users * PAID_LEAVE_TARGET_DAYS)), 1
        ),
        "lowPaidLeaveUsers": [
            {
                **s.identity(),
                "paidLeaveDays": s.paid_leave_days,
                "paidLeaveTarget": PAID_LEAVE_TARGET_DAYS,
                "remainingDays": PAID_LEAVE_TARGET_DAYS - s.paid_leave_days,
                "paidLeaveRate": _r(s.paid_leave_rate, 1),
            }
            for s in _top(
                stats,
                key=lambda s: (s.paid_leave_days, s.user_id),
                reverse=False,
                keep=lambda s: s.paid_leave_days < PAID_LEAVE_TARGET_DAYS,
            )
        ],
    }

    return {
        "companySummary": {"totalUsers": total_users, "activeUsers": active_users},
        "complianceReport": {
            "overtimeStatus": overtime_status,
            "breakTimeStatus": break_status,
            "holidayWorkStatus": holiday_status,
            "nightWorkStatus": night_status,
            "paidLeaveStatus": paid_leave_status,
        },
    }
