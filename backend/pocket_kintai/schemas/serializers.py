"""ORM row -> camelCase JSON dict. Passwords and verification tokens never leave here."""
from pocket_kintai.models.attendance import AttendanceRecord
from pocket_kintai.models.company import Company
from pocket_kintai.models.leave import LeaveRequest
from pocket_kintai.models.user import User


def _iso(value):
    return value.isoformat() if value else None


def user_to_dict(u: User) -> dict:
    return {
        "id": u.id,
        "email": u.email,
        "name": u.name,
        "role": u.role,
        "companyId": u.company_id,
        "isEmailVerified": bool(u.is_email_verified),
        "createdAt": _iso(u.created_at),
        "updatedAt": _iso(u.updated_at),
    }


def user_brief(u: User) -> dict:
    return {"id": u.id, "name": u.name, "email": u.email}


def attendance_to_dict(r: AttendanceRecord) -> dict:
    return {
        "id": r.id,
        "userId": r.user_id,
        "date": r.date.isoformat(),
        "clockInTime": _iso(r.clock_in_time),
        "clockOutTime": _iso(r.clock_out_time),
        "location": r.location,
        "notes": r.notes,
        "breakMinutes": r.break_minutes,
        "createdAt": _iso(r.created_at),
        "updatedAt": _iso(r.updated_at),
    }


def leave_to_dict(lr: LeaveRequest, include_user: bool = False) -> dict:
    data = {
        "id": lr.id,
        "userId": lr.user_id,
        "startDate": lr.start_date.isoformat(),
        "endDate": lr.end_date.isoformat(),
        "leaveType": lr.leave_type,
        "reason": lr.reason,
        "status": lr.status,
        "comment": lr.comment,
        "createdAt": _iso(lr.created_at),
        "updatedAt": _iso(lr.updated_at),
    }
    if include_user and lr.user is not None:
        data["user"] = user_brief(lr.user)
    return data


def company_to_dict(c: Company) -> dict:
    return {
        "id": c.id,
        "publicId": c.public_id,
        "name": c.name,
        "logoUrl": c.logo_url,
        "settings": c.settings or {},
        "createdAt": _iso(c.created_at),
        "updatedAt": _iso(c.updated_at),
    }
