from pocket_kintai.models.company import Company
from pocket_kintai.models.user import User, UserRole, ADMIN_ROLES
from pocket_kintai.models.attendance import AttendanceRecord
from pocket_kintai.models.leave import LeaveRequest, LeaveType, LeaveStatus

__all__ = [
    "Company",
    "User",
    "UserRole",
    "ADMIN_ROLES",
    "AttendanceRecord",
    "LeaveRequest",
    "LeaveType",
    "LeaveStatus",
]
