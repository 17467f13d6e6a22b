"""
Database initialization script
Run this to create tables and seed a demo company with a few users
"""
from datetime import date, datetime, time, timedelta

from pocket_kintai.core.database import engine, Base, SessionLocal
from pocket_kintai.core.security import generate_public_company_id, get_password_hash, utcnow
from pocket_kintai.models import (
    AttendanceRecord,
    Company,
    LeaveRequest,
    LeaveStatus,
    LeaveType,
    User,
    UserRole,
)

DEMO_USERS = [
    # (email, name, role, password)
    ("superadmin@example.com", "スーパー管理者", UserRole.SUPER_ADMIN, "SuperAdmin123"),
    ("admin@example.com", "管理者 太郎", UserRole.ADMIN, "Admin123"),
    ("employee1@example.com", "社員 一郎", UserRole.EMPLOYEE, "employee123"),
    ("employee2@example.com", "社員 二郎", UserRole.EMPLOYEE, "employee123"),
]


def init_db():
    """Initialize database with tables"""
    print("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    print("✓ Tables created successfully")


def _seed_attendance(db, user: User, today: date):
    for days_ago, (start, end) in ((2, ((9, 0), (18, 0))), (1, ((9, 15), (18, 30)))):
        day = today - timedelta(days=days_ago)
        exists = db.query(AttendanceRecord).filter(
            AttendanceRecord.user_id == user.id, AttendanceRecord.date == day
        ).first()
        if exists:
            continue
        db.add(AttendanceRecord(
            user_id=user.id,
            date=day,
            clock_in_time=datetime.combine(day, time(*start)),
            clock_out_time=datetime.combine(day, time(*end)),
            location="オフィス",
            break_minutes=60,
        ))


def seed_data():
    """Seed a demo company, one user per role and a little history"""
    db = SessionLocal()

    try:
        print("\nSeeding initial data...")

        company = db.query(Company).filter(Company.name == "デモ株式会社").first()
        if not company:
            company = Company(name="デモ株式会社", settings={})
            db.add(company)
            db.flush()
            company.public_id = generate_public_company_id(company.id)
            print(f"✓ Demo company created (public id: {company.public_id})")

        users = {}
        for email, name, role, password in DEMO_USERS:
            user = db.query(User).filter(User.email == email).first()
            if not user:
                user = User(
                    email=email,
                    name=name,
                    hashed_password=get_password_hash(password),
                    role=role.value,
                    company_id=None if role == UserRole.SUPER_ADMIN else company.id,
                    is_email_verified=True,
                )
                db.add(user)
                db.flush()
                print(f"✓ {role.value} created ({email} / {password})")
            users[email] = user

        today = utcnow().date()
        employee = users["employee1@example.com"]
        _seed_attendance(db, employee, today)

        if not db.query(LeaveRequest).filter(LeaveRequest.user_id == employee.id).first():
            db.add(LeaveRequest(
                user_id=employee.id,
                start_date=today + timedelta(days=7),
                end_date=today + timedelta(days=8),
                leave_type=LeaveType.PAID.value,
                reason="家族旅行",
                status=LeaveStatus.PENDING.value,
            ))
            print("✓ Sample leave request created")

        db.commit()
        print("\n✓ Database seeded successfully!")

    except Exception as e:
        print(f"\n✗ Error seeding data: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    print("=" * 60)
    print("Pocket Kintai - Database Initialization")
    print("=" * 60)

    init_db()
    seed_data()

    print("\n" + "=" * 60)
    print("Initialization complete!")
    print("=" * 60)
    print("\nYou can now access:")
    print("  - API: http://localhost:8000")
    print("  - API Docs: http://localhost:8000/docs")
    print("  - Frontend: http://localhost:3000")
    print("=" * 60)
