from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from pocket_kintai.api.deps import AuthContext, require_admin
from pocket_kintai.api.envelope import success
from pocket_kintai.core.database import get_db
from pocket_kintai.core.security import get_current_user
from pocket_kintai.models.user import User
from pocket_kintai.schemas.serializers import user_to_dict
from pocket_kintai.schemas.user import (
    LoginRequest,
    PasswordChangeRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    ResendVerificationRequest,
    SetupRequest,
    VerifyEmailRequest,
)
from pocket_kintai.services.auth import AuthService

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/setup", status_code=status.HTTP_201_CREATED)
def setup(data: SetupRequest, db: Session = Depends(get_db)):
    """Create the first super admin on a fresh install."""
    return success(AuthService(db).setup(data), "Super admin created")


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    data: RegisterRequest,
    ctx: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return success(
        AuthService(db).register(ctx, data),
        "User registered. A verification email has been sent.",
    )


@router.post("/login")
def login(data: LoginRequest, db: Session = Depends(get_db)):
    return success(AuthService(db).login(data), "Logged in")


@router.post("/verify-email")
def verify_email(data: VerifyEmailRequest, db: Session = Depends(get_db)):
    user = AuthService(db).verify_email(data.token, data.user_id)
    return success({"user": user}, "Email verified")


@router.post("/resend-verification")
def resend_verification(data: ResendVerificationRequest, db: Session = Depends(get_db)):
    return success(message=AuthService(db).resend_verification(data.email))


@router.get("/me")
def me(current_user: User = Depends(get_current_user)):
    return success({"user": user_to_dict(current_user)})


@router.put("/profile")
def update_profile(
    data: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return success({"user": AuthService(db).update_profile(current_user, data)}, "Profile updated")


@router.put("/password")
def change_password(
    data: PasswordChangeRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    AuthService(db).change_password(current_user, data)
    return success(message="Password changed")
