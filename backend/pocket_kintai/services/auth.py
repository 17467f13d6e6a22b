"""Account lifecycle: first-run setup, registration, login, e-mail verification
and self-service profile/password changes."""
import logging
from datetime import timedelta

from sqlalchemy.orm import Session

from pocket_kintai.api.deps import AuthContext
from pocket_kintai.core.config import settings
from pocket_kintai.core.errors import AuthenticationError, ConflictError, ValidationFailedError
from pocket_kintai.core.security import (
    create_access_token,
    generate_verification_token,
    get_password_hash,
    password_policy_error,
    utcnow,
    verify_password,
)
from pocket_kintai.models.user import User, UserRole
from pocket_kintai.schemas.serializers import user_to_dict
from pocket_kintai.schemas.user import (
    LoginRequest,
    PasswordChangeRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    SetupRequest,
)
from pocket_kintai.services.email import send_verification_email
from pocket_kintai.services.users import EMAIL_TAKEN, email_taken, resolve_target_company

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
RESEND_MESSAGE = "If the email address is registered, a verification email has been sent"


class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def _issue_verification(self, user: User) -> None:
        user.email_verification_token = generate_verification_token()
        user.email_verification_expires = utcnow() + timedelta(
            hours=settings.EMAIL_VERIFICATION_EXPIRE_HOURS
        )

    def _session(self, user: User) -> dict:
        return {"user": user_to_dict(user), "token": create_access_token(user)}

    def setup(self, data: SetupRequest) -> dict:
        """Create the first super admin. Only allowed while none exists."""
        exists = self.db.query(User).filter(User.role == UserRole.SUPER_ADMIN.value).first()
        if exists:
            raise ConflictError("Initial setup has already been completed")

        policy_error = password_policy_error(data.password)
        if policy_error:
            raise ValidationFailedError(policy_error)
        if email_taken(self.db, data.email):
            raise ConflictError(EMAIL_TAKEN)

        user = User(
            email=data.email,
            hashed_password=get_password_hash(data.password),
            name=data.name,
            role=UserRole.SUPER_ADMIN.value,
            company_id=None,
            is_email_verified=True,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)

        logger.info("Super admin %s created through initial setup", user.id)
        return self._session(user)

    def register(self, ctx: AuthContext, data: RegisterRequest) -> dict:
        if email_taken(self.db, data.email):
            raise ConflictError(EMAIL_TAKEN)

        user = User(
            email=data.email,
            hashed_password=get_password_hash(data.password),
            name=data.name,
            role=UserRole.EMPLOYEE.value,
            company_id=resolve_target_company(self.db, ctx, data.company_id),
            is_email_verified=False,
        )
        self._issue_verification(user)
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)

        logger.info("User %s registered by %s", user.id, ctx.user_id)
        result = send_verification_email(user.email, user.name, user.email_verification_token, user.id)
        if not result.get("success"):
            logger.warning("Verification email for user %s not sent: %s", user.id, result.get("error"))
        return self._session(user)

    def login(self, data: LoginRequest) -> dict:
        user = self.db.query(User).filter(User.email == data.email).first()
        if not user or not verify_password(data.password, user.hashed_password):
            raise AuthenticationError(INVALID_CREDENTIALS)
        logger.info("User %s logged in", user.id)
        return self._session(user)

    def verify_email(self, token: str, user_id: int) -> dict:
        user = (
            self.db.query(User)
            .filter(User.id == user_id, User.email_verification_token == token)
            .first()
        )
        if (
            not user
            or not user.email_verification_expires
            or user.email_verification_expires < utcnow()
        ):
            raise ValidationFailedError("Invalid or expired verification token")

        user.is_email_verified = True
        user.email_verification_token = None
        user.email_verification_expires = None
        self.db.commit()
        self.db.refresh(user)

        logger.info("User %s verified their email", user.id)
        return user_to_dict(user)

    def resend_verification(self, email: str) -> str:
        user = self.db.query(User).filter(User.email == email).first()
        if not user:
            return RESEND_MESSAGE
        if user.is_email_verified:
            raise ConflictError("Email is already verified")

        self._issue_verification(user)
        self.db.commit()
        send_verification_email(user.email, user.name, user.email_verification_token, user.id)
        return RESEND_MESSAGE

    def update_profile(self, user: User, data: ProfileUpdateRequest) -> dict:
        if data.email is not None and data.email != user.email:
            if email_taken(self.db, data.email, exclude_user_id=user.id):
                raise ConflictError(EMAIL_TAKEN)
            user.email = data.email
        if data.name is not None:
            user.name = data.name

        self.db.commit()
        self.db.refresh(user)
        return user_to_dict(user)

    def change_password(self, user: User, data: PasswordChangeRequest) -> None:
        if not verify_password(data.current_password, user.hashed_password):
            raise ValidationFailedError("Current password is incorrect")
        user.hashed_password = get_password_hash(data.new_password)
        self.db.commit()
        logger.info("User %s changed their password", user.id)
