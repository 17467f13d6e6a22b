"""Admin-side user management, confined to the caller's tenant."""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from pocket_kintai.api.deps import AuthContext
from pocket_kintai.api.envelope import pagination_dict
from pocket_kintai.core.errors import ConflictError, NotFoundError, ValidationFailedError
from pocket_kintai.core.security import get_password_hash
from pocket_kintai.models.company import Company
from pocket_kintai.models.user import User, UserRole
from pocket_kintai.schemas.serializers import user_to_dict
from pocket_kintai.schemas.user import AdminUserCreate, AdminUserUpdate

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "Email is already in use"


def email_taken(db: Session, email: str, exclude_user_id: Optional[int] = None) -> bool:
    query = db.query(User).filter(User.email == email)
    if exclude_user_id is not None:
        query = query.filter(User.id != exclude_user_id)
    return query.first() is not None


def resolve_target_company(db: Session, ctx: AuthContext, requested: Optional[int]) -> int:
    """Company a new user lands in: the caller's tenant, or any one for a super admin."""
    if not ctx.is_super_admin:
        return ctx.company_id
    company_id = requested if requested is not None else ctx.company_id
    if company_id is None:
        raise ValidationFailedError("Company ID is required")
    if not db.query(Company).filter(Company.id == company_id).first():
        raise NotFoundError("Company not found")
    return company_id


class UserAdminService:
    def __init__(self, db: Session):
        self.db = db

    def _scoped(self, ctx: AuthContext):
        query = self.db.query(User)
        if ctx.company_id is not None:
            query = query.filter(User.company_id == ctx.company_id)
        return query

    def _get(self, ctx: AuthContext, user_id: int) -> User:
        user = self._scoped(ctx).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found")
        return user

    def list_users(self, ctx: AuthContext, page: int = 1, limit: int = 10) -> dict:
        query = self._scoped(ctx)
        total = query.count()
        users = (
            query.order_by(User.created_at.desc(), User.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return {
            "users": [user_to_dict(u) for u in users],
            "pagination": pagination_dict(page, limit, total),
        }

    def get_user(self, ctx: AuthContext, user_id: int) -> dict:
        return user_to_dict(self._get(ctx, user_id))

    def create_user(self, ctx: AuthContext, data: AdminUserCreate) -> dict:
        if email_taken(self.db, data.email):
            raise ConflictError(EMAIL_TAKEN)

        user = User(
            email=data.email,
            hashed_password=get_password_hash(data.password),
            name=data.name,
            role=data.role,
            company_id=resolve_target_company(self.db, ctx, data.company_id),
            # Accounts created by an admin skip the e-mail round trip
            is_email_verified=True,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)

        logger.info("User %s (%s) created by %s", user.id, user.role, ctx.user_id)
        return user_to_dict(user)

    def update_user(self, ctx: AuthContext, user_id: int, data: AdminUserUpdate) -> dict:
        user = self._get(ctx, user_id)
        if user.role == UserRole.SUPER_ADMIN.value and not ctx.is_super_admin:
            raise NotFoundError("User not found")

        if data.email is not None and data.email != user.email:
            if email_taken(self.db, data.email, exclude_user_id=user.id):
                raise ConflictError(EMAIL_TAKEN)
            user.email = data.email
        if data.name is not None:
            user.name = data.name
        if data.role is not None:
            user.role = data.role
        if data.password:
            user.hashed_password = get_password_hash(data.password)

        self.db.commit()
        self.db.refresh(user)
        logger.info("User %s updated by %s", user.id, ctx.user_id)
        return user_to_dict(user)

    def delete_user(self, ctx: AuthContext, user_id: int) -> None:
        if user_id == ctx.user_id:
            raise ConflictError("You cannot delete your own account")
        user = self._get(ctx, user_id)
        if user.role == UserRole.SUPER_ADMIN.value and not ctx.is_super_admin:
            raise NotFoundError("User not found")

        self.db.delete(user)
        self.db.commit()
        logger.info("User %s deleted by %s", user_id, ctx.user_id)
