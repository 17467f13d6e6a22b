"""FastAPI dependencies: authenticated context, tenant scoping and role gates."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from pocket_kintai.core.database import get_db
from pocket_kintai.core.security import get_current_user, utcnow
from pocket_kintai.models.company import Company
from pocket_kintai.models.user import User


@dataclass(frozen=True)
class AuthContext:
    """Who is calling and which tenant the call is scoped to.

    company_id is None only for a super admin who did not pick a company
    through X-Company-ID; that caller sees every tenant.
    """
    user: User
    company_id: Optional[int]

    @property
    def user_id(self) -> int:
        return self.user.id

    @property
    def is_admin(self) -> bool:
        return self.user.is_admin

    @property
    def is_super_admin(self) -> bool:
        return self.user.is_super_admin


def get_auth_context(
    current_user: User = Depends(get_current_user),
    x_company_id: Optional[str] = Header(None, alias="X-Company-ID"),
    db: Session = Depends(get_db),
) -> AuthContext:
    if current_user.is_super_admin:
        if not x_company_id:
            return AuthContext(user=current_user, company_id=None)
        company = db.query(Company).filter(Company.public_id == x_company_id).first()
        if not company:
            raise HTTPException(status_code=404, detail="Company not found")
        return AuthContext(user=current_user, company_id=company.id)

    if current_user.company_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User has no company assigned")
    return AuthContext(user=current_user, company_id=current_user.company_id)


def require_admin(ctx: AuthContext = Depends(get_auth_context)) -> AuthContext:
    if not ctx.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return ctx


def require_super_admin(ctx: AuthContext = Depends(get_auth_context)) -> AuthContext:
    if not ctx.is_super_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Super admin access required")
    return ctx


def get_now() -> datetime:
    """Current time for clock-in/out; overridden in tests."""
    return utcnow()
