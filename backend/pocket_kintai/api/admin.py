from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from pocket_kintai.api.deps import AuthContext, require_admin
from pocket_kintai.api.envelope import success
from pocket_kintai.core.database import get_db
from pocket_kintai.schemas.user import AdminUserCreate, AdminUserUpdate
from pocket_kintai.services.users import UserAdminService

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/users")
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    ctx: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return success(UserAdminService(db).list_users(ctx, page, limit))


@router.get("/users/{user_id}")
def get_user(
    user_id: int,
    ctx: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return success(UserAdminService(db).get_user(ctx, user_id))


@router.post("/users", status_code=status.HTTP_201_CREATED)
def create_user(
    data: AdminUserCreate,
    ctx: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return success(UserAdminService(db).create_user(ctx, data), "User created")


@router.put("/users/{user_id}")
def update_user(
    user_id: int,
    data: AdminUserUpdate,
    ctx: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return success(UserAdminService(db).update_user(ctx, user_id, data), "User updated")


@router.delete("/users/{user_id}")
def delete_user(
    user_id: int,
    ctx: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    UserAdminService(db).delete_user(ctx, user_id)
    return success(message="User deleted")
