"""Company (tenant) endpoints. `company_ref` is the numeric id or the public id."""
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from pocket_kintai.api.deps import AuthContext, get_auth_context, require_super_admin
from pocket_kintai.api.envelope import success
from pocket_kintai.core.database import get_db
from pocket_kintai.schemas.company import CompanyCreate, CompanyUpdate
from pocket_kintai.services.companies import CompanyService

router = APIRouter(prefix="/api/companies", tags=["companies"])


@router.get("")
def list_companies(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    ctx: AuthContext = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    return success(CompanyService(db).list_companies(page, limit))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_company(
    data: CompanyCreate,
    ctx: AuthContext = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    return success(CompanyService(db).create_company(ctx, data), "Company created")


@router.get("/{company_ref}")
def get_company(
    company_ref: str,
    ctx: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    return success(CompanyService(db).get_company(ctx, company_ref))


@router.put("/{company_ref}")
def update_company(
    company_ref: str,
    data: CompanyUpdate,
    ctx: AuthContext = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    return success(CompanyService(db).update_company(ctx, company_ref, data), "Company updated")


@router.delete("/{company_ref}")
def delete_company(
    company_ref: str,
    ctx: AuthContext = Depends(require_super_admin),
    db: Session = Depends(get_db),
):
    CompanyService(db).delete_company(ctx, company_ref)
    return success(message="Company deleted")


@router.get("/{company_ref}/settings")
def get_company_settings(
    company_ref: str,
    ctx: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    return success(CompanyService(db).get_settings(ctx, company_ref))


@router.put("/{company_ref}/settings")
def replace_company_settings(
    company_ref: str,
    new_settings: Dict[str, Any] = Body(...),
    ctx: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    return success(
        CompanyService(db).replace_settings(ctx, company_ref, new_settings), "Settings updated"
    )
