"""Monthly reports. Admin-only views are scoped to the caller's company context."""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from pocket_kintai.api.deps import AuthContext, get_auth_context, require_admin
from pocket_kintai.api.envelope import success
from pocket_kintai.core.database import get_db
from pocket_kintai.services.report import ReportService

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("/user/{user_id}")
def user_report(
    user_id: int,
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None),
    ctx: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    return success(ReportService(db).user_report(ctx, user_id, year, month))


@router.get("/department")
def department_report(
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None),
    ctx: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return success(ReportService(db).department_report(ctx, year, month))


@router.get("/company/compliance")
def compliance_report(
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None),
    ctx: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return success(ReportService(db).compliance_report(ctx, year, month))


@router.get("/export")
def export_report(
    user_id: int = Query(..., alias="userId"),
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None),
    export_type: str = Query(..., alias="type"),
    ctx: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    filename, content = ReportService(db).export_csv(ctx, user_id, year, month, export_type)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
