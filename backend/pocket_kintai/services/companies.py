"""Tenant (company) management and per-company settings."""
import logging
from typing import Union

from sqlalchemy.orm import Session

from pocket_kintai.api.deps import AuthContext
from pocket_kintai.api.envelope import pagination_dict
from pocket_kintai.core.errors import ConflictError, ForbiddenError, NotFoundError
from pocket_kintai.core.security import generate_public_company_id
from pocket_kintai.models.company import Company
from pocket_kintai.models.user import User
from pocket_kintai.schemas.company import CompanyCreate, CompanyUpdate
from pocket_kintai.schemas.serializers import company_to_dict

logger = logging.getLogger(__name__)


class CompanyService:
    def __init__(self, db: Session):
        self.db = db

    def _find(self, company_ref: Union[int, str]) -> Company:
        """Look a company up by internal id, falling back to its public id."""
        ref = str(company_ref).strip()
        company = None
        if ref.isdigit():
            company = self.db.query(Company).filter(Company.id == int(ref)).first()
        if company is None:
            company = self.db.query(Company).filter(Company.public_id == ref.upper()).first()
        if company is None:
            raise NotFoundError("Company not found")
        return company

    @staticmethod
    def _check_member(ctx: AuthContext, company: Company) -> None:
        if not ctx.is_super_admin and ctx.user.company_id != company.id:
            raise ForbiddenError("You do not have access to this company")

    def list_companies(self, page: int = 1, limit: int = 10) -> dict:
        query = self.db.query(Company)
        total = query.count()
        companies = (
            query.order_by(Company.name.asc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return {
            "companies": [company_to_dict(c) for c in companies],
            "pagination": pagination_dict(page, limit, total),
        }

    def create_company(self, ctx: AuthContext, data: CompanyCreate) -> dict:
        company = Company(
            name=data.name,
            logo_url=str(data.logo_url) if data.logo_url else None,
            settings=data.settings or {},
        )
        self.db.add(company)
        # The public id is derived from the internal id, which exists only after flush
        self.db.flush()
        company.public_id = generate_public_company_id(company.id)
        self.db.commit()
        self.db.refresh(company)

        logger.info("Company %s (%s) created by %s", company.id, company.public_id, ctx.user_id)
        return company_to_dict(company)

    def get_company(self, ctx: AuthContext, company_ref: Union[int, str]) -> dict:
        company = self._find(company_ref)
        self._check_member(ctx, company)
        return company_to_dict(company)

    def update_company(self, ctx: AuthContext, company_ref: Union[int, str], data: CompanyUpdate) -> dict:
        company = self._find(company_ref)
        if data.name is not None:
            company.name = data.name
        if data.logo_url is not None:
            company.logo_url = str(data.logo_url)
        if data.settings is not None:
            company.settings = data.settings

        self.db.commit()
        self.db.refresh(company)
        logger.info("Company %s updated by %s", company.id, ctx.user_id)
        return company_to_dict(company)

    def delete_company(self, ctx: AuthContext, company_ref: Union[int, str]) -> None:
        company = self._find(company_ref)
        company_id = company.id
        user_count = self.db.query(User).filter(User.company_id == company_id).count()
        if user_count:
            raise ConflictError(
                f"Cannot delete company with {user_count} existing user(s)"
            )

        self.db.delete(company)
        self.db.commit()
        logger.info("Company %s deleted by %s", company_id, ctx.user_id)

    def get_settings(self, ctx: AuthContext, company_ref: Union[int, str]) -> dict:
        company = self._find(company_ref)
        self._check_member(ctx, company)
        return company.settings or {}

    def replace_settings(self, ctx: AuthContext, company_ref: Union[int, str], new_settings: dict) -> dict:
        company = self._find(company_ref)
        if not ctx.is_super_admin and not (ctx.is_admin and ctx.user.company_id == company.id):
            raise ForbiddenError("Only an administrator of this company can change its settings")

        company.settings = new_settings
        self.db.commit()
        self.db.refresh(company)
        logger.info("Settings of company %s replaced by %s", company.id, ctx.user_id)
        return company.settings
