from typing import Any, Dict, Optional
from pydantic import AnyHttpUrl, Field
from pocket_kintai.schemas.base import CamelModel


class CompanyCreate(CamelModel):
    name: str = Field(..., min_length=1)
    logo_url: Optional[AnyHttpUrl] = None
    settings: Optional[Dict[str, Any]] = None


class CompanyUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    logo_url: Optional[AnyHttpUrl] = None
    settings: Optional[Dict[str, Any]] = None
