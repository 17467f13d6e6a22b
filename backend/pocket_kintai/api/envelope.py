import math
from typing import Any, Optional

from pocket_kintai.core.config import settings


def success(data: Any = None, message: Optional[str] = None) -> dict:
    body = {"status": "success"}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return body


def error(message: str, details: Any = None) -> dict:
    body = {"status": "error", "message": message}
    if details is not None and not settings.is_production:
        body["details"] = details
    return body


def pagination_dict(page: int, limit: int, total: int) -> dict:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": math.ceil(total / limit) if limit else 0,
    }
