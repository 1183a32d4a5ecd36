import math
from typing import Any, List, Tuple

from sqlalchemy.orm import Query

from ..core.config import settings


def clamp(page: int, limit: int) -> Tuple[int, int]:
    page = max(int(page or 1), 1)
    limit = int(limit or settings.DEFAULT_PAGE_SIZE)
    limit = min(max(limit, 1), settings.MAX_PAGE_SIZE)
    return page, limit


def paginate(query: Query, page: int, limit: int) -> Tuple[List[Any], dict]:
    """Run ``query`` for one page and return ``(rows, pagination)``."""
    page, limit = clamp(page, limit)
    total = query.order_by(None).count()
    rows = query.offset((page - 1) * limit).limit(limit).all()
    pagination = {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if total else 0,
    }
    return rows, pagination
