"""
Page/limit helpers for list endpoints.
"""
import math

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def page_meta(total: int, page: int, limit: int) -> dict:
    pages = page_count(total, limit)
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "pages": pages,
        "has_next": page < pages,
        "has_prev": page > 1,
    }


async def paginate(db: AsyncSession, query: Select, page: int, limit: int) -> dict:
    """Run ``query`` for one page and return the items with page metadata."""
    total = await db.scalar(select(func.count()).select_from(query.order_by(None).subquery()))
    result = await db.execute(query.offset((page - 1) * limit).limit(limit))
    return {"items": result.scalars().unique().all(), **page_meta(total or 0, page, limit)}
