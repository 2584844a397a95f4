"""Pagination des listes / List pagination."""

import math

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession


async def paginate(db: AsyncSession, query: Select, page: int, limit: int) -> tuple[list, int, int]:
    """Executer une requete paginee / Run a paginated query.

    Returns (items, total, pages).
    """
    total = (await db.execute(select(func.count()).select_from(query.order_by(None).subquery()))).scalar_one()
    result = await db.execute(query.offset((page - 1) * limit).limit(limit))
    pages = math.ceil(total / limit) if total else 0
    return list(result.scalars().all()), total, pages
