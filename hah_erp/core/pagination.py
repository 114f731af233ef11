"""
Helpers de paginación compartidos por los listados.
"""

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession


def page_offset(page: int, size: int) -> int:
    """Offset SQL para una página 1-indexada."""
    return (max(page, 1) - 1) * size


def total_pages(total: int, size: int) -> int:
    """Cantidad de páginas; siempre al menos 1."""
    if total <= 0 or size <= 0:
        return 1
    return (total + size - 1) // size


async def count_rows(db: AsyncSession, query: Select) -> int:
    """Cuenta las filas de una consulta ya filtrada (sin order/limit)."""
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    return (await db.execute(count_query)).scalar() or 0


def page_payload(items: list, total: int, page: int, size: int) -> dict:
    """Estructura común de respuesta paginada."""
    pages = total_pages(total, size)
    return {
        "items": items,
        "total": total,
        "page": page,
        "size": size,
        "pages": pages,
        "has_next": page < pages,
        "has_prev": page > 1,
    }
