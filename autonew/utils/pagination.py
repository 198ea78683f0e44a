"""페이지네이션 유틸리티 — 업체 예약 목록용.

Offset pagination for list endpoints, with the legacy ``paginacion``
metadata the business app reads (``pagina``, ``limite``,
``totalRegistros``, ``totalPaginas``).
"""

import math
from typing import Any, Sequence

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from autonew.schemas.common import PaginationInfo


async def paginate(
    db: AsyncSession,
    query: Select[Any],
    page: int = 1,
    per_page: int = 20,
) -> tuple[Sequence[Any], int]:
    """한 페이지의 행과 전체 건수를 반환합니다.

    Return one page of ``query`` and the total row count. The count runs
    on the query without its ORDER BY; eager-load options stay on the page
    query only.

    Args:
        db: 비동기 DB 세션 (Async database session)
        query: 정렬이 포함된 기본 쿼리 (Base query, already ordered)
        page: 1부터 시작하는 페이지 번호 (1-indexed page)
        per_page: 페이지 크기 (Page size)
    """
    total: int = (await db.execute(select(func.count()).select_from(query.order_by(None).subquery()))).scalar() or 0
    rows = await db.execute(query.offset((page - 1) * per_page).limit(per_page))
    return rows.scalars().all(), total


def page_info(page: int, per_page: int, total: int) -> PaginationInfo:
    return PaginationInfo(
        pagina=page,
        limite=per_page,
        totalRegistros=total,
        totalPaginas=math.ceil(total / per_page) if per_page else 0,
    )
