"""공통 Pydantic 응답 스키마 정의.

Common Pydantic response schema definitions.
Every endpoint answers with the ``{success, message?, data}`` envelope;
errors use the same shape with ``success=false`` (see ``autonew.main``).
"""

from decimal import Decimal
from typing import Annotated, Generic, TypeVar

from pydantic import BaseModel, PlainSerializer

T = TypeVar("T")

# 금액 — DB에는 Decimal, JSON에는 숫자로 출력 (Decimal in Python, number in JSON)
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class ApiResponse(BaseModel, Generic[T]):
    """성공 응답 봉투 스키마.

    Success envelope wrapping any payload.

    Attributes:
        success: 항상 True (Always True for successful responses)
        message: 사용자 메시지, 선택 (Optional user-facing message)
        data: 응답 데이터 (Payload, may be null)
    """

    success: bool = True  # 성공 여부 (Always True here)
    message: str | None = None  # 사용자 메시지 (Optional message)
    data: T | None = None  # 응답 데이터 (Payload)


class PaginationInfo(BaseModel):
    """페이지 정보 (Pagination metadata, legacy field names)."""

    pagina: int  # 현재 페이지 (Current page, 1-indexed)
    limite: int  # 페이지당 항목 수 (Items per page)
    totalRegistros: int  # 전체 항목 수 (Total items)
    totalPaginas: int  # 전체 페이지 수 (Total pages)
