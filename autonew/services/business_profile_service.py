"""업체 프로필 서비스 — 프로필/통계 조회, 기본·계좌 정보 수정, 비밀번호 변경.

Business Profile Service — Full profile with statistics, basic and banking
updates, and the business password change.
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from autonew.models.business import Business
from autonew.repositories.business_repository import business_repository
from autonew.schemas.auth import BusinessSummary
from autonew.schemas.business import (
    BankingInfo,
    BusinessBasicUpdate,
    BusinessFullProfile,
    BusinessPasswordChange,
    BusinessStats,
)
from autonew.utils.exceptions import DuplicateError, UnauthorizedError
from autonew.utils.password import hash_password, verify_password

logger = logging.getLogger(__name__)


class BusinessProfileService:
    """업체 프로필 비즈니스 로직 (Business profile logic)."""

    async def get_full_profile(self, db: AsyncSession, business: Business) -> BusinessFullProfile:
        """기본 정보, 계좌 정보, 예약 통계를 포함한 전체 프로필.

        Full profile: public fields, banking data, verification state and
        booking statistics (total, completed, revenue from completed).
        """
        stats = await business_repository.get_stats(db, business.id_empresa)
        return BusinessFullProfile(
            **BusinessSummary.model_validate(business).model_dump(),
            **BankingInfo.model_validate(business).model_dump(),
            fecha_registro=business.fecha_registro,
            is_active=business.is_active,
            datos_bancarios_verificados=business.datos_bancarios_verificados,
            fecha_verificacion_bancaria=business.fecha_verificacion_bancaria,
            estadisticas=BusinessStats(**stats),
        )

    async def update_basic(self, db: AsyncSession, business: Business, data: BusinessBasicUpdate) -> BusinessFullProfile:
        """이름, 주소, 전화, 이메일, 좌표를 수정합니다.

        Raises:
            DuplicateError: 다른 업체가 같은 이메일 사용 (Email used by another business)
        """
        if await business_repository.email_taken_by_other(db, data.email, business.id_empresa):
            raise DuplicateError("El email ya está en uso por otra empresa")

        await business_repository.update_fields(db, business.id_empresa, data.model_dump())
        await db.refresh(business)
        return await self.get_full_profile(db, business)

    async def update_banking(self, db: AsyncSession, business: Business, data: BankingInfo) -> BusinessFullProfile:
        """계좌/세무 정보를 교체하고 검증 상태를 초기화합니다.

        Replace every banking field. Any change sends the data back to
        back-office verification, so the verified flag and date are reset.
        """
        changes: dict[str, Any] = {field: value or None for field, value in data.model_dump().items()}
        changes["datos_bancarios_verificados"] = False
        changes["fecha_verificacion_bancaria"] = None

        await business_repository.update_fields(db, business.id_empresa, changes)
        await db.refresh(business)
        logger.info("Banking data updated for business %s, verification reset", business.id_empresa)
        return await self.get_full_profile(db, business)

    async def change_password(self, db: AsyncSession, business: Business, data: BusinessPasswordChange) -> None:
        """업체 비밀번호 변경 — 현재 비밀번호 불일치 시 401."""
        if not verify_password(data.contrasena_actual, business.password_hash):
            raise UnauthorizedError("La contraseña actual es incorrecta")
        await business_repository.set_password_hash(db, business.id_empresa, hash_password(data.nueva_contrasena))


# 싱글턴 인스턴스 — Singleton instance
business_profile_service: BusinessProfileService = BusinessProfileService()
