"""카탈로그 레포지토리 — 서비스, 업체-서비스 연결, 서비스 요청 쿼리.

Catalog Repository — Services, business-service links and service requests.
"""

from typing import Any, Sequence

from sqlalchemy import and_, case, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from autonew.models.business import Business
from autonew.models.catalog import BusinessService, Service, ServiceRequest
from autonew.models.reservation import Reservation, ReservationService, ReservationStatus
from autonew.repositories.base import BaseRepository


class CatalogRepository(BaseRepository[Service]):
    """서비스 카탈로그 쿼리를 담당하는 레포지토리.

    Repository for catalog services and their business associations.
    """

    def __init__(self) -> None:
        super().__init__(Service)

    async def list_with_business_count(self, db: AsyncSession) -> list[tuple[Service, int]]:
        """서비스 목록과 각 서비스를 제공하는 검증 업체 수를 조회합니다.

        List services with the number of verified businesses offering each,
        ordered by price.
        """
        verified_links = (
            select(BusinessService.servicio_id, BusinessService.empresa_id)
            .join(Business, Business.id_empresa == BusinessService.empresa_id)
            .where(Business.verificada.is_(True))
            .subquery()
        )
        result = await db.execute(
            select(Service, func.count(func.distinct(verified_links.c.empresa_id)))
            .outerjoin(verified_links, verified_links.c.servicio_id == Service.id_servicio)
            .group_by(Service.id_servicio)
            .order_by(Service.precio, Service.id_servicio)
        )
        return [(service, int(count or 0)) for service, count in result.all()]

    async def get_by_ids(self, db: AsyncSession, service_ids: Sequence[int]) -> dict[int, Service]:
        """ID 목록으로 서비스를 조회합니다 (Services keyed by id)."""
        if not service_ids:
            return {}
        result = await db.execute(select(Service).where(Service.id_servicio.in_(list(service_ids))))
        return {service.id_servicio: service for service in result.scalars().all()}

    async def businesses_offering_all(self, db: AsyncSession, service_ids: Sequence[int]) -> list[tuple[Business, int]]:
        """요청한 모든 서비스를 제공하는 검증 업체를 조회합니다.

        Verified businesses offering every requested service.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            service_ids: 필요한 서비스 ID 목록 (Required service ids)

        Returns:
            list[tuple[Business, int]]: (업체, 일치 서비스 수) 목록
        """
        wanted: list[int] = sorted(set(service_ids))
        matched = func.count(func.distinct(BusinessService.servicio_id))
        result = await db.execute(
            select(Business, matched)
            .join(BusinessService, BusinessService.empresa_id == Business.id_empresa)
            .where(Business.verificada.is_(True), BusinessService.servicio_id.in_(wanted))
            .group_by(Business.id_empresa)
            .having(matched == len(wanted))
            .order_by(Business.nombre_empresa)
        )
        return [(business, int(count)) for business, count in result.all()]

    async def services_for_business(self, db: AsyncSession, empresa_id: int) -> Sequence[Service]:
        """업체가 제공하는 서비스 목록 (Services offered by a business)."""
        result = await db.execute(
            select(Service)
            .join(BusinessService, BusinessService.servicio_id == Service.id_servicio)
            .where(BusinessService.empresa_id == empresa_id)
            .order_by(Service.nombre_servicio)
        )
        return result.scalars().all()

    async def is_assigned(self, db: AsyncSession, empresa_id: int, servicio_id: int) -> bool:
        result = await db.execute(
            select(BusinessService.id).where(
                BusinessService.empresa_id == empresa_id,
                BusinessService.servicio_id == servicio_id,
            )
        )
        return result.scalar_one_or_none() is not None

    async def assigned_with_stats(self, db: AsyncSession, empresa_id: int) -> list[dict[str, Any]]:
        """업체에 배정된 서비스와 서비스별 예약 수, 완료 매출.

        Assigned services with per-service booking count and revenue from
        completed bookings of this business.
        """
        own_lines = (
            select(ReservationService.servicio_id, ReservationService.id, ReservationService.precio_aplicado, Reservation.estado)
            .join(Reservation, Reservation.id_reserva == ReservationService.reserva_id)
            .where(Reservation.empresa_id == empresa_id)
            .subquery()
        )
        total_reservas = func.count(own_lines.c.id)
        ingresos = func.coalesce(
            func.sum(
                case(
                    (own_lines.c.estado == ReservationStatus.COMPLETED.value, own_lines.c.precio_aplicado),
                    else_=0,
                )
            ),
            0,
        )
        result = await db.execute(
            select(Service, total_reservas, ingresos)
            .join(BusinessService, and_(BusinessService.servicio_id == Service.id_servicio, BusinessService.empresa_id == empresa_id))
            .outerjoin(own_lines, own_lines.c.servicio_id == Service.id_servicio)
            .group_by(Service.id_servicio)
            .order_by(total_reservas.desc(), Service.id_servicio)
        )
        return [
            {"service": service, "total_reservas": int(count or 0), "ingresos_generados": revenue or 0}
            for service, count, revenue in result.all()
        ]

    async def unassigned_services(self, db: AsyncSession, empresa_id: int) -> Sequence[Service]:
        """업체에 아직 배정되지 않은 서비스 (Services not yet offered)."""
        assigned = select(BusinessService.servicio_id).where(BusinessService.empresa_id == empresa_id)
        result = await db.execute(
            select(Service).where(Service.id_servicio.not_in(assigned)).order_by(Service.nombre_servicio)
        )
        return result.scalars().all()

    async def requests_for_business(self, db: AsyncSession, empresa_id: int) -> Sequence[ServiceRequest]:
        """업체의 서비스 요청 이력, 최신순 (Request history, newest first)."""
        result = await db.execute(
            select(ServiceRequest)
            .options(selectinload(ServiceRequest.service))
            .where(ServiceRequest.empresa_id == empresa_id)
            .order_by(ServiceRequest.fecha_solicitud.desc(), ServiceRequest.id_solicitud.desc())
        )
        return result.scalars().all()

    async def pending_request_exists(self, db: AsyncSession, empresa_id: int, servicio_id: int) -> bool:
        result = await db.execute(
            select(ServiceRequest.id_solicitud).where(
                ServiceRequest.empresa_id == empresa_id,
                ServiceRequest.servicio_solicitado_id == servicio_id,
                ServiceRequest.estado == "pendiente",
            )
        )
        return result.first() is not None

    async def get_request(self, db: AsyncSession, solicitud_id: int, empresa_id: int) -> ServiceRequest | None:
        result = await db.execute(
            select(ServiceRequest).where(
                ServiceRequest.id_solicitud == solicitud_id,
                ServiceRequest.empresa_id == empresa_id,
            )
        )
        return result.scalar_one_or_none()

    async def create_request(self, db: AsyncSession, data: dict[str, Any]) -> ServiceRequest:
        request = ServiceRequest(**data)
        db.add(request)
        await db.flush()
        await db.refresh(request)
        return request

    async def delete_request(self, db: AsyncSession, request: ServiceRequest) -> None:
        await db.delete(request)
        await db.flush()


# 싱글턴 인스턴스 — Singleton instance
catalog_repository: CatalogRepository = CatalogRepository()
