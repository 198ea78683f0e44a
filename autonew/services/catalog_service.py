"""카탈로그 서비스 — 세차 서비스 목록, 업체 검색, 업체 서비스 요청.

Catalog Service — Service listing with classification, matching businesses
for a set of services, and the business-side service portfolio and
service requests.
"""

import logging
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from autonew.models.business import Business
from autonew.models.catalog import Service, ServiceRequest
from autonew.repositories.catalog_repository import catalog_repository
from autonew.schemas.catalog import (
    AssignedServiceResponse,
    BusinessMatch,
    BusinessServicesOverview,
    CatalogServiceResponse,
    ServiceRequestCreate,
    ServiceRequestCreated,
    ServiceRequestResponse,
    ServiceResponse,
)
from autonew.utils.exceptions import BadRequestError, NotFoundError

logger = logging.getLogger(__name__)

# 이름 키워드 → 분류, 먼저 일치한 규칙 적용 (First matching rule wins)
CATEGORY_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("básico", "basico", "express"), "basico"),
    (("premium", "completo"), "premium"),
    (("detallado", "full"), "detallado"),
    (("interior",), "interior"),
    (("exterior",), "exterior"),
    (("encerado", "cera"), "encerado"),
    (("motor",), "motor"),
)

ALL_VEHICLE_TYPES: tuple[str, ...] = ("sedan", "suv", "camioneta", "hatchback", "van", "camion", "moto")

REQUEST_PENDING: str = "pendiente"


def classify_service(nombre: str, descripcion: str | None) -> tuple[str, list[str]]:
    """서비스 이름/설명으로 분류와 대상 차량 종류를 추정합니다.

    Derive ``(categoria, tipos_vehiculo)`` from a service's name and
    description. The category looks at the name only; vehicle types look
    at both.
    """
    name: str = nombre.lower()
    description: str = (descripcion or "").lower()

    categoria: str = "general"
    for keywords, category in CATEGORY_RULES:
        if any(keyword in name for keyword in keywords):
            categoria = category
            break

    if "moto" in name or "moto" in description:
        tipos: list[str] = ["moto"]
    elif "camion" in name or "camion" in description or "pesado" in name:
        tipos = ["camion", "van"]
    else:
        tipos = list(ALL_VEHICLE_TYPES)
    return categoria, tipos


class CatalogService:
    """서비스 카탈로그 비즈니스 로직 (Catalog business logic)."""

    async def list_services(self, db: AsyncSession) -> list[CatalogServiceResponse]:
        """전체 서비스 목록 — 검증 업체 수와 분류 포함, 가격순.

        All services ordered by price, with the count of verified businesses
        offering each and the derived classification.
        """
        rows = await catalog_repository.list_with_business_count(db)
        result: list[CatalogServiceResponse] = []
        for service, count in rows:
            categoria, tipos = classify_service(service.nombre_servicio, service.descripcion)
            result.append(
                CatalogServiceResponse(
                    **ServiceResponse.model_validate(service).model_dump(),
                    cantidad_empresas=count,
                    categoria=categoria,
                    tipos_vehiculo=tipos,
                )
            )
        return result

    async def businesses_offering_all(self, db: AsyncSession, service_ids: Sequence[int]) -> list[BusinessMatch]:
        """요청 서비스를 모두 제공하는 검증 업체 목록.

        Raises:
            BadRequestError: 서비스 목록이 비어 있음 (Empty service list)
        """
        if not service_ids:
            raise BadRequestError("Debes proporcionar al menos un servicio")
        rows = await catalog_repository.businesses_offering_all(db, service_ids)
        return [
            BusinessMatch(
                id_empresa=business.id_empresa,
                nombre_empresa=business.nombre_empresa,
                direccion=business.direccion,
                telefono=business.telefono,
                email=business.email,
                latitud=business.latitud,
                longitud=business.longitud,
                profile_image=business.profile_image,
                servicios_disponibles=count,
            )
            for business, count in rows
        ]

    async def services_for_business(self, db: AsyncSession, empresa_id: int) -> list[ServiceResponse]:
        services = await catalog_repository.services_for_business(db, empresa_id)
        return [ServiceResponse.model_validate(service) for service in services]

    async def business_overview(self, db: AsyncSession, business: Business) -> BusinessServicesOverview:
        """배정된 서비스, 미배정 서비스, 요청 이력 (servicios-completos)."""
        assigned = await catalog_repository.assigned_with_stats(db, business.id_empresa)
        available = await catalog_repository.unassigned_services(db, business.id_empresa)
        requests = await catalog_repository.requests_for_business(db, business.id_empresa)
        return BusinessServicesOverview(
            serviciosAsignados=[
                AssignedServiceResponse(
                    **ServiceResponse.model_validate(row["service"]).model_dump(),
                    total_reservas=row["total_reservas"],
                    ingresos_generados=row["ingresos_generados"],
                )
                for row in assigned
            ],
            serviciosDisponibles=[ServiceResponse.model_validate(service) for service in available],
            solicitudesPendientes=[self._request_response(request) for request in requests],
        )

    def _request_response(self, request: ServiceRequest) -> ServiceRequestResponse:
        service: Service = request.service
        return ServiceRequestResponse(
            id_solicitud=request.id_solicitud,
            estado=request.estado,
            fecha_solicitud=request.fecha_solicitud,
            motivo_solicitud=request.motivo_solicitud,
            respuesta_admin=request.respuesta_admin,
            fecha_respuesta=request.fecha_respuesta,
            id_servicio=service.id_servicio,
            nombre_servicio=service.nombre_servicio,
            descripcion=service.descripcion,
            precio=service.precio,
        )

    async def request_service(
        self,
        db: AsyncSession,
        business: Business,
        data: ServiceRequestCreate,
    ) -> ServiceRequestCreated:
        """업체의 서비스 추가 요청을 생성합니다.

        Create a request to offer a catalog service.

        Raises:
            NotFoundError: 서비스 없음 (Unknown service)
            BadRequestError: 이미 배정됨 또는 대기 중인 요청 존재
                             (Already assigned, or a pending request exists)
        """
        service: Service | None = await catalog_repository.get_by_id(db, data.servicioId)
        if service is None:
            raise NotFoundError("Servicio no encontrado")
        if await catalog_repository.is_assigned(db, business.id_empresa, service.id_servicio):
            raise BadRequestError("Este servicio ya está asignado a tu empresa")
        if await catalog_repository.pending_request_exists(db, business.id_empresa, service.id_servicio):
            raise BadRequestError("Ya tienes una solicitud pendiente para este servicio")

        request: ServiceRequest = await catalog_repository.create_request(
            db,
            {
                "empresa_id": business.id_empresa,
                "servicio_solicitado_id": service.id_servicio,
                "estado": REQUEST_PENDING,
                "motivo_solicitud": data.motivo,
                "usuario_responsable": data.usuarioResponsable,
                "telefono_contacto": data.telefonoContacto,
                "respuesta_admin": "",
            },
        )
        logger.info("Service request %s created by business %s", request.id_solicitud, business.id_empresa)
        return ServiceRequestCreated(
            id_solicitud=request.id_solicitud,
            fecha_solicitud=request.fecha_solicitud,
            servicio=service.nombre_servicio,
            estado=request.estado,
        )

    async def cancel_request(self, db: AsyncSession, business: Business, solicitud_id: int) -> None:
        """대기 중인 요청만 삭제 — 그 외는 404.

        Delete a pending request of this business. Requests that are not
        the business's, or no longer pending, answer 404.
        """
        request: ServiceRequest | None = await catalog_repository.get_request(db, solicitud_id, business.id_empresa)
        if request is None or request.estado != REQUEST_PENDING:
            raise NotFoundError("Solicitud no encontrada o ya procesada")
        await catalog_repository.delete_request(db, request)


# 싱글턴 인스턴스 — Singleton instance
catalog_service: CatalogService = CatalogService()
