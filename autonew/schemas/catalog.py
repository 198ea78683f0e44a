"""서비스 카탈로그 관련 Pydantic 스키마 정의.

Catalog-related Pydantic schema definitions: services, matching
businesses, a business's own service portfolio and service requests.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from autonew.schemas.common import Money


class ServiceResponse(BaseModel):
    """서비스 응답 스키마 (Catalog service)."""

    model_config = ConfigDict(from_attributes=True)

    id_servicio: int
    nombre_servicio: str
    descripcion: str | None = None
    precio: Money


class CatalogServiceResponse(ServiceResponse):
    """예약 화면용 서비스 — 제공 업체 수와 분류 포함.

    Service as listed on the booking screen, with the number of verified
    businesses offering it and a name-derived classification.
    """

    cantidad_empresas: int = 0  # 제공하는 검증 업체 수 (Verified businesses offering it)
    categoria: str = "general"  # 이름 기반 분류 (Derived category)
    tipos_vehiculo: list[str] = []  # 대상 차량 종류 (Vehicle types served)


class BusinessMatch(BaseModel):
    """요청 서비스 전부를 제공하는 업체 (Business offering every requested service)."""

    model_config = ConfigDict(from_attributes=True)

    id_empresa: int
    nombre_empresa: str
    direccion: str
    telefono: str
    email: str
    latitud: float | None = None
    longitud: float | None = None
    profile_image: str | None = None
    servicios_disponibles: int = 0  # 일치한 서비스 수 (Matched service count)


class AssignedServiceResponse(ServiceResponse):
    """업체에 배정된 서비스와 실적 (Assigned service with usage figures)."""

    total_reservas: int = 0
    ingresos_generados: Money = 0


class ServiceRequestResponse(BaseModel):
    """서비스 추가 요청 이력 항목 (Service request history item)."""

    id_solicitud: int
    estado: str
    fecha_solicitud: datetime
    motivo_solicitud: str
    respuesta_admin: str = ""
    fecha_respuesta: datetime | None = None
    id_servicio: int
    nombre_servicio: str
    descripcion: str | None = None
    precio: Money


class BusinessServicesOverview(BaseModel):
    """업체 서비스 전체 현황 (Assigned, available and requested services)."""

    serviciosAsignados: list[AssignedServiceResponse]
    serviciosDisponibles: list[ServiceResponse]
    solicitudesPendientes: list[ServiceRequestResponse]


class ServiceRequestCreate(BaseModel):
    """서비스 추가 요청 생성 스키마 (New service request)."""

    servicioId: int  # 요청할 카탈로그 서비스 (Catalog service wanted)
    motivo: str = Field(..., min_length=1)  # 요청 사유 (Reason)
    usuarioResponsable: str = Field(..., min_length=1)  # 담당자 이름 (Contact person)
    telefonoContacto: str = Field(..., min_length=1)  # 담당자 전화 (Contact phone)


class ServiceRequestCreated(BaseModel):
    """서비스 요청 생성 결과 (Created request)."""

    id_solicitud: int
    fecha_solicitud: datetime
    servicio: str
    estado: str
