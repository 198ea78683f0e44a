"""서비스 카탈로그 SQLAlchemy ORM 모델 정의.

Service catalog SQLAlchemy ORM model definitions.
The catalog is static reference data maintained by the back-office;
businesses may ask to offer additional services through service requests.

Tables:
    - lavado_auto_servicio: 세차 서비스 카탈로그 (Wash service catalog)
    - lavado_auto_empresaservicio: 업체-서비스 연결 (Business-service link)
    - lavado_auto_solicitudservicioempresa: 서비스 추가 요청 (Service requests)
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from autonew.database import Base


class Service(Base):
    """서비스 모델 — 고정 가격의 세차 서비스.

    Catalog service with a fixed price.

    Attributes:
        id_servicio: 고유 식별자 (Primary key)
        nombre_servicio: 서비스명 (Service name)
        descripcion: 설명 (Description)
        precio: 정가 (List price)
    """

    __tablename__ = "lavado_auto_servicio"

    id_servicio: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nombre_servicio: Mapped[str] = mapped_column(String(150), nullable=False)
    descripcion: Mapped[str | None] = mapped_column(Text, nullable=True)
    # 정가 — List price in local currency
    precio: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)


class BusinessService(Base):
    """업체-서비스 연결 모델 — 연결 외 속성 없음.

    Link between a business and a service it offers.
    """

    __tablename__ = "lavado_auto_empresaservicio"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    empresa_id: Mapped[int] = mapped_column(Integer, ForeignKey("lavado_auto_empresa.id_empresa", ondelete="CASCADE"), nullable=False)
    servicio_id: Mapped[int] = mapped_column(Integer, ForeignKey("lavado_auto_servicio.id_servicio", ondelete="CASCADE"), nullable=False)

    __table_args__ = (
        UniqueConstraint("empresa_id", "servicio_id", name="uq_empresaservicio_empresa_servicio"),
    )

    service = relationship("Service")


class ServiceRequest(Base):
    """서비스 추가 요청 모델 — 업체가 카탈로그 서비스 제공을 요청.

    A business's request to start offering a catalog service.
    Approval happens in the back-office; this API only creates and
    withdraws pending requests.

    Attributes:
        estado: 요청 상태 pendiente | aprobada | rechazada (Request state)
        respuesta_admin: 관리자 답변 (Back-office response)
    """

    __tablename__ = "lavado_auto_solicitudservicioempresa"

    id_solicitud: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    empresa_id: Mapped[int] = mapped_column(Integer, ForeignKey("lavado_auto_empresa.id_empresa", ondelete="CASCADE"), nullable=False)
    servicio_solicitado_id: Mapped[int] = mapped_column(Integer, ForeignKey("lavado_auto_servicio.id_servicio", ondelete="CASCADE"), nullable=False)
    estado: Mapped[str] = mapped_column(String(20), default="pendiente", nullable=False)
    motivo_solicitud: Mapped[str] = mapped_column(Text, nullable=False)
    usuario_responsable: Mapped[str] = mapped_column(String(150), nullable=False)
    telefono_contacto: Mapped[str] = mapped_column(String(20), nullable=False)
    fecha_solicitud: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False)
    respuesta_admin: Mapped[str] = mapped_column(Text, default="", nullable=False)
    fecha_respuesta: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    service = relationship("Service")
