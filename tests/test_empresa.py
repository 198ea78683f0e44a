"""업체 API 테스트 — 예약 관리, QR, 서비스 포트폴리오, 프로필, 정산 조회.

Business API tests — Reservation list and status changes, QR payloads,
services and service requests, the business profile and the payout ledger.
"""

import json
from datetime import date, time, timedelta
from decimal import Decimal

from httpx import AsyncClient

from autonew.models.business import Business
from autonew.models.catalog import ServiceRequest
from autonew.models.liquidation import LiquidationDetail, LiquidationPeriod
from autonew.models.reservation import Reservation
from autonew.utils.password import verify_password
from tests.conftest import BUSINESS_PASSWORD, NOW, TODAY, TOMORROW, auth_header, make_reservation, reload

EMPRESA = "/api/empresa"


# ===== Reservations =====

class TestBusinessReservations:
    """업체 예약 목록과 상태 변경 테스트."""

    async def test_list_with_pagination(self, client: AsyncClient, db, customer, business, other_business, services, business_token):
        await make_reservation(db, customer, business, TODAY, time(10, 0), lines=[(services[0], services[0].precio)])
        await make_reservation(db, customer, business, TOMORROW, time(9, 0), estado="completado")
        await make_reservation(db, customer, business, TOMORROW, time(11, 0))
        await make_reservation(db, customer, other_business, TOMORROW, time(12, 0))

        res = await client.get(f"{EMPRESA}/reservas", params={"limite": 2}, headers=auth_header(business_token))
        assert res.status_code == 200
        data = res.json()["data"]
        assert data["paginacion"] == {"pagina": 1, "limite": 2, "totalRegistros": 3, "totalPaginas": 2}
        assert [item["hora"] for item in data["reservas"]] == ["11:00:00", "09:00:00"]

        res = await client.get(
            f"{EMPRESA}/reservas", params={"limite": 2, "pagina": 2}, headers=auth_header(business_token)
        )
        page_two = res.json()["data"]["reservas"]
        assert len(page_two) == 1
        assert page_two[0]["total"] == 30000
        assert page_two[0]["nombre_cliente"] == "Ana Cliente"

    async def test_filters(self, client: AsyncClient, db, customer, business, business_token):
        await make_reservation(db, customer, business, TODAY, time(10, 0))
        await make_reservation(db, customer, business, TOMORROW, time(9, 0), estado="completado")

        res = await client.get(f"{EMPRESA}/reservas", params={"estado": "completado"}, headers=auth_header(business_token))
        assert [item["estado"] for item in res.json()["data"]["reservas"]] == ["completado"]

        res = await client.get(f"{EMPRESA}/reservas", params={"fecha": TODAY.isoformat()}, headers=auth_header(business_token))
        assert [item["fecha"] for item in res.json()["data"]["reservas"]] == [TODAY.isoformat()]

    async def test_customer_token_rejected(self, client: AsyncClient, customer_token):
        res = await client.get(f"{EMPRESA}/reservas", headers=auth_header(customer_token))
        assert res.status_code == 403

    async def test_complete(self, client: AsyncClient, db, customer, business, business_token):
        reservation = await make_reservation(db, customer, business, TODAY, time(10, 0))
        res = await client.put(
            f"{EMPRESA}/reservas/{reservation.id_reserva}/estado",
            json={"estado": "completado"},
            headers=auth_header(business_token),
        )
        assert res.status_code == 200
        assert res.json()["data"]["estado"] == "completado"
        assert (await reload(db, Reservation, reservation.id_reserva)).estado == "completado"

    async def test_cancel(self, client: AsyncClient, db, customer, business, business_token):
        reservation = await make_reservation(db, customer, business, TOMORROW, time(10, 0))
        res = await client.put(
            f"{EMPRESA}/reservas/{reservation.id_reserva}/estado",
            json={"estado": "cancelada"},
            headers=auth_header(business_token),
        )
        assert res.status_code == 200
        assert (await reload(db, Reservation, reservation.id_reserva)).estado == "cancelada"

    async def test_terminal_state_conflicts(self, client: AsyncClient, db, customer, business, business_token):
        reservation = await make_reservation(db, customer, business, TODAY, time(10, 0), estado="completado")
        res = await client.put(
            f"{EMPRESA}/reservas/{reservation.id_reserva}/estado",
            json={"estado": "cancelada"},
            headers=auth_header(business_token),
        )
        assert res.status_code == 409
        assert res.json()["estado_actual"] == "completado"

    async def test_unknown_target_state(self, client: AsyncClient, db, customer, business, business_token):
        reservation = await make_reservation(db, customer, business, TODAY, time(10, 0))
        res = await client.put(
            f"{EMPRESA}/reservas/{reservation.id_reserva}/estado",
            json={"estado": "vencida"},
            headers=auth_header(business_token),
        )
        assert res.status_code == 400

    async def test_other_business_reservation(self, client: AsyncClient, db, customer, other_business, business_token):
        reservation = await make_reservation(db, customer, other_business, TODAY, time(10, 0))
        res = await client.put(
            f"{EMPRESA}/reservas/{reservation.id_reserva}/estado",
            json={"estado": "completado"},
            headers=auth_header(business_token),
        )
        assert res.status_code == 404


# ===== QR =====

class TestQrPayload:
    """QR 데이터 생성 테스트."""

    async def test_payload_fields(self, client: AsyncClient, db, customer, business, business_token):
        reservation = await make_reservation(db, customer, business, TODAY, time(10, 0))
        res = await client.get(f"{EMPRESA}/reservas/{reservation.id_reserva}/qr", headers=auth_header(business_token))
        assert res.status_code == 200
        payload = json.loads(res.json()["data"]["qrData"])
        assert payload == {
            "numero_reserva": reservation.numero_reserva,
            "id_reserva": reservation.id_reserva,
            "empresa": "Lavado Express",
            "cliente": "Ana Cliente",
            "fecha": TODAY.isoformat(),
            "hora": "10:00:00",
        }

    async def test_closed_reservation_conflicts(self, client: AsyncClient, db, customer, business, business_token):
        reservation = await make_reservation(db, customer, business, TODAY, time(10, 0), estado="cancelada")
        res = await client.get(f"{EMPRESA}/reservas/{reservation.id_reserva}/qr", headers=auth_header(business_token))
        assert res.status_code == 409
        assert res.json()["estado_actual"] == "cancelada"


# ===== Services and requests =====

class TestBusinessServices:
    """업체 서비스 포트폴리오와 요청 테스트."""

    async def test_assigned_services(self, client: AsyncClient, services, business_token):
        res = await client.get(f"{EMPRESA}/servicios", headers=auth_header(business_token))
        names = sorted(item["nombre_servicio"] for item in res.json()["data"])
        assert names == ["Aspirado interior", "Lavado exterior"]

    async def test_overview(self, client: AsyncClient, db, customer, business, services, business_token):
        await make_reservation(
            db, customer, business, TODAY, time(8, 0), estado="completado", lines=[(services[0], Decimal("30000"))]
        )
        res = await client.get(f"{EMPRESA}/servicios-completos", headers=auth_header(business_token))
        data = res.json()["data"]
        assigned = {item["nombre_servicio"]: item for item in data["serviciosAsignados"]}
        assert assigned["Lavado exterior"]["total_reservas"] == 1
        assert assigned["Lavado exterior"]["ingresos_generados"] == 30000
        assert [item["nombre_servicio"] for item in data["serviciosDisponibles"]] == ["Encerado"]
        assert data["solicitudesPendientes"] == []

    async def test_request_and_cancel(self, client: AsyncClient, db, services, business_token):
        body = {
            "servicioId": services[2].id_servicio,
            "motivo": "Clientes lo piden",
            "usuarioResponsable": "Carlos",
            "telefonoContacto": "3000000000",
        }
        res = await client.post(f"{EMPRESA}/servicios/solicitar", json=body, headers=auth_header(business_token))
        assert res.status_code == 201
        created = res.json()["data"]
        assert created["servicio"] == "Encerado"
        assert created["estado"] == "pendiente"

        res = await client.post(f"{EMPRESA}/servicios/solicitar", json=body, headers=auth_header(business_token))
        assert res.status_code == 400

        res = await client.get(f"{EMPRESA}/servicios-completos", headers=auth_header(business_token))
        assert len(res.json()["data"]["solicitudesPendientes"]) == 1

        res = await client.delete(
            f"{EMPRESA}/servicios/solicitud/{created['id_solicitud']}", headers=auth_header(business_token)
        )
        assert res.status_code == 200
        assert await reload(db, ServiceRequest, created["id_solicitud"]) is None

    async def test_request_already_assigned(self, client: AsyncClient, services, business_token):
        res = await client.post(
            f"{EMPRESA}/servicios/solicitar",
            json={
                "servicioId": services[0].id_servicio,
                "motivo": "x",
                "usuarioResponsable": "Carlos",
                "telefonoContacto": "3000000000",
            },
            headers=auth_header(business_token),
        )
        assert res.status_code == 400

    async def test_cancel_processed_request(self, client: AsyncClient, db, business, services, business_token):
        request = ServiceRequest(
            empresa_id=business.id_empresa,
            servicio_solicitado_id=services[2].id_servicio,
            estado="aprobada",
            motivo_solicitud="x",
            usuario_responsable="Carlos",
            telefono_contacto="3000000000",
        )
        db.add(request)
        await db.commit()
        res = await client.delete(f"{EMPRESA}/servicios/solicitud/{request.id_solicitud}", headers=auth_header(business_token))
        assert res.status_code == 404


# ===== Profile =====

class TestBusinessProfile:
    """업체 프로필 테스트."""

    async def test_full_profile_with_stats(self, client: AsyncClient, db, customer, business, services, business_token):
        await make_reservation(
            db, customer, business, TODAY, time(8, 0), estado="completado",
            lines=[(services[0], Decimal("30000")), (services[1], Decimal("20000"))],
        )
        await make_reservation(db, customer, business, TOMORROW, time(8, 0), lines=[(services[0], Decimal("30000"))])

        res = await client.get(f"{EMPRESA}/perfil", headers=auth_header(business_token))
        data = res.json()["data"]
        assert data["nombre_empresa"] == "Lavado Express"
        assert data["estadisticas"] == {"totalReservas": 2, "reservasCompletadas": 1, "ingresosTotales": 50000}
        assert data["datos_bancarios_verificados"] is False

    async def test_update_basic(self, client: AsyncClient, db, business, business_token):
        res = await client.put(
            f"{EMPRESA}/perfil/basico",
            json={
                "nombre_empresa": "Lavado Express Norte",
                "direccion": "Calle 100 # 15-20",
                "telefono": "6010000000",
                "email": "norte@test.com",
                "latitud": 4.7,
                "longitud": -74.04,
            },
            headers=auth_header(business_token),
        )
        assert res.status_code == 200
        assert res.json()["data"]["email"] == "norte@test.com"
        row = await reload(db, Business, business.id_empresa)
        assert row.nombre_empresa == "Lavado Express Norte"

    async def test_update_basic_duplicate_email(self, client: AsyncClient, business, other_business, business_token):
        res = await client.put(
            f"{EMPRESA}/perfil/basico",
            json={
                "nombre_empresa": "Lavado Express",
                "direccion": "Av. Principal 100",
                "telefono": "6017654321",
                "email": "brillo@test.com",
            },
            headers=auth_header(business_token),
        )
        assert res.status_code == 409

    async def test_banking_update_resets_verification(self, client: AsyncClient, db, business, business_token):
        business.datos_bancarios_verificados = True
        business.fecha_verificacion_bancaria = NOW - timedelta(days=30)
        await db.commit()

        res = await client.put(
            f"{EMPRESA}/perfil/bancario",
            json={"titular_cuenta": "Lavado Express SAS", "banco": "Banco Uno", "numero_cuenta": "123456789", "iban": ""},
            headers=auth_header(business_token),
        )
        assert res.status_code == 200
        data = res.json()["data"]
        assert data["banco"] == "Banco Uno"
        assert data["iban"] is None
        assert data["datos_bancarios_verificados"] is False
        assert data["fecha_verificacion_bancaria"] is None

    async def test_change_password(self, client: AsyncClient, db, business, business_token):
        res = await client.put(
            f"{EMPRESA}/perfil/contrasena",
            json={"contrasena_actual": BUSINESS_PASSWORD, "nueva_contrasena": "nueva456"},
            headers=auth_header(business_token),
        )
        assert res.status_code == 200
        row = await reload(db, Business, business.id_empresa)
        assert verify_password("nueva456", row.password_hash)

    async def test_change_password_wrong_current(self, client: AsyncClient, business, business_token):
        res = await client.put(
            f"{EMPRESA}/perfil/contrasena",
            json={"contrasena_actual": "equivocada", "nueva_contrasena": "nueva456"},
            headers=auth_header(business_token),
        )
        assert res.status_code == 401

    async def test_photo(self, client: AsyncClient, db, business, business_token, tmp_path, monkeypatch):
        from autonew.config import settings

        monkeypatch.setattr(settings, "LOCAL_UPLOADS_DIR", str(tmp_path / "uploads"))
        res = await client.put(
            f"{EMPRESA}/perfil/foto",
            files={"profile_image": ("local.jpg", b"\xff\xd8 fake", "image/jpeg")},
            headers=auth_header(business_token),
        )
        assert res.status_code == 200
        assert res.json()["data"]["profile_image"].endswith(".jpg")
        assert (await reload(db, Business, business.id_empresa)).profile_image

        res = await client.delete(f"{EMPRESA}/perfil/foto", headers=auth_header(business_token))
        assert res.status_code == 200
        assert (await reload(db, Business, business.id_empresa)).profile_image is None


# ===== Payouts =====

async def _seed_ledger(db, customer, business, services):
    """정산 기간 3개와 완료 예약(정산/미정산)을 생성합니다."""
    settled = await make_reservation(
        db, customer, business, TODAY - timedelta(days=20), time(9, 0), estado="completado",
        lines=[(services[0], Decimal("30000"))], pagado_empresa=True,
    )
    await make_reservation(
        db, customer, business, TODAY - timedelta(days=1), time(10, 0), estado="completado",
        lines=[(services[0], Decimal("30000")), (services[1], Decimal("20000"))],
    )
    await make_reservation(db, customer, business, TOMORROW, time(10, 0), lines=[(services[1], Decimal("20000"))])

    paid = LiquidationPeriod(
        empresa_id=business.id_empresa,
        fecha_inicio=date(2026, 2, 1),
        fecha_fin=date(2026, 2, 15),
        fecha_cierre=NOW - timedelta(days=20),
        fecha_pago=NOW - timedelta(days=15),
        total_bruto=Decimal("30000"),
        comision_autonew=Decimal("10"),
        total_comision=Decimal("3000"),
        total_neto=Decimal("27000"),
        estado="pagado",
        cantidad_reservas=1,
        metodo_pago="transferencia",
        referencia_pago="TRF-001",
    )
    closed = LiquidationPeriod(
        empresa_id=business.id_empresa,
        fecha_inicio=date(2026, 2, 16),
        fecha_fin=date(2026, 2, 28),
        total_neto=Decimal("45000"),
        estado="cerrado",
        cantidad_reservas=1,
    )
    active = LiquidationPeriod(
        empresa_id=business.id_empresa,
        fecha_inicio=date(2026, 3, 1),
        fecha_fin=date(2026, 3, 15),
        total_neto=Decimal("0"),
        estado="activo",
    )
    db.add_all([paid, closed, active])
    await db.commit()
    db.add(LiquidationDetail(
        periodo_id=paid.id_periodo,
        reserva_id=settled.id_reserva,
        valor_bruto=Decimal("30000"),
        valor_neto=Decimal("30000"),
        comision_aplicada=Decimal("10"),
        valor_comision=Decimal("3000"),
        valor_final_empresa=Decimal("27000"),
        fecha_servicio=settled.fecha,
    ))
    await db.commit()
    return paid, closed, active


class TestPayouts:
    """업체 정산 조회 테스트."""

    async def test_summary(self, client: AsyncClient, db, customer, business, services, business_token):
        await _seed_ledger(db, customer, business, services)
        res = await client.get(f"{EMPRESA}/pagos/resumen", headers=auth_header(business_token))
        assert res.status_code == 200
        data = res.json()["data"]
        assert data["pendienteActual"] == 0
        assert data["pendientePago"] == 45000
        assert data["totalPagado"] == 27000
        assert (data["periodosActivos"], data["periodosPendientes"], data["periodosPagados"]) == (1, 1, 1)
        assert data["ultimoPago"]["referencia_pago"] == "TRF-001"
        assert data["reservasSinLiquidar"] == {"cantidad": 1, "valor": 50000}

    async def test_empty_summary(self, client: AsyncClient, business, business_token):
        res = await client.get(f"{EMPRESA}/pagos/resumen", headers=auth_header(business_token))
        data = res.json()["data"]
        assert data["totalPagado"] == 0
        assert data["ultimoPago"] is None
        assert data["reservasSinLiquidar"] == {"cantidad": 0, "valor": 0}

    async def test_period_filters(self, client: AsyncClient, db, customer, business, services, business_token):
        await _seed_ledger(db, customer, business, services)

        res = await client.get(f"{EMPRESA}/pagos/periodos", headers=auth_header(business_token))
        assert [item["estado"] for item in res.json()["data"]] == ["activo", "cerrado", "pagado"]

        res = await client.get(f"{EMPRESA}/pagos/periodos", params={"estado": "pendiente"}, headers=auth_header(business_token))
        assert [item["estado"] for item in res.json()["data"]] == ["activo", "cerrado"]

        res = await client.get(f"{EMPRESA}/pagos/periodos", params={"estado": "pagado"}, headers=auth_header(business_token))
        assert [item["estado"] for item in res.json()["data"]] == ["pagado"]

        res = await client.get(f"{EMPRESA}/pagos/periodos", params={"estado": "todos"}, headers=auth_header(business_token))
        assert len(res.json()["data"]) == 3

    async def test_period_detail(self, client: AsyncClient, db, customer, business, services, business_token):
        paid, _, _ = await _seed_ledger(db, customer, business, services)
        res = await client.get(f"{EMPRESA}/pagos/periodos/{paid.id_periodo}", headers=auth_header(business_token))
        assert res.status_code == 200
        data = res.json()["data"]
        assert data["periodo"]["total_neto"] == 27000
        assert len(data["detalles"]) == 1
        assert data["detalles"][0]["valor_final_empresa"] == 27000
        assert data["detalles"][0]["cliente"] == "Ana Cliente"

    async def test_other_business_period(self, client: AsyncClient, db, customer, business, other_business, services):
        from tests.conftest import make_token

        paid, _, _ = await _seed_ledger(db, customer, business, services)
        token = make_token(other_business.id_empresa, other_business.email, "empresa")
        res = await client.get(f"{EMPRESA}/pagos/periodos/{paid.id_periodo}", headers=auth_header(token))
        assert res.status_code == 404

    async def test_settlement_lists(self, client: AsyncClient, db, customer, business, services, business_token):
        await _seed_ledger(db, customer, business, services)

        res = await client.get(f"{EMPRESA}/pagos/reservas-pendientes", headers=auth_header(business_token))
        pending = res.json()["data"]
        assert len(pending) == 1
        assert pending[0]["total_servicio"] == 50000
        assert sorted(line["nombre"] for line in pending[0]["servicios"]) == ["Aspirado interior", "Lavado exterior"]

        res = await client.get(f"{EMPRESA}/pagos/reservas-pagadas", headers=auth_header(business_token))
        settled = res.json()["data"]
        assert len(settled) == 1
        assert settled[0]["total_servicio"] == 30000
        assert settled[0]["cliente"] == "Ana Cliente"
