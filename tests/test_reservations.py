"""고객 예약 API 테스트 — 생성, 가격 책정, 만료, 취소, 일정 변경, 복구, QR 완료.

Customer reservation API tests — Creation with pricing and quota use,
the expiry sweep, cancel, reschedule, paid recovery and QR completion.
"""

from datetime import datetime, time, timedelta
from decimal import Decimal

from httpx import AsyncClient
from sqlalchemy import func, select

from autonew.models.reservation import Reservation
from autonew.models.subscription import Subscription
from autonew.utils.booking_code import BOOKING_CODE_PATTERN
from tests.conftest import (
    TODAY,
    TOMORROW,
    auth_header,
    make_reservation,
    make_subscription,
    reload,
)

RESERVAS = "/api/reservas"


def _booking(business, services, **overrides) -> dict:
    body = {
        "fecha": TOMORROW.isoformat(),
        "hora": "10:00:00",
        "empresa_id": business.id_empresa,
        "servicios": [service.id_servicio for service in services],
    }
    body.update(overrides)
    return body


async def _reservation_count(db) -> int:
    return (await db.execute(select(func.count()).select_from(Reservation))).scalar()


# ===== Create =====

class TestCreateReservation:
    """예약 생성 테스트."""

    async def test_create_success(self, client: AsyncClient, customer, customer_token, business, services):
        """예약 생성 — 번호 발급, 정가 항목, 기본값."""
        res = await client.post(
            f"{RESERVAS}/crear",
            json=_booking(business, services[:2]),
            headers=auth_header(customer_token),
        )
        assert res.status_code == 201
        data = res.json()["data"]
        assert BOOKING_CODE_PATTERN.match(data["numero_reserva"])
        assert data["numero_reserva"].startswith("ANW-B")
        assert data["estado"] == "pendiente"
        assert data["es_pago_individual"] is True
        assert data["tipo_vehiculo"] == "No especificado"
        assert data["conductor_asignado"] == "Ana Cliente"
        assert data["nombre_empresa"] == "Lavado Express"
        assert [line["precio_aplicado"] for line in data["servicios"]] == [30000, 20000]
        assert data["total"] == 50000

    async def test_plan_discount_only_on_plan_lines(self, client: AsyncClient, customer, customer_token, business, services):
        """할인율은 요금제 항목에만 적용."""
        body = _booking(business, [], servicios=[
            {"id_servicio": services[0].id_servicio, "es_servicio_plan": True, "descuento": 20},
            {"id_servicio": services[1].id_servicio, "es_servicio_plan": False, "descuento": 50},
        ])
        res = await client.post(f"{RESERVAS}/crear", json=body, headers=auth_header(customer_token))
        assert res.status_code == 201
        lines = res.json()["data"]["servicios"]
        assert lines[0]["precio_original"] == 30000
        assert lines[0]["precio_aplicado"] == 24000
        assert lines[0]["descuento"] == 20
        assert lines[1]["precio_aplicado"] == 20000
        assert lines[1]["descuento"] == 0
        assert res.json()["data"]["total"] == 44000

    async def test_business_booking_code_and_vehicle(self, client: AsyncClient, customer, customer_token, business, services):
        body = _booking(
            business,
            services[:1],
            es_reserva_empresarial=True,
            tipo_vehiculo="Camioneta",
            placa_vehiculo="ABC123",
            conductor_asignado="Luis Conductor",
        )
        res = await client.post(f"{RESERVAS}/crear", json=body, headers=auth_header(customer_token))
        assert res.status_code == 201
        data = res.json()["data"]
        assert data["numero_reserva"].startswith("ANW-E")
        assert data["tipo_vehiculo"] == "Camioneta"
        assert data["placa_vehiculo"] == "ABC123"
        assert data["conductor_asignado"] == "Luis Conductor"

    async def test_create_with_subscription_consumes_quota(
        self, client: AsyncClient, db, customer, customer_token, business, services, subscription
    ):
        """구독 사용 예약 — 한도 1 소모, 개별 결제 아님."""
        body = _booking(business, services[:1], usar_suscripcion=True, suscripcion_id=subscription.id_suscripcion)
        res = await client.post(f"{RESERVAS}/crear", json=body, headers=auth_header(customer_token))
        assert res.status_code == 201
        data = res.json()["data"]
        assert data["suscripcion_utilizada_id"] == subscription.id_suscripcion
        assert data["es_pago_individual"] is False

        row = await reload(db, Subscription, subscription.id_suscripcion)
        assert row.servicios_utilizados_mes == 1

    async def test_quota_exhausted(self, client: AsyncClient, db, customer, customer_token, business, services, plan):
        """월 한도 소진 → 409, 예약 생성 안 됨."""
        sub = await make_subscription(db, customer, plan, used=2)
        body = _booking(business, services[:1], usar_suscripcion=True, suscripcion_id=sub.id_suscripcion)
        res = await client.post(f"{RESERVAS}/crear", json=body, headers=auth_header(customer_token))
        assert res.status_code == 409
        assert await _reservation_count(db) == 0

        row = await reload(db, Subscription, sub.id_suscripcion)
        assert row.servicios_utilizados_mes == 2

    async def test_unlimited_plan_never_exhausts(
        self, client: AsyncClient, db, customer, customer_token, business, services, unlimited_plan
    ):
        sub = await make_subscription(db, customer, unlimited_plan, used=50)
        body = _booking(business, services[:1], usar_suscripcion=True, suscripcion_id=sub.id_suscripcion)
        res = await client.post(f"{RESERVAS}/crear", json=body, headers=auth_header(customer_token))
        assert res.status_code == 201

        row = await reload(db, Subscription, sub.id_suscripcion)
        assert row.servicios_utilizados_mes == 51

    async def test_someone_elses_subscription(
        self, client: AsyncClient, db, customer, customer_token, other_customer, business, services, plan
    ):
        sub = await make_subscription(db, other_customer, plan)
        body = _booking(business, services[:1], usar_suscripcion=True, suscripcion_id=sub.id_suscripcion)
        res = await client.post(f"{RESERVAS}/crear", json=body, headers=auth_header(customer_token))
        assert res.status_code == 404

    async def test_unknown_service_rolls_back_everything(
        self, client: AsyncClient, db, customer, customer_token, business, services, subscription
    ):
        """없는 서비스 → 404, 예약과 한도 사용 모두 롤백."""
        body = _booking(business, [], servicios=[services[0].id_servicio, 9999],
                        usar_suscripcion=True, suscripcion_id=subscription.id_suscripcion)
        res = await client.post(f"{RESERVAS}/crear", json=body, headers=auth_header(customer_token))
        assert res.status_code == 404
        assert await _reservation_count(db) == 0

        row = await reload(db, Subscription, subscription.id_suscripcion)
        assert row.servicios_utilizados_mes == 0

    async def test_slot_taken(self, client: AsyncClient, db, customer, customer_token, other_customer, business, services):
        """같은 업체, 같은 시각에 열린 예약이 있으면 409."""
        await make_reservation(db, other_customer, business, TOMORROW, time(10, 0))
        res = await client.post(f"{RESERVAS}/crear", json=_booking(business, services[:1]), headers=auth_header(customer_token))
        assert res.status_code == 409

    async def test_cancelled_reservation_frees_slot(
        self, client: AsyncClient, db, customer, customer_token, other_customer, business, services
    ):
        await make_reservation(db, other_customer, business, TOMORROW, time(10, 0), estado="cancelada")
        res = await client.post(f"{RESERVAS}/crear", json=_booking(business, services[:1]), headers=auth_header(customer_token))
        assert res.status_code == 201

    async def test_unknown_business(self, client: AsyncClient, customer, customer_token, services):
        body = {"fecha": TOMORROW.isoformat(), "hora": "10:00:00", "empresa_id": 9999, "servicios": [services[0].id_servicio]}
        res = await client.post(f"{RESERVAS}/crear", json=body, headers=auth_header(customer_token))
        assert res.status_code == 404

    async def test_unverified_business(self, client: AsyncClient, db, customer, customer_token, business, services):
        """미검증 업체는 예약 불가 — 404, 예약 행 없음."""
        business.verificada = False
        await db.commit()
        res = await client.post(f"{RESERVAS}/crear", json=_booking(business, services[:1]), headers=auth_header(customer_token))
        assert res.status_code == 404
        assert await _reservation_count(db) == 0

    async def test_empty_services_rejected(self, client: AsyncClient, customer, customer_token, business):
        res = await client.post(
            f"{RESERVAS}/crear",
            json=_booking(business, [], servicios=[]),
            headers=auth_header(customer_token),
        )
        assert res.status_code == 400
        assert res.json()["error"] == "validation_error"

    async def test_requires_customer(self, client: AsyncClient, business, business_token, services):
        res = await client.post(f"{RESERVAS}/crear", json=_booking(business, services[:1]), headers=auth_header(business_token))
        assert res.status_code == 403


# ===== List / Lookup / Expiry =====

class TestListAndExpiry:
    """고객 예약 조회와 만료 처리 테스트."""

    async def test_list_expires_overdue(self, client: AsyncClient, db, customer, customer_token, business):
        """예약 시각 + 1시간이 지난 대기 예약은 조회 시 vencida."""
        overdue = await make_reservation(db, customer, business, TODAY, time(7, 0))
        within_grace = await make_reservation(db, customer, business, TODAY, time(8, 0))
        future = await make_reservation(db, customer, business, TOMORROW, time(9, 0))

        res = await client.get(f"{RESERVAS}/usuario/{customer.id_usuario}", headers=auth_header(customer_token))
        assert res.status_code == 200
        states = {item["id_reserva"]: item["estado"] for item in res.json()["data"]}
        assert states[overdue.id_reserva] == "vencida"
        assert states[within_grace.id_reserva] == "pendiente"
        assert states[future.id_reserva] == "pendiente"

    async def test_sweep_leaves_terminal_states(self, client: AsyncClient, db, customer, customer_token, business):
        done = await make_reservation(db, customer, business, TODAY - timedelta(days=3), time(10, 0), estado="completado")
        await client.get(f"{RESERVAS}/usuario/{customer.id_usuario}", headers=auth_header(customer_token))
        assert (await reload(db, Reservation, done.id_reserva)).estado == "completado"

    async def test_legacy_confirmed_expires(self, client: AsyncClient, db, customer, customer_token, business):
        old = await make_reservation(db, customer, business, TODAY - timedelta(days=1), time(10, 0), estado="confirmada")
        await client.get(f"{RESERVAS}/usuario/{customer.id_usuario}", headers=auth_header(customer_token))
        assert (await reload(db, Reservation, old.id_reserva)).estado == "vencida"

    async def test_list_filtered_by_state(self, client: AsyncClient, db, customer, customer_token, business):
        await make_reservation(db, customer, business, TOMORROW, time(9, 0))
        await make_reservation(db, customer, business, TOMORROW, time(11, 0), estado="cancelada")
        res = await client.get(
            f"{RESERVAS}/usuario/{customer.id_usuario}",
            params={"estado": "cancelada"},
            headers=auth_header(customer_token),
        )
        assert [item["estado"] for item in res.json()["data"]] == ["cancelada"]

    async def test_list_other_user_forbidden(self, client: AsyncClient, customer_token, other_customer):
        res = await client.get(f"{RESERVAS}/usuario/{other_customer.id_usuario}", headers=auth_header(customer_token))
        assert res.status_code == 403

    async def test_get_by_code(self, client: AsyncClient, db, customer, customer_token, business, services):
        r = await make_reservation(db, customer, business, TOMORROW, time(9, 0), lines=[(services[0], Decimal("30000"))])
        res = await client.get(f"{RESERVAS}/por-numero/{r.numero_reserva}", headers=auth_header(customer_token))
        assert res.status_code == 200
        assert res.json()["data"]["total"] == 30000

    async def test_get_by_code_of_other_user_is_not_found(self, client: AsyncClient, db, customer_token, other_customer, business):
        r = await make_reservation(db, other_customer, business, TOMORROW, time(9, 0))
        res = await client.get(f"{RESERVAS}/por-numero/{r.numero_reserva}", headers=auth_header(customer_token))
        assert res.status_code == 404


# ===== Cancel =====

class TestCancel:
    """예약 취소 테스트."""

    async def test_cancel_pending(self, client: AsyncClient, db, customer, customer_token, business):
        r = await make_reservation(db, customer, business, TOMORROW, time(9, 0))
        res = await client.put(f"{RESERVAS}/cancelar/{r.id_reserva}", headers=auth_header(customer_token))
        assert res.status_code == 200
        assert res.json()["data"]["estado"] == "cancelada"

    async def test_cancel_twice_conflicts(self, client: AsyncClient, db, customer, customer_token, business):
        r = await make_reservation(db, customer, business, TOMORROW, time(9, 0), estado="cancelada")
        res = await client.put(f"{RESERVAS}/cancelar/{r.id_reserva}", headers=auth_header(customer_token))
        assert res.status_code == 409
        assert res.json()["estado_actual"] == "cancelada"

    async def test_cancel_overdue_conflicts(self, client: AsyncClient, db, customer, customer_token, business):
        """지난 예약은 먼저 만료되어 취소 불가."""
        r = await make_reservation(db, customer, business, TODAY - timedelta(days=1), time(9, 0))
        res = await client.put(f"{RESERVAS}/cancelar/{r.id_reserva}", headers=auth_header(customer_token))
        assert res.status_code == 409
        assert res.json()["estado_actual"] == "vencida"

    async def test_cancel_other_users(self, client: AsyncClient, db, customer_token, other_customer, business):
        r = await make_reservation(db, other_customer, business, TOMORROW, time(9, 0))
        res = await client.put(f"{RESERVAS}/cancelar/{r.id_reserva}", headers=auth_header(customer_token))
        assert res.status_code == 403

    async def test_cancel_unknown(self, client: AsyncClient, customer, customer_token):
        res = await client.put(f"{RESERVAS}/cancelar/9999", headers=auth_header(customer_token))
        assert res.status_code == 404


# ===== Reschedule =====

class TestReschedule:
    """예약 일정 변경 테스트."""

    async def test_reschedule_to_free_slot(
        self, client: AsyncClient, db, customer, customer_token, other_customer_token, business, services
    ):
        """일정 변경 후 이전 시간대는 다른 고객이 예약 가능."""
        r = await make_reservation(db, customer, business, TOMORROW, time(9, 0))
        res = await client.put(
            f"{RESERVAS}/reagendar/{r.id_reserva}",
            json={"nueva_fecha": TOMORROW.isoformat(), "nueva_hora": "15:00:00"},
            headers=auth_header(customer_token),
        )
        assert res.status_code == 200
        assert res.json()["data"]["reserva"]["hora"] == "15:00:00"

        res = await client.post(
            f"{RESERVAS}/crear",
            json=_booking(business, services[:1], hora="09:00:00"),
            headers=auth_header(other_customer_token),
        )
        assert res.status_code == 201

    async def test_own_slot_does_not_block(self, client: AsyncClient, db, customer, customer_token, business):
        r = await make_reservation(db, customer, business, TOMORROW, time(9, 0))
        res = await client.put(
            f"{RESERVAS}/reagendar/{r.id_reserva}",
            json={"nueva_fecha": TOMORROW.isoformat(), "nueva_hora": "09:00:00"},
            headers=auth_header(customer_token),
        )
        assert res.status_code == 200

    async def test_reschedule_to_taken_slot(self, client: AsyncClient, db, customer, customer_token, other_customer, business):
        r = await make_reservation(db, customer, business, TOMORROW, time(9, 0))
        await make_reservation(db, other_customer, business, TOMORROW, time(15, 0))
        res = await client.put(
            f"{RESERVAS}/reagendar/{r.id_reserva}",
            json={"nueva_fecha": TOMORROW.isoformat(), "nueva_hora": "15:00:00"},
            headers=auth_header(customer_token),
        )
        assert res.status_code == 409

        row = await reload(db, Reservation, r.id_reserva)
        assert row.hora == time(9, 0)
        assert row.estado == "pendiente"

    async def test_reschedule_into_past(self, client: AsyncClient, db, customer, customer_token, business):
        r = await make_reservation(db, customer, business, TOMORROW, time(9, 0))
        res = await client.put(
            f"{RESERVAS}/reagendar/{r.id_reserva}",
            json={"nueva_fecha": TODAY.isoformat(), "nueva_hora": "08:00:00"},
            headers=auth_header(customer_token),
        )
        assert res.status_code == 400

    async def test_reschedule_completed(self, client: AsyncClient, db, customer, customer_token, business):
        r = await make_reservation(db, customer, business, TOMORROW, time(9, 0), estado="completado")
        res = await client.put(
            f"{RESERVAS}/reagendar/{r.id_reserva}",
            json={"nueva_fecha": TOMORROW.isoformat(), "nueva_hora": "12:00:00"},
            headers=auth_header(customer_token),
        )
        assert res.status_code == 409


# ===== Recovery =====

class TestRecovery:
    """만료 예약 복구 테스트."""

    async def _expired(self, db, customer, business, services):
        return await make_reservation(
            db, customer, business, TODAY - timedelta(days=1), time(10, 0),
            estado="vencida",
            lines=[(services[0], Decimal("30000")), (services[1], Decimal("10000"))],
        )

    async def test_quote(self, client: AsyncClient, db, customer, customer_token, business, services):
        """수수료 견적 = 적용가 합계의 25%."""
        r = await self._expired(db, customer, business, services)
        res = await client.get(f"{RESERVAS}/recargo-recuperacion/{r.id_reserva}", headers=auth_header(customer_token))
        assert res.status_code == 200
        data = res.json()["data"]
        assert data["total_original"] == 40000
        assert data["porcentaje_recargo"] == 25
        assert data["recargo"] == 10000
        assert data["total_a_pagar"] == 10000
        assert data["reserva"]["fecha_original"] == (TODAY - timedelta(days=1)).isoformat()

    async def test_quote_for_pending_conflicts(self, client: AsyncClient, db, customer, customer_token, business):
        r = await make_reservation(db, customer, business, TOMORROW, time(9, 0))
        res = await client.get(f"{RESERVAS}/recargo-recuperacion/{r.id_reserva}", headers=auth_header(customer_token))
        assert res.status_code == 409

    async def test_recover_requires_payment(self, client: AsyncClient, db, customer, customer_token, business, services):
        r = await self._expired(db, customer, business, services)
        res = await client.put(
            f"{RESERVAS}/recuperar-vencida/{r.id_reserva}",
            json={"nueva_fecha": TOMORROW.isoformat(), "nueva_hora": "11:00:00", "pago_confirmado": False},
            headers=auth_header(customer_token),
        )
        assert res.status_code == 400

        row = await reload(db, Reservation, r.id_reserva)
        assert row.estado == "vencida"
        assert row.fecha == TODAY - timedelta(days=1)
        assert row.hora == time(10, 0)
        assert row.fue_recuperada is False
        assert row.recargo_recuperacion == 0

    async def test_recover_success(self, client: AsyncClient, db, customer, customer_token, business, services):
        """복구 — 새 시각, pendiente, 수수료 기록."""
        r = await self._expired(db, customer, business, services)
        res = await client.put(
            f"{RESERVAS}/recuperar-vencida/{r.id_reserva}",
            json={"nueva_fecha": TOMORROW.isoformat(), "nueva_hora": "11:00:00", "pago_confirmado": True},
            headers=auth_header(customer_token),
        )
        assert res.status_code == 200
        data = res.json()["data"]
        assert data["recargo_aplicado"] == 10000
        assert data["total_original"] == 40000
        reserva = data["reserva"]
        assert reserva["estado"] == "pendiente"
        assert reserva["fue_recuperada"] is True
        assert reserva["recargo_recuperacion"] == 10000
        assert reserva["fecha"] == TOMORROW.isoformat()
        assert reserva["hora"] == "11:00:00"

    async def test_expired_rows_do_not_block_recovery(
        self, client: AsyncClient, db, customer, customer_token, other_customer, business, services
    ):
        r = await self._expired(db, customer, business, services)
        await make_reservation(db, other_customer, business, TOMORROW, time(11, 0), estado="vencida")
        res = await client.put(
            f"{RESERVAS}/recuperar-vencida/{r.id_reserva}",
            json={"nueva_fecha": TOMORROW.isoformat(), "nueva_hora": "11:00:00", "pago_confirmado": True},
            headers=auth_header(customer_token),
        )
        assert res.status_code == 200

    async def test_recover_into_taken_slot(
        self, client: AsyncClient, db, customer, customer_token, other_customer, business, services
    ):
        r = await self._expired(db, customer, business, services)
        await make_reservation(db, other_customer, business, TOMORROW, time(11, 0))
        res = await client.put(
            f"{RESERVAS}/recuperar-vencida/{r.id_reserva}",
            json={"nueva_fecha": TOMORROW.isoformat(), "nueva_hora": "11:00:00", "pago_confirmado": True},
            headers=auth_header(customer_token),
        )
        assert res.status_code == 409


# ===== QR Completion =====

class TestQrCompletion:
    """QR 스캔 완료 테스트."""

    async def test_complete_same_day(self, client: AsyncClient, db, customer, customer_token, business):
        r = await make_reservation(db, customer, business, TODAY, time(10, 0))
        res = await client.post(
            f"{RESERVAS}/verificar-qr",
            json={"numero_reserva": r.numero_reserva},
            headers=auth_header(customer_token),
        )
        assert res.status_code == 200
        data = res.json()["data"]
        assert data["estado"] == "completado"
        assert data["empresa"] == "Lavado Express"
        assert data["cliente"] == "Ana Cliente"
        assert (await reload(db, Reservation, r.id_reserva)).estado == "completado"

    async def test_complete_by_id(self, client: AsyncClient, db, customer, customer_token, business):
        r = await make_reservation(db, customer, business, TODAY, time(10, 0))
        res = await client.post(
            f"{RESERVAS}/verificar-qr",
            json={"id_reserva": r.id_reserva},
            headers=auth_header(customer_token),
        )
        assert res.status_code == 200

    async def test_wrong_day(self, client: AsyncClient, db, customer, customer_token, business):
        """예약일이 아니면 400, 두 날짜 포함."""
        r = await make_reservation(db, customer, business, TOMORROW, time(10, 0))
        res = await client.post(
            f"{RESERVAS}/verificar-qr",
            json={"numero_reserva": r.numero_reserva},
            headers=auth_header(customer_token),
        )
        assert res.status_code == 400
        body = res.json()
        assert body["fecha_reserva"] == TOMORROW.isoformat()
        assert body["fecha_actual"] == TODAY.isoformat()

    async def test_other_users_reservation(self, client: AsyncClient, db, customer_token, other_customer, business):
        r = await make_reservation(db, other_customer, business, TODAY, time(10, 0))
        res = await client.post(
            f"{RESERVAS}/verificar-qr",
            json={"numero_reserva": r.numero_reserva},
            headers=auth_header(customer_token),
        )
        assert res.status_code == 403

    async def test_already_completed(self, client: AsyncClient, db, customer, customer_token, business):
        r = await make_reservation(db, customer, business, TODAY, time(10, 0), estado="completado")
        res = await client.post(
            f"{RESERVAS}/verificar-qr",
            json={"numero_reserva": r.numero_reserva},
            headers=auth_header(customer_token),
        )
        assert res.status_code == 409
        assert res.json()["estado_actual"] == "completado"

    async def test_missing_identifiers(self, client: AsyncClient, customer, customer_token):
        res = await client.post(f"{RESERVAS}/verificar-qr", json={}, headers=auth_header(customer_token))
        assert res.status_code == 400

    async def test_unknown_code(self, client: AsyncClient, customer, customer_token):
        res = await client.post(
            f"{RESERVAS}/verificar-qr",
            json={"numero_reserva": "ANW-B0000000"},
            headers=auth_header(customer_token),
        )
        assert res.status_code == 404


# ===== Full lifecycle =====

class TestExpiryRecoveryFlow:
    """가입 → 로그인 → 예약 → 만료 → 복구 전체 흐름."""

    async def test_flow(self, client: AsyncClient, clock, business, services):
        res = await client.post("/api/auth/register", json={
            "nombre_completo": "Carla Nueva",
            "nombre_usuario": "carla",
            "correo": "carla@test.com",
            "password": "secreto1",
        })
        assert res.status_code == 201

        res = await client.post("/api/auth/login", json={"correo": "carla@test.com", "password": "secreto1"})
        assert res.status_code == 200
        headers = auth_header(res.json()["data"]["token"])

        res = await client.post(f"{RESERVAS}/crear", json=_booking(business, services[:1]), headers=headers)
        assert res.status_code == 201
        created = res.json()["data"]

        res = await client.get(f"{RESERVAS}/por-numero/{created['numero_reserva']}", headers=headers)
        data = res.json()["data"]
        assert data["estado"] == "pendiente"
        assert data["total"] == 30000

        # 예약 시각 + 1시간 경과
        clock.set(datetime.combine(TOMORROW, time(11, 1)))
        res = await client.get(f"{RESERVAS}/por-numero/{created['numero_reserva']}", headers=headers)
        assert res.json()["data"]["estado"] == "vencida"

        new_date = TOMORROW + timedelta(days=1)
        res = await client.put(
            f"{RESERVAS}/recuperar-vencida/{created['id_reserva']}",
            json={"nueva_fecha": new_date.isoformat(), "nueva_hora": "10:00:00", "pago_confirmado": True},
            headers=headers,
        )
        assert res.status_code == 200
        reserva = res.json()["data"]["reserva"]
        assert reserva["estado"] == "pendiente"
        assert reserva["fue_recuperada"] is True
        assert reserva["recargo_recuperacion"] == 7500
        assert reserva["fecha"] == new_date.isoformat()
