"""평가 API 테스트 — 완료 예약 평가와 조회, 예약부터 평가까지의 흐름.

Ratings API tests, plus the full flow: book, show QR, scan, rate.
"""

import json
from datetime import time

from httpx import AsyncClient

from tests.conftest import TODAY, auth_header, make_reservation

CALIFICACIONES = "/api/calificaciones"


class TestCreateRating:
    """평가 생성 테스트."""

    async def test_rate_completed_reservation(self, client: AsyncClient, db, customer, customer_token, business):
        reservation = await make_reservation(db, customer, business, TODAY, time(8, 0), estado="completado")
        res = await client.post(
            f"{CALIFICACIONES}/crear",
            json={"reserva_id": reservation.id_reserva, "puntuacion": 5, "comentario": "Excelente"},
            headers=auth_header(customer_token),
        )
        assert res.status_code == 201
        data = res.json()["data"]
        assert data["empresa_id"] == business.id_empresa
        assert data["puntuacion"] == 5

    async def test_business_taken_from_reservation(
        self, client: AsyncClient, db, customer, customer_token, business, other_business
    ):
        reservation = await make_reservation(db, customer, business, TODAY, time(8, 0), estado="completado")
        res = await client.post(
            f"{CALIFICACIONES}/crear",
            json={"reserva_id": reservation.id_reserva, "empresa_id": other_business.id_empresa, "puntuacion": 4},
            headers=auth_header(customer_token),
        )
        assert res.status_code == 201
        assert res.json()["data"]["empresa_id"] == business.id_empresa
        assert res.json()["data"]["comentario"] == ""

    async def test_not_completed(self, client: AsyncClient, db, customer, customer_token, business):
        reservation = await make_reservation(db, customer, business, TODAY, time(10, 0))
        res = await client.post(
            f"{CALIFICACIONES}/crear",
            json={"reserva_id": reservation.id_reserva, "puntuacion": 4},
            headers=auth_header(customer_token),
        )
        assert res.status_code == 409
        assert res.json()["estado_actual"] == "pendiente"

    async def test_duplicate(self, client: AsyncClient, db, customer, customer_token, business):
        reservation = await make_reservation(db, customer, business, TODAY, time(8, 0), estado="completado")
        body = {"reserva_id": reservation.id_reserva, "puntuacion": 4}
        first = await client.post(f"{CALIFICACIONES}/crear", json=body, headers=auth_header(customer_token))
        assert first.status_code == 201
        second = await client.post(f"{CALIFICACIONES}/crear", json=body, headers=auth_header(customer_token))
        assert second.status_code == 409
        assert second.json()["error"] == "duplicate"

    async def test_other_customers_reservation(
        self, client: AsyncClient, db, customer, other_customer_token, business
    ):
        reservation = await make_reservation(db, customer, business, TODAY, time(8, 0), estado="completado")
        res = await client.post(
            f"{CALIFICACIONES}/crear",
            json={"reserva_id": reservation.id_reserva, "puntuacion": 3},
            headers=auth_header(other_customer_token),
        )
        assert res.status_code == 403

    async def test_score_out_of_range(self, client: AsyncClient, db, customer, customer_token, business):
        reservation = await make_reservation(db, customer, business, TODAY, time(8, 0), estado="completado")
        for score in (0, 6):
            res = await client.post(
                f"{CALIFICACIONES}/crear",
                json={"reserva_id": reservation.id_reserva, "puntuacion": score},
                headers=auth_header(customer_token),
            )
            assert res.status_code == 400

    async def test_unknown_reservation(self, client: AsyncClient, customer, customer_token):
        res = await client.post(
            f"{CALIFICACIONES}/crear",
            json={"reserva_id": 9999, "puntuacion": 5},
            headers=auth_header(customer_token),
        )
        assert res.status_code == 404

    async def test_business_cannot_rate(self, client: AsyncClient, db, customer, business, business_token):
        reservation = await make_reservation(db, customer, business, TODAY, time(8, 0), estado="completado")
        res = await client.post(
            f"{CALIFICACIONES}/crear",
            json={"reserva_id": reservation.id_reserva, "puntuacion": 5},
            headers=auth_header(business_token),
        )
        assert res.status_code == 403


class TestGetRating:
    """평가 조회 테스트."""

    async def test_null_when_not_rated(self, client: AsyncClient, db, customer, customer_token, business):
        reservation = await make_reservation(db, customer, business, TODAY, time(8, 0), estado="completado")
        res = await client.get(f"{CALIFICACIONES}/reserva/{reservation.id_reserva}", headers=auth_header(customer_token))
        assert res.status_code == 200
        assert res.json()["data"] is None

    async def test_business_can_read(self, client: AsyncClient, db, customer, customer_token, business, business_token):
        reservation = await make_reservation(db, customer, business, TODAY, time(8, 0), estado="completado")
        await client.post(
            f"{CALIFICACIONES}/crear",
            json={"reserva_id": reservation.id_reserva, "puntuacion": 2, "comentario": "Demorado"},
            headers=auth_header(customer_token),
        )
        res = await client.get(f"{CALIFICACIONES}/reserva/{reservation.id_reserva}", headers=auth_header(business_token))
        assert res.json()["data"]["comentario"] == "Demorado"

    async def test_requires_token(self, client: AsyncClient):
        res = await client.get(f"{CALIFICACIONES}/reserva/1")
        assert res.status_code == 401


class TestBookingToRatingFlow:
    """예약 → QR 표시 → 스캔 완료 → 평가 전체 흐름."""

    async def test_flow(self, client: AsyncClient, customer, customer_token, business, business_token, services):
        res = await client.post(
            "/api/reservas/crear",
            json={
                "fecha": TODAY.isoformat(),
                "hora": "11:00:00",
                "empresa_id": business.id_empresa,
                "servicios": [services[0].id_servicio, services[1].id_servicio],
                "placa_vehiculo": "ABC123",
            },
            headers=auth_header(customer_token),
        )
        assert res.status_code == 201
        reserva_id = res.json()["data"]["id_reserva"]
        assert res.json()["data"]["total"] == 50000

        res = await client.get(f"/api/empresa/reservas/{reserva_id}/qr", headers=auth_header(business_token))
        qr = json.loads(res.json()["data"]["qrData"])

        res = await client.post(
            "/api/reservas/verificar-qr",
            json={"numero_reserva": qr["numero_reserva"]},
            headers=auth_header(customer_token),
        )
        assert res.status_code == 200
        assert res.json()["data"]["estado"] == "completado"

        res = await client.post(
            f"{CALIFICACIONES}/crear",
            json={"reserva_id": reserva_id, "puntuacion": 5},
            headers=auth_header(customer_token),
        )
        assert res.status_code == 201

        res = await client.get("/api/empresa/pagos/resumen", headers=auth_header(business_token))
        assert res.json()["data"]["reservasSinLiquidar"] == {"cantidad": 1, "valor": 50000}
