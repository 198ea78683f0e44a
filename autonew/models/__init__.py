"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package ensures all models are registered with the
SQLAlchemy metadata, which is required for Alembic migrations and
relationship resolution.

Modules:
    user: 고객 계정과 잠금 필드 (Customers and lockout columns)
    business: 세차 업체 (Car-wash businesses)
    catalog: 서비스, 업체-서비스 연결, 서비스 요청 (Services, links, requests)
    reservation: 예약과 서비스 항목 (Reservations and line items)
    subscription: 요금제, 구독, 결제 이력 (Plans, subscriptions, payments)
    liquidation: 정산 기간과 내역 (Payout periods and details)
    rating: 업체 평가 (Ratings)
"""

from autonew.models.user import User
from autonew.models.business import Business
from autonew.models.catalog import Service, BusinessService, ServiceRequest
from autonew.models.subscription import Plan, PlanService, Subscription, SubscriptionPayment
from autonew.models.reservation import Reservation, ReservationService, ReservationStatus
from autonew.models.liquidation import LiquidationPeriod, LiquidationDetail
from autonew.models.rating import Rating

__all__ = [
    "User",
    "Business",
    "Service", "BusinessService", "ServiceRequest",
    "Plan", "PlanService", "Subscription", "SubscriptionPayment",
    "Reservation", "ReservationService", "ReservationStatus",
    "LiquidationPeriod", "LiquidationDetail",
    "Rating",
]
