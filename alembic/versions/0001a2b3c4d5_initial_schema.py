"""initial_schema

Revision ID: 0001a2b3c4d5
Revises:
Create Date: 2026-10-18 09:00:00.000000

세차 예약 시스템 초기 스키마 — 기존 Django 백오피스와 공유하는 lavado_auto_* 테이블.
Initial schema for fresh databases. Table and column names match the
lavado_auto_* tables shared with the Django back-office.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001a2b3c4d5'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _lockout_columns() -> list[sa.Column]:
    # 로그인 잠금 필드 — Progressive lockout columns (customers and businesses)
    return [
        sa.Column('failed_login_attempts', sa.Integer(), server_default='0', nullable=False),
        sa.Column('last_failed_login', sa.DateTime(), nullable=True),
        sa.Column('lockout_time', sa.DateTime(), nullable=True),
        sa.Column('first_warning_sent', sa.Boolean(), server_default=sa.false(), nullable=False),
    ]


def upgrade() -> None:
    # 고객 — Customers
    op.create_table(
        'lavado_auto_usuario',
        sa.Column('id_usuario', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('nombre_completo', sa.String(150), nullable=False),
        sa.Column('nombre_usuario', sa.String(150), nullable=False, unique=True),
        sa.Column('correo', sa.String(254), nullable=False, unique=True),
        sa.Column('password', sa.String(128), nullable=False),
        sa.Column('telefono', sa.String(20), server_default='', nullable=False),
        sa.Column('direccion', sa.String(255), server_default='', nullable=False),
        sa.Column('rol', sa.String(20), server_default='cliente', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('is_staff', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('is_superuser', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('fecha_registro', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('profile_picture', sa.String(500), nullable=True),
        *_lockout_columns(),
    )

    # 업체 — Businesses with banking and tax data
    op.create_table(
        'lavado_auto_empresa',
        sa.Column('id_empresa', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('nombre_empresa', sa.String(200), nullable=False),
        sa.Column('email', sa.String(254), nullable=False, unique=True),
        sa.Column('contrasena', sa.String(128), nullable=False),
        sa.Column('direccion', sa.String(255), server_default='', nullable=False),
        sa.Column('telefono', sa.String(20), server_default='', nullable=False),
        sa.Column('verificada', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('latitud', sa.Float(), nullable=True),
        sa.Column('longitud', sa.Float(), nullable=True),
        sa.Column('profile_image', sa.String(500), nullable=True),
        sa.Column('fecha_registro', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('titular_cuenta', sa.String(200), nullable=True),
        sa.Column('tipo_documento_titular', sa.String(20), nullable=True),
        sa.Column('numero_documento_titular', sa.String(50), nullable=True),
        sa.Column('banco', sa.String(100), nullable=True),
        sa.Column('tipo_cuenta', sa.String(20), nullable=True),
        sa.Column('numero_cuenta', sa.String(50), nullable=True),
        sa.Column('swift_code', sa.String(20), nullable=True),
        sa.Column('iban', sa.String(50), nullable=True),
        sa.Column('nit_empresa', sa.String(30), nullable=True),
        sa.Column('razon_social', sa.String(200), nullable=True),
        sa.Column('regimen_tributario', sa.String(50), nullable=True),
        sa.Column('email_facturacion', sa.String(254), nullable=True),
        sa.Column('telefono_facturacion', sa.String(20), nullable=True),
        sa.Column('responsable_pagos', sa.String(150), nullable=True),
        sa.Column('datos_bancarios_verificados', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('fecha_verificacion_bancaria', sa.DateTime(), nullable=True),
        sa.Column('notas_bancarias', sa.Text(), nullable=True),
        *_lockout_columns(),
    )

    # 서비스 카탈로그 — Service catalog
    op.create_table(
        'lavado_auto_servicio',
        sa.Column('id_servicio', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('nombre_servicio', sa.String(150), nullable=False),
        sa.Column('descripcion', sa.Text(), nullable=True),
        sa.Column('precio', sa.Numeric(10, 2), nullable=False),
    )

    op.create_table(
        'lavado_auto_empresaservicio',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('empresa_id', sa.Integer(), sa.ForeignKey('lavado_auto_empresa.id_empresa', ondelete='CASCADE'), nullable=False),
        sa.Column('servicio_id', sa.Integer(), sa.ForeignKey('lavado_auto_servicio.id_servicio', ondelete='CASCADE'), nullable=False),
        sa.UniqueConstraint('empresa_id', 'servicio_id', name='uq_empresaservicio_empresa_servicio'),
    )

    op.create_table(
        'lavado_auto_solicitudservicioempresa',
        sa.Column('id_solicitud', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('empresa_id', sa.Integer(), sa.ForeignKey('lavado_auto_empresa.id_empresa', ondelete='CASCADE'), nullable=False),
        sa.Column('servicio_solicitado_id', sa.Integer(), sa.ForeignKey('lavado_auto_servicio.id_servicio', ondelete='CASCADE'), nullable=False),
        sa.Column('estado', sa.String(20), server_default='pendiente', nullable=False),
        sa.Column('motivo_solicitud', sa.Text(), nullable=False),
        sa.Column('usuario_responsable', sa.String(150), nullable=False),
        sa.Column('telefono_contacto', sa.String(20), nullable=False),
        sa.Column('fecha_solicitud', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('respuesta_admin', sa.Text(), server_default='', nullable=False),
        sa.Column('fecha_respuesta', sa.DateTime(), nullable=True),
    )

    # 요금제와 구독 — Plans and subscriptions
    op.create_table(
        'lavado_auto_plan',
        sa.Column('id_plan', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('nombre', sa.String(100), nullable=False),
        sa.Column('tipo', sa.String(30), nullable=False),
        sa.Column('descripcion', sa.Text(), server_default='', nullable=False),
        sa.Column('precio_mensual', sa.Numeric(10, 2), nullable=False),
        sa.Column('cantidad_servicios_mes', sa.Integer(), server_default='0', nullable=False),
        sa.Column('activo', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('incluye_lavado_asientos', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('incluye_aspirado', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('incluye_lavado_exterior', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('incluye_lavado_interior_humedo', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('incluye_encerado', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('incluye_detallado_completo', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('fecha_creacion', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        'lavado_auto_planservicio',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('plan_id', sa.Integer(), sa.ForeignKey('lavado_auto_plan.id_plan', ondelete='CASCADE'), nullable=False),
        sa.Column('servicio_id', sa.Integer(), sa.ForeignKey('lavado_auto_servicio.id_servicio', ondelete='CASCADE'), nullable=False),
        sa.Column('porcentaje_descuento', sa.Numeric(5, 2), server_default='0', nullable=False),
        sa.UniqueConstraint('plan_id', 'servicio_id', name='uq_planservicio_plan_servicio'),
    )

    op.create_table(
        'lavado_auto_suscripcionusuario',
        sa.Column('id_suscripcion', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('usuario_id', sa.Integer(), sa.ForeignKey('lavado_auto_usuario.id_usuario', ondelete='CASCADE'), nullable=False),
        sa.Column('plan_id', sa.Integer(), sa.ForeignKey('lavado_auto_plan.id_plan'), nullable=False),
        sa.Column('fecha_inicio', sa.DateTime(), nullable=False),
        sa.Column('fecha_fin', sa.DateTime(), nullable=False),
        sa.Column('estado', sa.String(20), server_default='activa', nullable=False),
        sa.Column('servicios_utilizados_mes', sa.Integer(), server_default='0', nullable=False),
        sa.Column('ultimo_reinicio_contador', sa.DateTime(), nullable=False),
        sa.Column('auto_renovar', sa.Boolean(), server_default=sa.true(), nullable=False),
    )
    op.create_index('ix_suscripcion_usuario_estado', 'lavado_auto_suscripcionusuario', ['usuario_id', 'estado'])

    op.create_table(
        'lavado_auto_historialpagossuscripcion',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('suscripcion_id', sa.Integer(), sa.ForeignKey('lavado_auto_suscripcionusuario.id_suscripcion', ondelete='CASCADE'), nullable=False),
        sa.Column('monto', sa.Numeric(10, 2), nullable=False),
        sa.Column('estado', sa.String(20), server_default='aprobado', nullable=False),
        sa.Column('referencia_pago', sa.String(100), nullable=False),
        sa.Column('metodo_pago', sa.String(50), nullable=False),
        sa.Column('fecha_pago', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )

    # 예약 — Reservations; numero_reserva UNIQUE is the storage-level guard
    op.create_table(
        'lavado_auto_reserva',
        sa.Column('id_reserva', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('numero_reserva', sa.String(20), nullable=False, unique=True),
        sa.Column('fecha', sa.Date(), nullable=False),
        sa.Column('hora', sa.Time(), nullable=False),
        sa.Column('estado', sa.String(20), server_default='pendiente', nullable=False),
        sa.Column('empresa_id', sa.Integer(), sa.ForeignKey('lavado_auto_empresa.id_empresa'), nullable=False),
        sa.Column('usuario_id', sa.Integer(), sa.ForeignKey('lavado_auto_usuario.id_usuario'), nullable=False),
        sa.Column('es_pago_individual', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('es_reserva_empresarial', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('placa_vehiculo', sa.String(20), nullable=True),
        sa.Column('tipo_vehiculo', sa.String(50), server_default='No especificado', nullable=False),
        sa.Column('conductor_asignado', sa.String(150), server_default='', nullable=False),
        sa.Column('observaciones_empresariales', sa.Text(), server_default='', nullable=False),
        sa.Column('suscripcion_utilizada_id', sa.Integer(), sa.ForeignKey('lavado_auto_suscripcionusuario.id_suscripcion', ondelete='SET NULL'), nullable=True),
        sa.Column('pagado_empresa', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('fue_recuperada', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('recargo_recuperacion', sa.Numeric(10, 2), server_default='0', nullable=False),
        sa.Column('fecha_creacion', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    # 인덱스 — Slot lookups and per-user expiry sweep
    op.create_index('ix_reserva_empresa_fecha_hora', 'lavado_auto_reserva', ['empresa_id', 'fecha', 'hora'])
    op.create_index('ix_reserva_usuario_estado', 'lavado_auto_reserva', ['usuario_id', 'estado'])

    op.create_table(
        'lavado_auto_reservaservicio',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('reserva_id', sa.Integer(), sa.ForeignKey('lavado_auto_reserva.id_reserva', ondelete='CASCADE'), nullable=False),
        sa.Column('servicio_id', sa.Integer(), sa.ForeignKey('lavado_auto_servicio.id_servicio'), nullable=False),
        sa.Column('precio_original', sa.Numeric(10, 2), nullable=False),
        sa.Column('precio_aplicado', sa.Numeric(10, 2), nullable=False),
        sa.Column('es_servicio_plan', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('descuento_plan_individual', sa.Numeric(5, 2), server_default='0', nullable=False),
        sa.Column('descuento_empresarial', sa.Numeric(5, 2), server_default='0', nullable=False),
    )

    # 정산 — Payout ledger (written by the back-office)
    op.create_table(
        'lavado_auto_periodoliquidacion',
        sa.Column('id_periodo', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('empresa_id', sa.Integer(), sa.ForeignKey('lavado_auto_empresa.id_empresa'), nullable=False),
        sa.Column('fecha_inicio', sa.Date(), nullable=False),
        sa.Column('fecha_fin', sa.Date(), nullable=False),
        sa.Column('fecha_cierre', sa.DateTime(), nullable=True),
        sa.Column('fecha_pago', sa.DateTime(), nullable=True),
        sa.Column('total_bruto', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('total_descuentos', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('comision_autonew', sa.Numeric(5, 2), server_default='0', nullable=False),
        sa.Column('total_comision', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('total_neto', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('estado', sa.String(20), server_default='activo', nullable=False),
        sa.Column('cantidad_reservas', sa.Integer(), server_default='0', nullable=False),
        sa.Column('metodo_pago', sa.String(50), nullable=True),
        sa.Column('referencia_pago', sa.String(100), nullable=True),
        sa.Column('observaciones', sa.Text(), nullable=True),
    )

    op.create_table(
        'lavado_auto_detalleliquidacion',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('periodo_id', sa.Integer(), sa.ForeignKey('lavado_auto_periodoliquidacion.id_periodo', ondelete='CASCADE'), nullable=False),
        sa.Column('reserva_id', sa.Integer(), sa.ForeignKey('lavado_auto_reserva.id_reserva'), nullable=False),
        sa.Column('valor_bruto', sa.Numeric(10, 2), nullable=False),
        sa.Column('valor_descuento', sa.Numeric(10, 2), server_default='0', nullable=False),
        sa.Column('valor_neto', sa.Numeric(10, 2), nullable=False),
        sa.Column('comision_aplicada', sa.Numeric(5, 2), server_default='0', nullable=False),
        sa.Column('valor_comision', sa.Numeric(10, 2), server_default='0', nullable=False),
        sa.Column('valor_final_empresa', sa.Numeric(10, 2), nullable=False),
        sa.Column('fecha_servicio', sa.Date(), nullable=False),
        sa.Column('tipo_descuento', sa.String(30), nullable=True),
    )

    # 평가 — Ratings, one per reservation
    op.create_table(
        'lavado_auto_calificacionempresa',
        sa.Column('id_calificacion', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('reserva_id', sa.Integer(), sa.ForeignKey('lavado_auto_reserva.id_reserva', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('empresa_id', sa.Integer(), sa.ForeignKey('lavado_auto_empresa.id_empresa'), nullable=False),
        sa.Column('usuario_id', sa.Integer(), sa.ForeignKey('lavado_auto_usuario.id_usuario'), nullable=False),
        sa.Column('puntuacion', sa.Integer(), nullable=False),
        sa.Column('comentario', sa.Text(), server_default='', nullable=False),
        sa.Column('fecha_creacion', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('fecha_actualizacion', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('puntuacion BETWEEN 1 AND 5', name='ck_calificacion_puntuacion'),
    )


def downgrade() -> None:
    op.drop_table('lavado_auto_calificacionempresa')
    op.drop_table('lavado_auto_detalleliquidacion')
    op.drop_table('lavado_auto_periodoliquidacion')
    op.drop_table('lavado_auto_reservaservicio')
    op.drop_index('ix_reserva_usuario_estado', table_name='lavado_auto_reserva')
    op.drop_index('ix_reserva_empresa_fecha_hora', table_name='lavado_auto_reserva')
    op.drop_table('lavado_auto_reserva')
    op.drop_table('lavado_auto_historialpagossuscripcion')
    op.drop_index('ix_suscripcion_usuario_estado', table_name='lavado_auto_suscripcionusuario')
    op.drop_table('lavado_auto_suscripcionusuario')
    op.drop_table('lavado_auto_planservicio')
    op.drop_table('lavado_auto_plan')
    op.drop_table('lavado_auto_solicitudservicioempresa')
    op.drop_table('lavado_auto_empresaservicio')
    op.drop_table('lavado_auto_servicio')
    op.drop_table('lavado_auto_empresa')
    op.drop_table('lavado_auto_usuario')
