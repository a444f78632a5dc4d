"""Create pacientes, medicos, tratamientos, citas, anticipos, pagos and audit tables

Revision ID: 3c1f0a9d2b41
Revises:
Create Date: 2026-10-17 10:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3c1f0a9d2b41'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('fecha_registro', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('fecha_actualizacion', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    ]


def upgrade():
    op.create_table(
        'paciente',
        sa.Column('id_paciente', sa.Integer(), primary_key=True),
        sa.Column('nombre', sa.String(length=100), nullable=False),
        sa.Column('apellidos', sa.String(length=150), nullable=False),
        sa.Column('fecha_nacimiento', sa.Date(), nullable=True),
        sa.Column('telefono', sa.String(length=20), nullable=True),
        sa.Column('email', sa.String(length=120), nullable=True),
        sa.Column('canal_preferente', sa.String(length=30), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'medico',
        sa.Column('id_medico', sa.Integer(), primary_key=True),
        sa.Column('nombre', sa.String(length=100), nullable=False),
        sa.Column('apellidos', sa.String(length=150), nullable=False),
        sa.Column('especialidad', sa.String(length=120), nullable=True),
        sa.Column('cedula_profesional', sa.String(length=30), nullable=True),
        sa.Column('activo', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        'tratamiento',
        sa.Column('id_tratamiento', sa.Integer(), primary_key=True),
        sa.Column('cve_trat', sa.String(length=20), nullable=False),
        sa.Column('nombre', sa.String(length=120), nullable=False),
        sa.Column('descripcion', sa.Text(), nullable=True),
        sa.Column('precio_base', sa.Numeric(10, 2), nullable=False),
        sa.Column('duracion_min', sa.Integer(), nullable=True),
        sa.Column('activo', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('ix_tratamiento_cve_trat', 'tratamiento', ['cve_trat'], unique=True)

    op.create_table(
        'citas',
        sa.Column('id_cita', sa.Integer(), primary_key=True),
        sa.Column('folio_cita', sa.String(length=40), nullable=False, unique=True),
        sa.Column('id_paciente', sa.Integer(), sa.ForeignKey('paciente.id_paciente'), nullable=False),
        sa.Column('id_medico', sa.Integer(), sa.ForeignKey('medico.id_medico'), nullable=False),
        sa.Column('id_tratamiento', sa.Integer(), sa.ForeignKey('tratamiento.id_tratamiento'), nullable=True),
        sa.Column('fecha_cita', sa.DateTime(), nullable=False),
        sa.Column('medio_solicitud', sa.String(length=30), nullable=False),
        sa.Column('motivo_cita', sa.Text(), nullable=True),
        sa.Column('info_relevante', sa.Text(), nullable=True),
        sa.Column('observaciones', sa.Text(), nullable=True),
        sa.Column('responsable_registro', sa.String(length=100), nullable=False, server_default='SISTEMA'),
        sa.Column('estado_cita', sa.String(length=20), nullable=False, server_default='PROGRAMADA'),
        sa.Column('estado_pago', sa.String(length=20), nullable=False, server_default='SIN_PAGO'),
        sa.Column('monto_cobro', sa.Numeric(10, 2), nullable=True),
        sa.Column('monto_pagado', sa.Numeric(10, 2), nullable=True),
        sa.Column('saldo_pendiente', sa.Numeric(10, 2), nullable=True),
        sa.Column('id_pago_caja', sa.String(length=64), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_citas_medico_fecha', 'citas', ['id_medico', 'fecha_cita'])
    op.create_index('ix_citas_paciente_fecha', 'citas', ['id_paciente', 'fecha_cita'])
    op.create_index('ix_citas_estado_cita', 'citas', ['estado_cita'])
    op.create_index('ix_citas_estado_pago', 'citas', ['estado_pago'])

    op.create_table(
        'anticipo_cita',
        sa.Column('id_anticipo', sa.Integer(), primary_key=True),
        sa.Column('id_cita', sa.Integer(), sa.ForeignKey('citas.id_cita'), nullable=False, unique=True),
        sa.Column('id_paciente', sa.Integer(), sa.ForeignKey('paciente.id_paciente'), nullable=False),
        sa.Column('monto_anticipo', sa.Numeric(10, 2), nullable=False),
        sa.Column('estado', sa.String(length=20), nullable=False, server_default='PENDIENTE'),
        sa.Column('id_pago_caja', sa.String(length=64), nullable=True),
        sa.Column('fecha_solicitud', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('fecha_confirmacion', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_anticipo_cita_id_paciente', 'anticipo_cita', ['id_paciente'])

    op.create_table(
        'pagos_cita',
        sa.Column('id_pago_cita', sa.Integer(), primary_key=True),
        sa.Column('id_cita', sa.Integer(), sa.ForeignKey('citas.id_cita'), nullable=False),
        sa.Column('id_paciente', sa.Integer(), sa.ForeignKey('paciente.id_paciente'), nullable=False),
        sa.Column('monto', sa.Numeric(10, 2), nullable=False),
        sa.Column('origen', sa.String(length=30), nullable=False, server_default='CAJA'),
        sa.Column('id_pago_caja', sa.String(length=64), nullable=True),
        sa.Column('observaciones', sa.Text(), nullable=True),
        sa.Column('fecha_pago', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_pagos_cita_id_cita', 'pagos_cita', ['id_cita'])
    op.create_index('ix_pagos_cita_id_paciente', 'pagos_cita', ['id_paciente'])

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('entity_type', sa.String(length=64), nullable=False),
        sa.Column('entity_id', sa.String(length=64), nullable=True),
        sa.Column('action', sa.String(length=32), nullable=False),
        sa.Column('usuario', sa.String(length=100), nullable=True),
        sa.Column('details', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_audit_logs_entity_type', 'audit_logs', ['entity_type'])
    op.create_index('ix_audit_logs_entity_id', 'audit_logs', ['entity_id'])
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])


def downgrade():
    op.drop_table('audit_logs')
    op.drop_table('pagos_cita')
    op.drop_table('anticipo_cita')
    op.drop_table('citas')
    op.drop_table('tratamiento')
    op.drop_table('medico')
    op.drop_table('paciente')
