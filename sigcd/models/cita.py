"""
Appointment (cita) model and its status vocabularies
"""
from sigcd.extensions import db
from sigcd.utils.conversion import format_datetime, to_float
from .base import TimestampMixin


class EstadoCita:
    PROGRAMADA = 'PROGRAMADA'
    CONFIRMADA = 'CONFIRMADA'  # patient is being attended
    ATENDIDA = 'ATENDIDA'
    CANCELADA = 'CANCELADA'

    TODOS = (PROGRAMADA, CONFIRMADA, ATENDIDA, CANCELADA)

    # Forward-only state machine; ATENDIDA and CANCELADA are terminal
    TRANSICIONES = {
        PROGRAMADA: (CONFIRMADA, CANCELADA),
        CONFIRMADA: (ATENDIDA, CANCELADA),
        ATENDIDA: (),
        CANCELADA: (),
    }


class EstadoPago:
    SIN_PAGO = 'SIN_PAGO'
    PENDIENTE = 'PENDIENTE'
    PAGO_PARCIAL = 'PAGO_PARCIAL'
    PAGADO = 'PAGADO'

    TODOS = (SIN_PAGO, PENDIENTE, PAGO_PARCIAL, PAGADO)


class Cita(db.Model, TimestampMixin):
    __tablename__ = 'citas'
    __table_args__ = (
        db.Index('ix_citas_medico_fecha', 'id_medico', 'fecha_cita'),
        db.Index('ix_citas_paciente_fecha', 'id_paciente', 'fecha_cita'),
    )

    id_cita = db.Column(db.Integer, primary_key=True)
    folio_cita = db.Column(db.String(40), unique=True, nullable=False)

    id_paciente = db.Column(db.Integer, db.ForeignKey('paciente.id_paciente'), nullable=False)
    id_medico = db.Column(db.Integer, db.ForeignKey('medico.id_medico'), nullable=False)
    id_tratamiento = db.Column(db.Integer, db.ForeignKey('tratamiento.id_tratamiento'), nullable=True)

    fecha_cita = db.Column(db.DateTime, nullable=False)
    medio_solicitud = db.Column(db.String(30), nullable=False)  # PRESENCIAL, TELEFONO, WHATSAPP...
    motivo_cita = db.Column(db.Text)
    info_relevante = db.Column(db.Text)
    observaciones = db.Column(db.Text)
    responsable_registro = db.Column(db.String(100), default='SISTEMA', nullable=False)

    estado_cita = db.Column(db.String(20), default=EstadoCita.PROGRAMADA, nullable=False, index=True)
    estado_pago = db.Column(db.String(20), default=EstadoPago.SIN_PAGO, nullable=False, index=True)

    monto_cobro = db.Column(db.Numeric(10, 2), nullable=True)
    monto_pagado = db.Column(db.Numeric(10, 2), nullable=True)
    saldo_pendiente = db.Column(db.Numeric(10, 2), nullable=True)
    id_pago_caja = db.Column(db.String(64), nullable=True)

    anticipo = db.relationship('AnticipoCita', backref='cita', uselist=False, lazy=True)
    pagos = db.relationship('PagoCita', backref='cita', lazy='dynamic')

    def __repr__(self):
        return f"<Cita {self.folio_cita} - {self.estado_cita}/{self.estado_pago}>"

    def to_dict(self):
        return {
            'id_cita': self.id_cita,
            'folio_cita': self.folio_cita,
            'id_paciente': self.id_paciente,
            'id_medico': self.id_medico,
            'id_tratamiento': self.id_tratamiento,
            'fecha_cita': format_datetime(self.fecha_cita),
            'fecha_registro': format_datetime(self.fecha_registro),
            'medio_solicitud': self.medio_solicitud,
            'motivo_cita': self.motivo_cita,
            'info_relevante': self.info_relevante,
            'observaciones': self.observaciones,
            'responsable_registro': self.responsable_registro,
            'estado_cita': self.estado_cita,
            'estado_pago': self.estado_pago,
            'monto_cobro': to_float(self.monto_cobro),
            'monto_pagado': to_float(self.monto_pagado),
            'saldo_pendiente': to_float(self.saldo_pendiente),
            'id_pago_caja': self.id_pago_caja,
        }
