from datetime import datetime
from sigcd.extensions import db
from sigcd.utils.conversion import format_datetime, to_float


class EstadoAnticipo:
    PENDIENTE = 'PENDIENTE'
    PAGADO = 'PAGADO'


class AnticipoCita(db.Model):
    """Deposit requested when the appointment is booked (0..1 per cita)"""
    __tablename__ = 'anticipo_cita'

    id_anticipo = db.Column(db.Integer, primary_key=True)
    id_cita = db.Column(db.Integer, db.ForeignKey('citas.id_cita'), nullable=False, unique=True)
    id_paciente = db.Column(db.Integer, db.ForeignKey('paciente.id_paciente'), nullable=False, index=True)
    monto_anticipo = db.Column(db.Numeric(10, 2), nullable=False)
    estado = db.Column(db.String(20), default=EstadoAnticipo.PENDIENTE, nullable=False)
    id_pago_caja = db.Column(db.String(64), nullable=True)
    fecha_solicitud = db.Column(db.DateTime, default=datetime.now, nullable=False)
    fecha_confirmacion = db.Column(db.DateTime, nullable=True)

    def __repr__(self):
        return f"<AnticipoCita {self.id_anticipo} cita={self.id_cita} {self.estado}>"

    def to_dict(self):
        return {
            'id_anticipo': self.id_anticipo,
            'id_cita': self.id_cita,
            'id_paciente': self.id_paciente,
            'monto_anticipo': to_float(self.monto_anticipo),
            'estado': self.estado,
            'id_pago_caja': self.id_pago_caja,
            'fecha_solicitud': format_datetime(self.fecha_solicitud),
            'fecha_confirmacion': format_datetime(self.fecha_confirmacion),
        }
