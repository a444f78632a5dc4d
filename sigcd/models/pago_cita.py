from datetime import datetime
from sigcd.extensions import db
from sigcd.utils.conversion import format_datetime, to_float


class PagoCita(db.Model):
    """Ledger of (partial) payments applied to an appointment"""
    __tablename__ = 'pagos_cita'

    id_pago_cita = db.Column(db.Integer, primary_key=True)
    id_cita = db.Column(db.Integer, db.ForeignKey('citas.id_cita'), nullable=False, index=True)
    id_paciente = db.Column(db.Integer, db.ForeignKey('paciente.id_paciente'), nullable=False, index=True)
    monto = db.Column(db.Numeric(10, 2), nullable=False)
    origen = db.Column(db.String(30), default='CAJA', nullable=False)
    id_pago_caja = db.Column(db.String(64), nullable=True)
    observaciones = db.Column(db.Text)
    fecha_pago = db.Column(db.DateTime, default=datetime.now, nullable=False)

    def to_dict(self):
        return {
            'id_pago_cita': self.id_pago_cita,
            'id_cita': self.id_cita,
            'id_paciente': self.id_paciente,
            'monto': to_float(self.monto),
            'origen': self.origen,
            'id_pago_caja': self.id_pago_caja,
            'observaciones': self.observaciones,
            'fecha_pago': format_datetime(self.fecha_pago),
        }
