from sigcd.extensions import db
from sigcd.utils.conversion import format_date, format_datetime
from .base import TimestampMixin


class Paciente(db.Model, TimestampMixin):
    __tablename__ = 'paciente'

    id_paciente = db.Column(db.Integer, primary_key=True)
    nombre = db.Column(db.String(100), nullable=False)
    apellidos = db.Column(db.String(150), nullable=False)
    fecha_nacimiento = db.Column(db.Date)
    telefono = db.Column(db.String(20))
    email = db.Column(db.String(120))
    canal_preferente = db.Column(db.String(30))  # WHATSAPP, TELEFONO, EMAIL, PRESENCIAL

    # Relationships
    citas = db.relationship('Cita', backref='paciente', lazy='dynamic')

    def __repr__(self):
        return f"<Paciente {self.nombre} {self.apellidos} ({self.id_paciente})>"

    def to_dict(self):
        return {
            'id_paciente': self.id_paciente,
            'nombre': self.nombre,
            'apellidos': self.apellidos,
            'fecha_nacimiento': format_date(self.fecha_nacimiento),
            'telefono': self.telefono,
            'email': self.email,
            'canal_preferente': self.canal_preferente,
            'fecha_registro': format_datetime(self.fecha_registro),
        }
