from sigcd.extensions import db
from .base import TimestampMixin


class Medico(db.Model, TimestampMixin):
    __tablename__ = 'medico'

    id_medico = db.Column(db.Integer, primary_key=True)
    nombre = db.Column(db.String(100), nullable=False)
    apellidos = db.Column(db.String(150), nullable=False)
    especialidad = db.Column(db.String(120))
    cedula_profesional = db.Column(db.String(30))
    activo = db.Column(db.Boolean, default=True, nullable=False)

    citas = db.relationship('Cita', backref='medico', lazy='dynamic')

    def __repr__(self):
        return f"<Medico {self.nombre} {self.apellidos} - {self.especialidad}>"

    def to_dict(self):
        return {
            'id_medico': self.id_medico,
            'nombre': self.nombre,
            'apellidos': self.apellidos,
            'especialidad': self.especialidad,
            'cedula_profesional': self.cedula_profesional,
            'activo': bool(self.activo),
        }
