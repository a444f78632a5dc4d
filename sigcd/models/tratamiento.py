from sigcd.extensions import db
from sigcd.utils.conversion import to_float
from .base import TimestampMixin


class Tratamiento(db.Model, TimestampMixin):
    """Treatment catalog entry (limpieza, endodoncia, resina...)"""
    __tablename__ = 'tratamiento'

    id_tratamiento = db.Column(db.Integer, primary_key=True)
    cve_trat = db.Column(db.String(20), unique=True, nullable=False, index=True)
    nombre = db.Column(db.String(120), nullable=False)
    descripcion = db.Column(db.Text)
    precio_base = db.Column(db.Numeric(10, 2), nullable=False)
    duracion_min = db.Column(db.Integer)
    activo = db.Column(db.Boolean, default=True, nullable=False)

    citas = db.relationship('Cita', backref='tratamiento', lazy='dynamic')

    def __repr__(self):
        return f"<Tratamiento {self.cve_trat} {self.nombre}>"

    def to_dict(self):
        return {
            'id_tratamiento': self.id_tratamiento,
            'cve_trat': self.cve_trat,
            'nombre': self.nombre,
            'descripcion': self.descripcion,
            'precio_base': to_float(self.precio_base),
            'duracion_min': self.duracion_min,
            'activo': bool(self.activo),
        }
