from datetime import datetime
from sigcd.extensions import db


class TimestampMixin:
    """Registration / last-update timestamps (local clock, as shown to clinic staff)"""
    fecha_registro = db.Column(db.DateTime, default=datetime.now, nullable=False)
    fecha_actualizacion = db.Column(db.DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)
