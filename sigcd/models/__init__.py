from .paciente import Paciente
from .medico import Medico
from .tratamiento import Tratamiento
from .cita import Cita, EstadoCita, EstadoPago
from .anticipo import AnticipoCita, EstadoAnticipo
from .pago_cita import PagoCita
from .audit_log import AuditLog

__all__ = [
    "Paciente", "Medico", "Tratamiento", "Cita", "EstadoCita", "EstadoPago",
    "AnticipoCita", "EstadoAnticipo", "PagoCita", "AuditLog",
]
