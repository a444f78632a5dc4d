from . import citas_service, medicos_service, pacientes_service, tratamientos_service

__all__ = ['citas_service', 'medicos_service', 'pacientes_service', 'tratamientos_service']
