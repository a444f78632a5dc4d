from .citas import citas_bp
from .pacientes import pacientes_bp
from .medicos import medicos_bp
from .tratamientos import tratamientos_bp
from .health import health_bp

__all__ = ['citas_bp', 'pacientes_bp', 'medicos_bp', 'tratamientos_bp', 'health_bp']
