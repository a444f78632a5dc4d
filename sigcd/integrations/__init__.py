"""
Outbound HTTP clients for the sibling services (Caja, Atención Clínica).
"""
from . import atencion_clinica_client, caja_client

__all__ = ["atencion_clinica_client", "caja_client"]
