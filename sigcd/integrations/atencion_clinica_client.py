"""
Client for the Atención Clínica API (clinical records).

Endpoints are configured as full URLs. An unset URL disables the call: a
warning is logged and None is returned.
"""
import logging

from flask import current_app

from .http import safe_post

logger = logging.getLogger(__name__)


def _timeout():
    return current_app.config.get('ATENCION_CLINICA_TIMEOUT', 5)


def notificar_nueva_cita(payload):
    url = current_app.config.get('ATENCION_CLINICA_URL')
    if not url:
        logger.warning("[ATENCION_CLINICA] ATENCION_CLINICA_URL no está configurada; no se enviará la notificación de cita.")
        return None
    return safe_post(url, payload, 'ATENCION_CLINICA_NOTIFICAR_CITA', _timeout())


def sincronizar_paciente(paciente):
    """Expects {nombre, apellidos, fecha_nacimiento, telefono, correo}."""
    url = current_app.config.get('ATENCION_CLINICA_PACIENTES_URL')
    if not url:
        logger.warning(
            "[ATENCION_CLINICA] ATENCION_CLINICA_PACIENTES_URL no está configurada; no se sincronizará el paciente."
        )
        return None
    if not paciente or not paciente.get('nombre') or not paciente.get('apellidos'):
        logger.warning("[ATENCION_CLINICA] Datos insuficientes para sincronizar paciente: %s", paciente)
        return None
    return safe_post(url, paciente, 'ATENCION_CLINICA_SINCRONIZAR_PACIENTE', _timeout())


def sincronizar_tratamiento(tratamiento):
    url = current_app.config.get('ATENCION_CLINICA_TRATAMIENTOS_URL')
    if not url:
        logger.info("[ATENCION_CLINICA] ATENCION_CLINICA_TRATAMIENTOS_URL no configurada; tratamiento no sincronizado.")
        return None
    return safe_post(url, tratamiento, 'ATENCION_CLINICA_SINCRONIZAR_TRATAMIENTO', _timeout())
