"""
Celery tasks for best-effort propagation to Caja and Atención Clínica.

They run after the database transaction that produced the data has been
committed. A failure is retried with exponential backoff up to
INTEGRATION_MAX_RETRIES and then logged; it never touches local data.
"""
import logging

from flask import current_app

from sigcd.errors import IntegrationError
from sigcd.extensions import celery
from sigcd.integrations import atencion_clinica_client, caja_client

logger = logging.getLogger(__name__)

RETRY_BASE_SECONDS = 5


def _ejecutar(task, descripcion, llamada, payload):
    """Run the client call; retry on IntegrationError, give up after the configured attempts."""
    try:
        respuesta = llamada(payload)
        logger.info("[SIGCD] %s OK", descripcion)
        return {'success': True, 'response': respuesta}
    except IntegrationError as e:
        max_retries = current_app.config.get('INTEGRATION_MAX_RETRIES', 3)
        if task.request.retries < max_retries:
            countdown = RETRY_BASE_SECONDS * (2 ** task.request.retries)
            logger.warning(
                "[SIGCD] %s falló (%s); reintento %d/%d en %ds",
                descripcion, e.message, task.request.retries + 1, max_retries, countdown,
            )
            raise task.retry(exc=e, countdown=countdown, max_retries=max_retries)
        logger.error("[SIGCD] %s falló definitivamente: %s", descripcion, e.message)
        return {'success': False, 'error': e.message, 'status_code': e.status_code}


@celery.task(bind=True, name='tasks.notificar_nueva_cita')
def notificar_nueva_cita(self, payload):
    """Notify Atención Clínica of a newly booked appointment."""
    return _ejecutar(
        self,
        f"Notificación de cita {payload.get('folio_cita')} a ATENCIÓN CLÍNICA",
        atencion_clinica_client.notificar_nueva_cita,
        payload,
    )


@celery.task(bind=True, name='tasks.sincronizar_paciente_atencion')
def sincronizar_paciente_atencion(self, paciente):
    return _ejecutar(
        self,
        "Sincronización de paciente con ATENCIÓN CLÍNICA",
        atencion_clinica_client.sincronizar_paciente,
        paciente,
    )


@celery.task(bind=True, name='tasks.registrar_paciente_caja')
def registrar_paciente_caja(self, paciente):
    return _ejecutar(
        self,
        "Registro de paciente en CAJA",
        caja_client.registrar_paciente,
        paciente,
    )


@celery.task(bind=True, name='tasks.sincronizar_tratamiento_caja')
def sincronizar_tratamiento_caja(self, tratamiento):
    return _ejecutar(
        self,
        f"Sincronización de tratamiento {tratamiento.get('cve_trat')} con CAJA",
        caja_client.sincronizar_tratamiento,
        tratamiento,
    )


@celery.task(bind=True, name='tasks.sincronizar_tratamiento_atencion')
def sincronizar_tratamiento_atencion(self, tratamiento):
    return _ejecutar(
        self,
        f"Sincronización de tratamiento {tratamiento.get('cve_trat')} con ATENCIÓN CLÍNICA",
        atencion_clinica_client.sincronizar_tratamiento,
        tratamiento,
    )
