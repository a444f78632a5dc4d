import logging

logger = logging.getLogger(__name__)


def despachar(tarea, *args):
    """
    Queue a best-effort integration task (Caja / Atención Clínica).

    The caller's data is already committed; a broker failure is logged and the
    primary operation still succeeds.
    """
    try:
        tarea.delay(*args)
    except Exception as e:
        logger.error("[SIGCD] No se pudo encolar la tarea %s: %s", tarea.name, e, exc_info=True)
