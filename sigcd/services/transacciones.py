"""
Transaction boundary used by every write operation of the service layer.
"""
import logging
from contextlib import contextmanager

from sigcd.errors import InternalError, SIGCDError
from sigcd.extensions import db

logger = logging.getLogger(__name__)


@contextmanager
def transaccion(session=None):
    """
    Yield the session and commit when the block ends.

    Business errors (SIGCDError) roll back and propagate unchanged; any other
    failure rolls back and is re-raised as InternalError.
    """
    session = session or db.session
    try:
        yield session
        session.commit()
    except SIGCDError:
        session.rollback()
        raise
    except Exception as e:
        session.rollback()
        logger.error("[SIGCD] Transacción revertida: %s", e, exc_info=True)
        raise InternalError('Error al guardar los cambios en la base de datos', cause=e) from e
