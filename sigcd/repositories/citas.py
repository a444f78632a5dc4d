"""
Data access for appointments (citas), deposits (anticipo_cita) and the
payment ledger (pagos_cita).

Every function receives the SQLAlchemy session explicitly so that the service
layer decides the transaction boundaries.
"""
from datetime import datetime, timedelta

from sqlalchemy import func, select, update

from sigcd.models import (
    AnticipoCita,
    Cita,
    EstadoAnticipo,
    EstadoCita,
    EstadoPago,
    Medico,
    Paciente,
    PagoCita,
    Tratamiento,
)


def crear_cita(session, datos):
    """Insert an appointment and return its id_cita."""
    cita = Cita(
        folio_cita=datos['folio_cita'],
        id_paciente=datos['id_paciente'],
        id_medico=datos['id_medico'],
        id_tratamiento=datos.get('id_tratamiento'),
        fecha_cita=datos['fecha_cita'],
        medio_solicitud=datos['medio_solicitud'],
        motivo_cita=datos.get('motivo_cita'),
        info_relevante=datos.get('info_relevante'),
        observaciones=datos.get('observaciones'),
        responsable_registro=datos.get('responsable_registro') or 'SISTEMA',
        estado_cita=datos['estado_cita'],
        estado_pago=datos['estado_pago'],
        monto_cobro=datos.get('monto_cobro'),
    )
    session.add(cita)
    session.flush()  # Get id_cita
    return cita.id_cita


def crear_anticipo(session, id_cita, id_paciente, monto_anticipo, estado=EstadoAnticipo.PENDIENTE, id_pago_caja=None):
    """Insert the deposit linked to an appointment and return its id_anticipo."""
    anticipo = AnticipoCita(
        id_cita=id_cita,
        id_paciente=id_paciente,
        monto_anticipo=monto_anticipo,
        estado=estado,
        id_pago_caja=id_pago_caja,
        fecha_solicitud=datetime.now(),
    )
    session.add(anticipo)
    session.flush()
    return anticipo.id_anticipo


def existe_folio(session, folio_cita):
    return session.execute(
        select(Cita.id_cita).where(Cita.folio_cita == folio_cita).limit(1)
    ).first() is not None


def bloquear_paciente_y_medico(session, id_paciente, id_medico):
    """
    Lock the patient row, then the doctor row, for the rest of the transaction.

    Bookings touching the same patient or doctor are serialized by the database
    so the conflict checks below cannot be raced. Returns (paciente, medico);
    either may be None when the row does not exist.
    """
    paciente = session.execute(
        select(Paciente).where(Paciente.id_paciente == id_paciente).with_for_update()
    ).scalar_one_or_none()
    medico = session.execute(
        select(Medico).where(Medico.id_medico == id_medico).with_for_update()
    ).scalar_one_or_none()
    return paciente, medico


def obtener_tratamiento(session, id_tratamiento):
    return session.get(Tratamiento, id_tratamiento)


def existe_cita_en_rango_para_medico(session, id_medico, fecha_cita, minutos_antes, minutos_despues):
    """
    True when the doctor has a non-cancelled appointment whose fecha_cita is in
    [fecha_cita - minutos_antes, fecha_cita + minutos_despues].
    """
    desde = fecha_cita - timedelta(minutes=minutos_antes)
    hasta = fecha_cita + timedelta(minutes=minutos_despues)
    total = session.execute(
        select(func.count(Cita.id_cita)).where(
            Cita.id_medico == id_medico,
            Cita.estado_cita != EstadoCita.CANCELADA,
            Cita.fecha_cita.between(desde, hasta),
        )
    ).scalar()
    return (total or 0) > 0


def existe_cita_misma_fecha_para_paciente(session, id_paciente, fecha_cita):
    """True when the patient has a non-cancelled appointment at exactly fecha_cita."""
    total = session.execute(
        select(func.count(Cita.id_cita)).where(
            Cita.id_paciente == id_paciente,
            Cita.estado_cita != EstadoCita.CANCELADA,
            Cita.fecha_cita == fecha_cita,
        )
    ).scalar()
    return (total or 0) > 0


def _aplicar_filtros(query, filtros):
    if filtros.get('id_paciente'):
        query = query.where(Cita.id_paciente == filtros['id_paciente'])
    if filtros.get('id_medico'):
        query = query.where(Cita.id_medico == filtros['id_medico'])
    if filtros.get('estado_cita'):
        query = query.where(Cita.estado_cita == filtros['estado_cita'])
    if filtros.get('estado_pago'):
        query = query.where(Cita.estado_pago == filtros['estado_pago'])
    if filtros.get('fecha_desde'):
        query = query.where(Cita.fecha_cita >= filtros['fecha_desde'])
    if filtros.get('fecha_hasta'):
        query = query.where(Cita.fecha_cita <= filtros['fecha_hasta'])
    return query


def _resumen_select():
    return (
        select(
            Cita.id_cita,
            Cita.folio_cita,
            Cita.fecha_cita,
            Cita.estado_cita,
            Cita.estado_pago,
            Cita.monto_cobro,
            Paciente.id_paciente,
            Paciente.nombre.label('nombre_paciente'),
            Paciente.apellidos.label('apellidos_paciente'),
            Medico.id_medico,
            Medico.nombre.label('nombre_medico'),
            Medico.apellidos.label('apellidos_medico'),
        )
        .join(Paciente, Paciente.id_paciente == Cita.id_paciente)
        .join(Medico, Medico.id_medico == Cita.id_medico)
    )


def listar_citas(session, filtros):
    """Unpaginated list, newest first."""
    query = _aplicar_filtros(_resumen_select(), filtros).order_by(Cita.fecha_cita.desc())
    return session.execute(query).all()


def listar_resumen_citas(session, filtros, page, page_size):
    """Paginated summary. Returns (rows, total)."""
    base = _aplicar_filtros(_resumen_select(), filtros)
    total = session.execute(
        select(func.count()).select_from(base.order_by(None).subquery())
    ).scalar() or 0
    rows = session.execute(
        base.order_by(Cita.fecha_cita.desc(), Cita.id_cita.desc())
        .limit(page_size)
        .offset((page - 1) * page_size)
    ).all()
    return rows, total


def obtener_detalle_cita(session, id_cita):
    """
    Appointment joined with patient and doctor (inner) plus treatment and
    deposit (outer). Returns (cita, paciente, medico, tratamiento, anticipo)
    or None.
    """
    query = (
        select(Cita, Paciente, Medico, Tratamiento, AnticipoCita)
        .join(Paciente, Paciente.id_paciente == Cita.id_paciente)
        .join(Medico, Medico.id_medico == Cita.id_medico)
        .outerjoin(Tratamiento, Tratamiento.id_tratamiento == Cita.id_tratamiento)
        .outerjoin(AnticipoCita, AnticipoCita.id_cita == Cita.id_cita)
        .where(Cita.id_cita == id_cita)
        .limit(1)
    )
    return session.execute(query).first()


def obtener_cita_por_id(session, id_cita, for_update=False):
    query = select(Cita).where(Cita.id_cita == id_cita)
    if for_update:
        query = query.with_for_update()
    return session.execute(query).scalar_one_or_none()


def actualizar_estado_cita(session, id_cita, nuevo_estado):
    """Returns True when a row was updated."""
    result = session.execute(
        update(Cita).where(Cita.id_cita == id_cita).values(estado_cita=nuevo_estado, fecha_actualizacion=datetime.now())
    )
    return result.rowcount > 0


def obtener_anticipo_pendiente_por_cita(session, id_cita):
    """Latest PENDIENTE deposit for the appointment, if any."""
    return session.execute(
        select(AnticipoCita)
        .where(AnticipoCita.id_cita == id_cita, AnticipoCita.estado == EstadoAnticipo.PENDIENTE)
        .order_by(AnticipoCita.fecha_solicitud.desc())
        .limit(1)
    ).scalar_one_or_none()


def actualizar_anticipo_como_pagado(session, anticipo, id_pago_caja):
    anticipo.estado = EstadoAnticipo.PAGADO
    anticipo.id_pago_caja = id_pago_caja
    anticipo.fecha_confirmacion = datetime.now()
    session.flush()


def actualizar_cita_como_pagada(session, cita, id_pago_caja, monto_pagado=None):
    cita.estado_pago = EstadoPago.PAGADO
    cita.id_pago_caja = id_pago_caja
    if monto_pagado is not None:
        cita.monto_pagado = monto_pagado
    elif cita.monto_cobro is not None:
        cita.monto_pagado = cita.monto_cobro
    cita.saldo_pendiente = 0
    session.flush()


def crear_pago_cita(session, id_cita, id_paciente, monto, origen='CAJA', id_pago_caja=None, observaciones=None):
    pago = PagoCita(
        id_cita=id_cita,
        id_paciente=id_paciente,
        monto=monto,
        origen=origen or 'CAJA',
        id_pago_caja=id_pago_caja,
        observaciones=observaciones,
        fecha_pago=datetime.now(),
    )
    session.add(pago)
    session.flush()
    return pago.id_pago_cita


def actualizar_montos_cita(session, cita, monto_pagado, saldo_pendiente, estado_pago):
    cita.monto_pagado = monto_pagado
    cita.saldo_pendiente = saldo_pendiente
    cita.estado_pago = estado_pago
    session.flush()
