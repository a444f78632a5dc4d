"""
Citas Service
Appointment booking, payment reconciliation and status transitions
"""
import logging
from decimal import Decimal

from flask import current_app
from sqlalchemy.exc import IntegrityError

from sigcd.errors import ConflictError, InvalidStateError, NotFoundError, SIGCDError, ValidationError
from sigcd.extensions import db
from sigcd.integrations import caja_client
from sigcd.models import EstadoCita, EstadoPago
from sigcd.repositories import citas as citas_repository
from sigcd.utils.audit import log_audit
from sigcd.utils.conversion import (
    format_datetime,
    normalizar_fecha_cita,
    parse_fecha_cita,
    parse_fecha_filtro,
    parse_id,
    parse_json_body,
    parse_optional_int,
    to_boolean,
    to_decimal,
    to_float,
)
from sigcd.utils.folio import generar_folio_cita
from tasks import integration_tasks
from .despacho import despachar
from .transacciones import transaccion

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def _insertar_cita_con_folio(session, datos):
    """
    Insert the appointment under a folio for now(); a same-second collision
    gets a numeric suffix.

    The insert runs in a SAVEPOINT. A unique violation on folio_cita rolls back
    only that attempt, and the next suffix is tried.
    """
    base = generar_folio_cita()
    folio = base
    sufijo = 2
    while True:
        if not citas_repository.existe_folio(session, folio):
            try:
                with session.begin_nested():
                    id_cita = citas_repository.crear_cita(session, {**datos, 'folio_cita': folio})
                return folio, id_cita
            except IntegrityError as e:
                if 'folio_cita' not in str(e.orig):
                    raise
                logger.warning("[SIGCD] Folio %s tomado por otra reserva, reintentando", folio)
        folio = f"{base}-{sufijo}"
        sufijo += 1


def crear_cita(payload):
    """
    Book an appointment (with or without deposit) and notify Atención Clínica.

    Validation and scheduling rules are checked before anything is written.
    The patient and doctor rows are locked for the duration of the booking so
    two concurrent requests cannot both pass the conflict checks.
    """
    payload = parse_json_body(payload)

    # Step 1: Required fields
    if not all(payload.get(campo) for campo in ('id_paciente', 'id_medico', 'fecha_cita', 'medio_solicitud')):
        raise ValidationError('id_paciente, id_medico, fecha_cita y medio_solicitud son obligatorios')

    id_paciente = parse_id(payload['id_paciente'], 'id_paciente')
    id_medico = parse_id(payload['id_medico'], 'id_medico')
    id_tratamiento = None
    if payload.get('id_tratamiento') not in (None, ''):
        id_tratamiento = parse_id(payload['id_tratamiento'], 'id_tratamiento')

    # Step 2: Deposit
    requiere_anticipo = to_boolean(payload.get('requiere_anticipo'))
    monto_anticipo = to_decimal(payload.get('monto_anticipo'))
    if requiere_anticipo and (monto_anticipo is None or monto_anticipo <= 0):
        raise ValidationError('monto_anticipo debe ser un número mayor que 0 cuando requiere_anticipo es true')

    # Step 3: Date-time
    fecha_cita_str = normalizar_fecha_cita(payload.get('fecha_cita'))
    if not fecha_cita_str:
        raise ValidationError('fecha_cita no tiene un formato de fecha válido')
    fecha_cita = parse_fecha_cita(fecha_cita_str)

    medio_solicitud = payload['medio_solicitud']
    motivo_cita = payload.get('motivo_cita') or None
    info_relevante = payload.get('info_relevante') or None
    observaciones = payload.get('observaciones') or None
    responsable_registro = payload.get('responsable_registro') or 'SISTEMA'

    estado_cita = EstadoCita.PROGRAMADA
    estado_pago = EstadoPago.PENDIENTE if requiere_anticipo else EstadoPago.SIN_PAGO
    monto_cobro = monto_anticipo if requiere_anticipo else None
    gap = current_app.config.get('MIN_GAP_MINUTES', 120)

    with transaccion() as session:
        paciente, medico = citas_repository.bloquear_paciente_y_medico(session, id_paciente, id_medico)
        if not paciente:
            raise NotFoundError(f'Paciente con id {id_paciente} no encontrado')
        if not medico:
            raise NotFoundError(f'Médico con id {id_medico} no encontrado')
        if id_tratamiento and not citas_repository.obtener_tratamiento(session, id_tratamiento):
            raise NotFoundError(f'Tratamiento con id {id_tratamiento} no encontrado')

        # Step 4: Doctor may not have another appointment within ±gap minutes
        if citas_repository.existe_cita_en_rango_para_medico(session, id_medico, fecha_cita, gap, gap):
            raise ConflictError(
                f'El médico ya tiene una cita programada en un rango de {gap} minutos '
                'respecto a la fecha y hora seleccionadas.'
            )

        # Step 5: Patient may not have another appointment at the exact same time
        if citas_repository.existe_cita_misma_fecha_para_paciente(session, id_paciente, fecha_cita):
            raise ConflictError('El paciente ya tiene una cita registrada exactamente en esa fecha y hora.')

        # Step 6-7: Folio, appointment and deposit in one transaction
        folio, id_cita = _insertar_cita_con_folio(session, {
            'id_paciente': id_paciente,
            'id_medico': id_medico,
            'id_tratamiento': id_tratamiento,
            'fecha_cita': fecha_cita,
            'medio_solicitud': medio_solicitud,
            'motivo_cita': motivo_cita,
            'info_relevante': info_relevante,
            'observaciones': observaciones,
            'responsable_registro': responsable_registro,
            'estado_cita': estado_cita,
            'estado_pago': estado_pago,
            'monto_cobro': monto_cobro,
        })

        id_anticipo = None
        if requiere_anticipo:
            id_anticipo = citas_repository.crear_anticipo(session, id_cita, id_paciente, monto_anticipo)

        log_audit(session, 'cita', 'create', entity_id=id_cita, usuario=responsable_registro, details={
            'folio_cita': folio,
            'fecha_cita': fecha_cita_str,
            'id_anticipo': id_anticipo,
        })

    logger.info("[SIGCD] Cita %s creada (id=%s, anticipo=%s)", folio, id_cita, id_anticipo)

    # Step 8: Clinical notification, outside the transaction
    despachar(integration_tasks.notificar_nueva_cita, {
        'id_cita': id_cita,
        'folio_cita': folio,
        'id_paciente': id_paciente,
        'id_medico': id_medico,
        'id_tratamiento': id_tratamiento,
        'fecha_cita': fecha_cita_str,
        'medio_solicitud': medio_solicitud,
        'motivo_cita': motivo_cita,
        'info_relevante': info_relevante,
        'observaciones': observaciones,
        'responsable_registro': responsable_registro,
        'requiere_anticipo': requiere_anticipo,
        'monto_anticipo': float(monto_anticipo) if requiere_anticipo else 0,
    })

    return {
        'id_cita': id_cita,
        'folio_cita': folio,
        'estado_cita': estado_cita,
        'estado_pago': estado_pago,
        'requiere_anticipo': requiere_anticipo,
        'id_anticipo': id_anticipo,
    }


def _filtros_desde_query(raw):
    raw = raw or {}
    estado_cita = raw.get('estado_cita') or None
    if estado_cita and estado_cita not in EstadoCita.TODOS:
        raise ValidationError(f'estado_cita no válido: {estado_cita}')
    estado_pago = raw.get('estado_pago') or None
    if estado_pago and estado_pago not in EstadoPago.TODOS:
        raise ValidationError(f'estado_pago no válido: {estado_pago}')
    return {
        'id_paciente': parse_optional_int(raw.get('id_paciente'), 'id_paciente'),
        'id_medico': parse_optional_int(raw.get('id_medico'), 'id_medico'),
        'estado_cita': estado_cita,
        'estado_pago': estado_pago,
        'fecha_desde': parse_fecha_filtro(raw.get('fecha_desde'), 'fecha_desde'),
        'fecha_hasta': parse_fecha_filtro(raw.get('fecha_hasta'), 'fecha_hasta'),
    }


def _fila_a_dict(row):
    return {
        'id_cita': row.id_cita,
        'folio_cita': row.folio_cita,
        'fecha_cita': format_datetime(row.fecha_cita),
        'estado_cita': row.estado_cita,
        'estado_pago': row.estado_pago,
        'monto_cobro': to_float(row.monto_cobro),
        'id_paciente': row.id_paciente,
        'nombre_paciente': row.nombre_paciente,
        'apellidos_paciente': row.apellidos_paciente,
        'id_medico': row.id_medico,
        'nombre_medico': row.nombre_medico,
        'apellidos_medico': row.apellidos_medico,
    }


def listar_citas(raw_filtros):
    """Unpaginated list with optional filters."""
    filtros = _filtros_desde_query(raw_filtros)
    rows = citas_repository.listar_citas(db.session, filtros)
    return [_fila_a_dict(row) for row in rows]


def listar_resumen_citas(raw_filtros):
    """Paginated summary for the front-end table and for Caja."""
    raw_filtros = raw_filtros or {}
    filtros = _filtros_desde_query(raw_filtros)

    page = parse_optional_int(raw_filtros.get('page'), 'page') or 1
    page_size = parse_optional_int(raw_filtros.get('pageSize'), 'pageSize') or DEFAULT_PAGE_SIZE
    if page < 1:
        page = 1
    if page_size < 1 or page_size > MAX_PAGE_SIZE:
        page_size = DEFAULT_PAGE_SIZE

    rows, total = citas_repository.listar_resumen_citas(db.session, filtros, page, page_size)
    return {
        'total': total,
        'page': page,
        'pageSize': page_size,
        'totalPages': max(1, -(-total // page_size)),
        'citas': [_fila_a_dict(row) for row in rows],
    }


def obtener_detalle_cita(id_raw):
    """
    Full appointment detail: nested paciente / medico / tratamiento / anticipo,
    the payment ledger and the patient's live balance in Caja (None when Caja
    cannot be reached).
    """
    id_cita = parse_id(id_raw)
    row = citas_repository.obtener_detalle_cita(db.session, id_cita)
    if not row:
        raise NotFoundError('Cita no encontrada')

    cita, paciente, medico, tratamiento, anticipo = row
    detalle = cita.to_dict()
    detalle['paciente'] = paciente.to_dict()
    detalle['medico'] = medico.to_dict()
    detalle['tratamiento'] = tratamiento.to_dict() if tratamiento else None
    detalle['anticipo'] = anticipo.to_dict() if anticipo else None
    detalle['pagos'] = [pago.to_dict() for pago in cita.pagos.all()]

    saldo_paciente_caja = None
    try:
        saldo_paciente_caja = caja_client.obtener_saldo_paciente(paciente.id_paciente)
    except SIGCDError as e:
        logger.error("[SIGCD] Error consultando saldo del paciente %s en CAJA: %s", paciente.id_paciente, e.message)
    detalle['saldo_paciente_caja'] = saldo_paciente_caja
    return detalle


def confirmar_pago_cita(id_raw, payload):
    """
    Settle the appointment payment (called by Caja).

    The latest PENDIENTE deposit, if any, becomes PAGADO and the appointment is
    marked PAGADO even when there is no deposit. An appointment that is
    already PAGADO is left untouched and reported with ``ya_confirmado``.
    """
    id_cita = parse_id(id_raw)
    payload = parse_json_body(payload)

    id_pago = payload.get('id_pago')
    if not id_pago:
        raise ValidationError('id_pago es obligatorio para confirmar el pago')
    id_pago = str(id_pago)

    monto_pagado = None
    if payload.get('monto_pagado') not in (None, ''):
        monto_pagado = to_decimal(payload.get('monto_pagado'))
        if monto_pagado is None or monto_pagado < 0:
            raise ValidationError('monto_pagado debe ser un número mayor o igual a 0')

    origen = payload.get('origen') or 'CAJA'

    with transaccion() as session:
        cita = citas_repository.obtener_cita_por_id(session, id_cita, for_update=True)
        if not cita:
            raise NotFoundError('Cita no encontrada')

        if cita.estado_pago == EstadoPago.PAGADO:
            logger.info("[SIGCD] Cita %s ya estaba PAGADA; confirmación %s ignorada", id_cita, id_pago)
            return {
                'message': 'El pago de la cita ya estaba confirmado',
                'id_cita': id_cita,
                'id_pago_caja': cita.id_pago_caja,
                'origen': origen,
                'estado_pago': cita.estado_pago,
                'anticipo': None,
                'ya_confirmado': True,
            }

        anticipo = citas_repository.obtener_anticipo_pendiente_por_cita(session, id_cita)
        if anticipo:
            citas_repository.actualizar_anticipo_como_pagado(session, anticipo, id_pago)

        citas_repository.actualizar_cita_como_pagada(session, cita, id_pago, monto_pagado)

        resumen_anticipo = None
        if anticipo:
            resumen_anticipo = {
                'id_anticipo': anticipo.id_anticipo,
                'id_cita': anticipo.id_cita,
                'id_paciente': anticipo.id_paciente,
            }

        log_audit(session, 'cita', 'confirmar_pago', entity_id=id_cita, usuario=origen, details={
            'id_pago_caja': id_pago,
            'monto_pagado': monto_pagado,
            'id_anticipo': resumen_anticipo['id_anticipo'] if resumen_anticipo else None,
        })

    logger.info("[SIGCD] Pago %s confirmado para la cita %s", id_pago, id_cita)
    return {
        'message': 'Pago confirmado correctamente para la cita',
        'id_cita': id_cita,
        'id_pago_caja': id_pago,
        'origen': origen,
        'estado_pago': EstadoPago.PAGADO,
        'anticipo': resumen_anticipo,
        'ya_confirmado': False,
    }


def registrar_pago_parcial(id_raw, payload):
    """
    Apply one payment to the appointment ledger and recompute paid amount,
    pending balance (never below zero) and payment status.
    """
    id_cita = parse_id(id_raw)
    payload = parse_json_body(payload)

    monto = to_decimal(payload.get('monto'))
    if monto is None or monto <= 0:
        raise ValidationError('monto debe ser un número mayor que 0')

    origen = payload.get('origen') or 'CAJA'
    id_pago_caja = str(payload['id_pago_caja']) if payload.get('id_pago_caja') else None
    observaciones = payload.get('observaciones') or None

    with transaccion() as session:
        cita = citas_repository.obtener_cita_por_id(session, id_cita, for_update=True)
        if not cita:
            raise NotFoundError('Cita no encontrada')
        if cita.estado_pago == EstadoPago.PAGADO:
            raise InvalidStateError('La cita ya está pagada; no se admiten más pagos')

        monto_cobro = Decimal(cita.monto_cobro or 0)
        if monto_cobro <= 0:
            raise ValidationError('La cita no tiene monto_cobro configurado')

        nuevo_monto_pagado = Decimal(cita.monto_pagado or 0) + monto
        saldo = max(Decimal('0'), monto_cobro - nuevo_monto_pagado)
        nuevo_estado_pago = EstadoPago.PAGADO if saldo == 0 else EstadoPago.PAGO_PARCIAL

        id_pago_cita = citas_repository.crear_pago_cita(
            session,
            id_cita=id_cita,
            id_paciente=cita.id_paciente,
            monto=monto,
            origen=origen,
            id_pago_caja=id_pago_caja,
            observaciones=observaciones,
        )
        citas_repository.actualizar_montos_cita(session, cita, nuevo_monto_pagado, saldo, nuevo_estado_pago)

        if nuevo_estado_pago == EstadoPago.PAGADO:
            anticipo = citas_repository.obtener_anticipo_pendiente_por_cita(session, id_cita)
            if anticipo:
                citas_repository.actualizar_anticipo_como_pagado(session, anticipo, id_pago_caja)

        log_audit(session, 'pago_cita', 'pago_parcial', entity_id=id_pago_cita, usuario=origen, details={
            'id_cita': id_cita,
            'monto': monto,
            'saldo_pendiente': saldo,
        })

    return {
        'message': 'Pago registrado correctamente',
        'id_cita': id_cita,
        'id_pago_cita': id_pago_cita,
        'estado_pago': nuevo_estado_pago,
        'monto_pagado': float(nuevo_monto_pagado),
        'saldo_pendiente': float(saldo),
    }


def _validar_transicion(session, cita, nuevo_estado):
    actual = cita.estado_cita

    if nuevo_estado == EstadoCita.ATENDIDA:
        if actual != EstadoCita.CONFIRMADA:
            raise InvalidStateError(
                f'Solo se puede marcar como ATENDIDA una cita CONFIRMADA (estado actual: {actual})'
            )
        if citas_repository.obtener_anticipo_pendiente_por_cita(session, cita.id_cita):
            raise InvalidStateError('La cita tiene un anticipo PENDIENTE; confirme el pago antes de marcarla como ATENDIDA')
        return

    if nuevo_estado not in EstadoCita.TRANSICIONES.get(actual, ()):
        raise InvalidStateError(f'No se puede cambiar la cita de {actual} a {nuevo_estado}')


def cambiar_estado_cita(id_raw, nuevo_estado, usuario=None):
    """Apply a forward-only status transition and return the refreshed detail."""
    id_cita = parse_id(id_raw)
    if nuevo_estado not in EstadoCita.TODOS:
        raise ValidationError(f'Estado de cita no válido: {nuevo_estado}')

    with transaccion() as session:
        cita = citas_repository.obtener_cita_por_id(session, id_cita, for_update=True)
        if not cita:
            raise NotFoundError('Cita no encontrada')

        estado_anterior = cita.estado_cita
        _validar_transicion(session, cita, nuevo_estado)

        if not citas_repository.actualizar_estado_cita(session, id_cita, nuevo_estado):
            raise NotFoundError('Cita no encontrada')

        log_audit(session, 'cita', 'estado', entity_id=id_cita, usuario=usuario, details={
            'de': estado_anterior,
            'a': nuevo_estado,
        })

    logger.info("[SIGCD] Cita %s: %s -> %s", id_cita, estado_anterior, nuevo_estado)
    return obtener_detalle_cita(id_cita)


def iniciar_atencion(id_raw):
    return cambiar_estado_cita(id_raw, EstadoCita.CONFIRMADA)


def marcar_atendida(id_raw):
    return cambiar_estado_cita(id_raw, EstadoCita.ATENDIDA)


def cancelar_cita(id_raw):
    return cambiar_estado_cita(id_raw, EstadoCita.CANCELADA)


def registrar_pago_anticipo_en_caja(id_raw):
    """Send the appointment charge to Caja (POST /api/cobros)."""
    id_cita = parse_id(id_raw)
    cita = citas_repository.obtener_cita_por_id(db.session, id_cita)
    if not cita:
        raise NotFoundError('Cita no encontrada')

    if cita.estado_pago == EstadoPago.PAGADO:
        raise InvalidStateError('La cita ya tiene el pago registrado')

    if not cita.monto_cobro or Decimal(cita.monto_cobro) <= 0:
        raise InvalidStateError('La cita no tiene monto de cobro configurado')

    resultado_caja = caja_client.crear_cobro_en_caja(
        id_cita=cita.id_cita,
        id_paciente=cita.id_paciente,
        monto=float(cita.monto_cobro),
        metodo_pago='EFECTIVO',
    )

    timeout = isinstance(resultado_caja, dict) and resultado_caja.get('timeout')
    return {
        'mensaje': (
            'Cobro enviado a Caja (respuesta no confirmada; revisar en Caja).'
            if timeout else 'Cobro enviado a Caja correctamente'
        ),
        'caja': resultado_caja,
    }
