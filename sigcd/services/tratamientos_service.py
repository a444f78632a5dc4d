"""
Tratamientos Service
Treatment catalog; every change is pushed to Caja and Atención Clínica
"""
import logging

from sigcd.errors import ConflictError, NotFoundError, ValidationError
from sigcd.extensions import db
from sigcd.repositories import tratamientos as tratamientos_repository
from sigcd.utils.conversion import parse_id, parse_json_body, parse_optional_int, to_boolean, to_decimal
from tasks import integration_tasks
from .despacho import despachar
from .transacciones import transaccion

logger = logging.getLogger(__name__)


def _sincronizar(tratamiento):
    despachar(integration_tasks.sincronizar_tratamiento_caja, tratamiento)
    despachar(integration_tasks.sincronizar_tratamiento_atencion, tratamiento)


def _validar_precio(value):
    precio = to_decimal(value)
    if precio is None or precio <= 0:
        raise ValidationError('precio_base debe ser un número mayor que 0')
    return precio


def _validar_duracion(value):
    duracion = parse_optional_int(value, 'duracion_min')
    if duracion is not None and duracion < 0:
        raise ValidationError('duracion_min no puede ser negativa')
    return duracion


def listar_tratamientos(args):
    args = args or {}
    page = parse_optional_int(args.get('page'), 'page') or 1
    page_size = parse_optional_int(args.get('pageSize'), 'pageSize') or 50
    if page < 1:
        page = 1
    if page_size < 1 or page_size > 100:
        page_size = 50

    tratamientos, total = tratamientos_repository.listar_tratamientos(
        db.session,
        q=args.get('q'),
        solo_activos=to_boolean(args.get('activos')),
        page=page,
        page_size=page_size,
    )
    return {
        'total': total,
        'page': page,
        'pageSize': page_size,
        'tratamientos': [t.to_dict() for t in tratamientos],
    }


def obtener_tratamiento(id_raw):
    id_tratamiento = parse_id(id_raw, 'El id del tratamiento')
    tratamiento = tratamientos_repository.obtener_tratamiento_por_id(db.session, id_tratamiento)
    if not tratamiento:
        raise NotFoundError('Tratamiento no encontrado')
    return tratamiento.to_dict()


def crear_tratamiento(payload):
    payload = parse_json_body(payload)
    cve_trat = (payload.get('cve_trat') or '').strip()
    nombre = (payload.get('nombre') or '').strip()
    if not cve_trat or not nombre:
        raise ValidationError('cve_trat y nombre son obligatorios')

    datos = {
        'cve_trat': cve_trat,
        'nombre': nombre,
        'descripcion': payload.get('descripcion') or None,
        'precio_base': _validar_precio(payload.get('precio_base')),
        'duracion_min': _validar_duracion(payload.get('duracion_min')),
        'activo': to_boolean(payload['activo']) if 'activo' in payload else True,
    }

    with transaccion() as session:
        if tratamientos_repository.existe_cve_trat(session, cve_trat):
            raise ConflictError(f'Ya existe un tratamiento con la clave {cve_trat}')
        resultado = tratamientos_repository.crear_tratamiento(session, datos).to_dict()

    logger.info("[SIGCD] Tratamiento %s creado", cve_trat)
    _sincronizar(resultado)
    return resultado


def actualizar_tratamiento(id_raw, payload):
    id_tratamiento = parse_id(id_raw, 'El id del tratamiento')
    payload = parse_json_body(payload)

    campos = {
        campo: payload[campo]
        for campo in tratamientos_repository.CAMPOS_ACTUALIZABLES
        if campo in payload
    }
    if not campos:
        raise ValidationError('No se enviaron campos para actualizar')

    if 'cve_trat' in campos:
        campos['cve_trat'] = (campos['cve_trat'] or '').strip()
        if not campos['cve_trat']:
            raise ValidationError('cve_trat no puede estar vacía')
    if 'nombre' in campos:
        campos['nombre'] = (campos['nombre'] or '').strip()
        if not campos['nombre']:
            raise ValidationError('nombre no puede estar vacío')
    if 'precio_base' in campos:
        campos['precio_base'] = _validar_precio(campos['precio_base'])
    if 'duracion_min' in campos:
        campos['duracion_min'] = _validar_duracion(campos['duracion_min'])
    if 'activo' in campos:
        campos['activo'] = to_boolean(campos['activo'])

    with transaccion() as session:
        tratamiento = tratamientos_repository.obtener_tratamiento_por_id(session, id_tratamiento)
        if not tratamiento:
            raise NotFoundError('Tratamiento no encontrado')
        if 'cve_trat' in campos and tratamientos_repository.existe_cve_trat(session, campos['cve_trat'], id_tratamiento):
            raise ConflictError(f"Ya existe un tratamiento con la clave {campos['cve_trat']}")
        resultado = tratamientos_repository.actualizar_tratamiento(session, tratamiento, campos).to_dict()

    _sincronizar(resultado)
    return resultado
