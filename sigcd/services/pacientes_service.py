"""
Pacientes Service
Patient CRUD plus best-effort propagation to Caja and Atención Clínica
"""
import logging
from datetime import datetime

from sigcd.errors import NotFoundError, ValidationError
from sigcd.extensions import db
from sigcd.integrations import caja_client
from sigcd.repositories import pacientes as pacientes_repository
from sigcd.utils.conversion import format_date, parse_id, parse_json_body, parse_optional_int
from tasks import integration_tasks
from .despacho import despachar
from .transacciones import transaccion

logger = logging.getLogger(__name__)

CANALES = ('WHATSAPP', 'TELEFONO', 'EMAIL', 'PRESENCIAL')


def _parse_fecha_nacimiento(value):
    if not value:
        return None
    try:
        return datetime.strptime(value.strip(), '%Y-%m-%d').date()
    except (AttributeError, ValueError):
        raise ValidationError('fecha_nacimiento debe tener el formato YYYY-MM-DD')


def _validar_canal(canal):
    if canal and canal not in CANALES:
        raise ValidationError(f"canal_preferente debe ser uno de: {', '.join(CANALES)}")


def listar_pacientes(args):
    args = args or {}
    page = parse_optional_int(args.get('page'), 'page') or 1
    page_size = parse_optional_int(args.get('pageSize'), 'pageSize') or 20
    if page < 1:
        page = 1
    if page_size < 1 or page_size > 100:
        page_size = 20

    q = (args.get('q') or '').strip() or None
    canal = args.get('canal_preferente') or None

    pacientes, total = pacientes_repository.listar_pacientes(db.session, q, canal, page, page_size)
    return {
        'total': total,
        'page': page,
        'pageSize': page_size,
        'totalPages': max(1, -(-total // page_size)),
        'pacientes': [p.to_dict() for p in pacientes],
    }


def obtener_paciente(id_raw):
    id_paciente = parse_id(id_raw, 'El id del paciente')
    paciente = pacientes_repository.obtener_paciente_por_id(db.session, id_paciente)
    if not paciente:
        raise NotFoundError('Paciente no encontrado')
    return paciente.to_dict()


def crear_paciente(payload):
    """Create the patient, then register it in Caja and Atención Clínica."""
    payload = parse_json_body(payload)
    nombre = (payload.get('nombre') or '').strip()
    apellidos = (payload.get('apellidos') or '').strip()
    if not nombre or not apellidos:
        raise ValidationError('nombre y apellidos son obligatorios')

    canal = payload.get('canal_preferente') or None
    _validar_canal(canal)

    datos = {
        'nombre': nombre,
        'apellidos': apellidos,
        'fecha_nacimiento': _parse_fecha_nacimiento(payload.get('fecha_nacimiento')),
        'telefono': payload.get('telefono'),
        'email': payload.get('email'),
        'canal_preferente': canal,
    }

    with transaccion() as session:
        paciente = pacientes_repository.crear_paciente(session, datos)
        resultado = paciente.to_dict()

    logger.info("[SIGCD] Paciente %s creado", resultado['id_paciente'])

    despachar(integration_tasks.registrar_paciente_caja, resultado)
    despachar(integration_tasks.sincronizar_paciente_atencion, {
        'nombre': resultado['nombre'],
        'apellidos': resultado['apellidos'],
        'fecha_nacimiento': format_date(datos['fecha_nacimiento']),
        'telefono': resultado['telefono'],
        'correo': resultado['email'],
    })
    return resultado


def actualizar_paciente(id_raw, payload):
    """Partial update; only the fields present in the body are touched."""
    id_paciente = parse_id(id_raw, 'El id del paciente')
    payload = parse_json_body(payload)

    campos = {
        campo: payload[campo]
        for campo in pacientes_repository.CAMPOS_ACTUALIZABLES
        if campo in payload
    }
    if not campos:
        raise ValidationError('No se enviaron campos para actualizar')

    for campo in ('nombre', 'apellidos'):
        if campo in campos and not str(campos[campo] or '').strip():
            raise ValidationError(f'{campo} no puede estar vacío')
    if 'fecha_nacimiento' in campos:
        campos['fecha_nacimiento'] = _parse_fecha_nacimiento(campos['fecha_nacimiento'])
    if 'canal_preferente' in campos:
        _validar_canal(campos['canal_preferente'])

    with transaccion() as session:
        if not pacientes_repository.actualizar_paciente(session, id_paciente, campos):
            raise NotFoundError('Paciente no encontrado')
        resultado = pacientes_repository.obtener_paciente_por_id(session, id_paciente).to_dict()

    return resultado


def obtener_saldo_paciente_caja(id_raw):
    """Live balance from Caja. Unlike the appointment detail, a Caja failure is returned to the caller."""
    id_paciente = parse_id(id_raw, 'El id del paciente')
    if not pacientes_repository.obtener_paciente_por_id(db.session, id_paciente):
        raise NotFoundError('Paciente no encontrado')
    return {
        'id_paciente': id_paciente,
        'saldo': caja_client.obtener_saldo_paciente(id_paciente),
    }
