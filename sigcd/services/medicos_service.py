from sigcd.errors import NotFoundError, ValidationError
from sigcd.extensions import db
from sigcd.repositories import medicos as medicos_repository
from sigcd.utils.conversion import parse_id, parse_json_body, to_boolean
from .transacciones import transaccion


def listar_medicos(args):
    solo_activos = to_boolean((args or {}).get('activos'))
    return [m.to_dict() for m in medicos_repository.listar_medicos(db.session, solo_activos)]


def obtener_medico(id_raw):
    id_medico = parse_id(id_raw, 'El id del médico')
    medico = medicos_repository.obtener_medico_por_id(db.session, id_medico)
    if not medico:
        raise NotFoundError('Médico no encontrado')
    return medico.to_dict()


def crear_medico(payload):
    payload = parse_json_body(payload)
    nombre = (payload.get('nombre') or '').strip()
    apellidos = (payload.get('apellidos') or '').strip()
    if not nombre or not apellidos:
        raise ValidationError('nombre y apellidos son obligatorios')

    datos = {
        'nombre': nombre,
        'apellidos': apellidos,
        'especialidad': payload.get('especialidad') or None,
        'cedula_profesional': payload.get('cedula_profesional') or None,
        'activo': to_boolean(payload['activo']) if 'activo' in payload else True,
    }
    with transaccion() as session:
        resultado = medicos_repository.crear_medico(session, datos).to_dict()
    return resultado
