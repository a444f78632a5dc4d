from sqlalchemy import select

from sigcd.models import Medico


def listar_medicos(session, solo_activos=False):
    query = select(Medico)
    if solo_activos:
        query = query.where(Medico.activo.is_(True))
    return session.execute(query.order_by(Medico.nombre, Medico.apellidos)).scalars().all()


def obtener_medico_por_id(session, id_medico):
    return session.get(Medico, id_medico)


def crear_medico(session, datos):
    medico = Medico(
        nombre=datos['nombre'],
        apellidos=datos['apellidos'],
        especialidad=datos.get('especialidad'),
        cedula_profesional=datos.get('cedula_profesional'),
        activo=datos.get('activo', True),
    )
    session.add(medico)
    session.flush()
    return medico
