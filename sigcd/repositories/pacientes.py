from sqlalchemy import func, or_, select

from sigcd.models import Paciente

CAMPOS_ACTUALIZABLES = ('nombre', 'apellidos', 'fecha_nacimiento', 'telefono', 'email', 'canal_preferente')


def listar_pacientes(session, q=None, canal_preferente=None, page=1, page_size=20):
    """Paginated patient list, newest registrations first. Returns (pacientes, total)."""
    query = select(Paciente)
    if q:
        pattern = f"%{q}%"
        query = query.where(or_(
            Paciente.nombre.ilike(pattern),
            Paciente.apellidos.ilike(pattern),
            Paciente.email.ilike(pattern),
        ))
    if canal_preferente:
        query = query.where(Paciente.canal_preferente == canal_preferente)

    total = session.execute(select(func.count()).select_from(query.subquery())).scalar() or 0
    pacientes = session.execute(
        query.order_by(Paciente.fecha_registro.desc(), Paciente.id_paciente.desc())
        .limit(page_size)
        .offset((page - 1) * page_size)
    ).scalars().all()
    return pacientes, total


def obtener_paciente_por_id(session, id_paciente):
    return session.get(Paciente, id_paciente)


def crear_paciente(session, datos):
    paciente = Paciente(
        nombre=datos['nombre'],
        apellidos=datos['apellidos'],
        fecha_nacimiento=datos.get('fecha_nacimiento'),
        telefono=datos.get('telefono') or None,
        email=datos.get('email') or None,
        canal_preferente=datos.get('canal_preferente') or None,
    )
    session.add(paciente)
    session.flush()
    return paciente


def actualizar_paciente(session, id_paciente, campos):
    """Apply only the given fields. Returns the number of rows touched (0 or 1)."""
    paciente = session.get(Paciente, id_paciente)
    if not paciente:
        return 0
    for campo in CAMPOS_ACTUALIZABLES:
        if campo in campos:
            setattr(paciente, campo, campos[campo] if campos[campo] != '' else None)
    session.flush()
    return 1
