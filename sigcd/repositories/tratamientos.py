from sqlalchemy import func, or_, select

from sigcd.models import Tratamiento

CAMPOS_ACTUALIZABLES = ('cve_trat', 'nombre', 'descripcion', 'precio_base', 'duracion_min', 'activo')


def listar_tratamientos(session, q=None, solo_activos=False, page=1, page_size=50):
    """Returns (tratamientos, total) ordered by name."""
    query = select(Tratamiento)
    if q and q.strip():
        like = f"%{q.strip()}%"
        query = query.where(or_(Tratamiento.nombre.ilike(like), Tratamiento.cve_trat.ilike(like)))
    if solo_activos:
        query = query.where(Tratamiento.activo.is_(True))

    total = session.execute(select(func.count()).select_from(query.subquery())).scalar() or 0
    tratamientos = session.execute(
        query.order_by(Tratamiento.nombre.asc()).limit(page_size).offset((page - 1) * page_size)
    ).scalars().all()
    return tratamientos, total


def obtener_tratamiento_por_id(session, id_tratamiento):
    return session.get(Tratamiento, id_tratamiento)


def existe_cve_trat(session, cve_trat, excluir_id=None):
    query = select(Tratamiento.id_tratamiento).where(Tratamiento.cve_trat == cve_trat)
    if excluir_id is not None:
        query = query.where(Tratamiento.id_tratamiento != excluir_id)
    return session.execute(query.limit(1)).first() is not None


def crear_tratamiento(session, datos):
    tratamiento = Tratamiento(
        cve_trat=datos['cve_trat'],
        nombre=datos['nombre'],
        descripcion=datos.get('descripcion'),
        precio_base=datos['precio_base'],
        duracion_min=datos.get('duracion_min'),
        activo=datos.get('activo', True),
    )
    session.add(tratamiento)
    session.flush()
    return tratamiento


def actualizar_tratamiento(session, tratamiento, campos):
    for campo in CAMPOS_ACTUALIZABLES:
        if campo in campos:
            setattr(tratamiento, campo, campos[campo])
    session.flush()
    return tratamiento
