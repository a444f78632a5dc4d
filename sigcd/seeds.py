"""
Catalog seed data (doctors and treatments) for new installations.
Run with: flask --app wsgi seed-catalogos
"""
import logging
from decimal import Decimal

from sigcd.extensions import db
from sigcd.models import Medico, Tratamiento

logger = logging.getLogger(__name__)

MEDICOS = [
    {"nombre": "Laura", "apellidos": "Méndez Ortiz", "especialidad": "Odontología general", "cedula_profesional": "OD-104512"},
    {"nombre": "Ricardo", "apellidos": "Salas Pérez", "especialidad": "Endodoncia", "cedula_profesional": "EN-220871"},
    {"nombre": "Mariana", "apellidos": "Torres Gil", "especialidad": "Ortodoncia", "cedula_profesional": "OR-318044"},
]

TRATAMIENTOS = [
    {"cve_trat": "LIMP-01", "nombre": "Limpieza dental", "precio_base": "600.00", "duracion_min": 45},
    {"cve_trat": "RES-01", "nombre": "Resina (una pieza)", "precio_base": "850.00", "duracion_min": 60},
    {"cve_trat": "ENDO-01", "nombre": "Endodoncia unirradicular", "precio_base": "3500.00", "duracion_min": 90},
    {"cve_trat": "EXT-01", "nombre": "Extracción simple", "precio_base": "900.00", "duracion_min": 40},
    {"cve_trat": "VAL-01", "nombre": "Valoración", "precio_base": "300.00", "duracion_min": 30},
]


def seed_catalogos():
    """Create the default doctors and treatments when the tables are empty. Returns (medicos, tratamientos) created."""
    medicos_creados = 0
    tratamientos_creados = 0
    try:
        if Medico.query.count() == 0:
            for datos in MEDICOS:
                db.session.add(Medico(activo=True, **datos))
                medicos_creados += 1
        if Tratamiento.query.count() == 0:
            for datos in TRATAMIENTOS:
                db.session.add(Tratamiento(
                    cve_trat=datos["cve_trat"],
                    nombre=datos["nombre"],
                    precio_base=Decimal(datos["precio_base"]),
                    duracion_min=datos["duracion_min"],
                    activo=True,
                ))
                tratamientos_creados += 1
        db.session.commit()
    except Exception:
        db.session.rollback()
        logger.error("Catalog seeding failed", exc_info=True)
        raise
    logger.info("Seeded %d doctors and %d treatments", medicos_creados, tratamientos_creados)
    return medicos_creados, tratamientos_creados
