"""
Repository layer: per-entity data access over an explicit SQLAlchemy session.
"""
from . import citas, medicos, pacientes, tratamientos

__all__ = ["citas", "medicos", "pacientes", "tratamientos"]
