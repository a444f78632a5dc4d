from .conversion import (
    to_boolean,
    to_decimal,
    to_float,
    normalizar_fecha_cita,
    parse_fecha_cita,
    parse_id,
    parse_json_body,
)
from .folio import generar_folio_cita

__all__ = [
    "to_boolean",
    "to_decimal",
    "to_float",
    "normalizar_fecha_cita",
    "parse_fecha_cita",
    "parse_id",
    "parse_json_body",
    "generar_folio_cita",
]
