"""
Input normalization helpers shared by services and models.
"""
import re
from datetime import datetime
from decimal import Decimal, InvalidOperation

from sigcd.errors import ValidationError

FECHA_CITA_FORMAT = '%Y-%m-%d %H:%M:%S'

_SIN_SEGUNDOS = re.compile(r'^\d{4}-\d{2}-\d{2} \d{2}:\d{2}$')
_CON_SEGUNDOS = re.compile(r'^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$')
_ENTERO_POSITIVO = re.compile(r'^\d+$')


def to_boolean(value):
    """Accept true/false, 1/0, "true"/"false", "1"/"0" and "on" (HTML checkbox)."""
    if value is True or value is False:
        return value
    if value in (1, '1'):
        return True
    if value in (0, '0'):
        return False
    if isinstance(value, str):
        return value.strip().lower() in ('true', 'on')
    return False


def to_decimal(value):
    """Return a Decimal, or None for None/'' and for anything non-numeric."""
    if value is None or value == '' or isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite():
        return None
    return number


def to_float(value):
    if value is None:
        return None
    return float(value)


def normalizar_fecha_cita(fecha_cita):
    """
    Normalize the datetime-local value sent by the front end
    ("2025-12-05T16:00", "2025-12-05 16:00", "2025-12-05 16:00:00")
    to 'YYYY-MM-DD HH:MM:SS'. Timezones are not touched.

    Returns None when the value cannot be normalized.
    """
    if not fecha_cita or not isinstance(fecha_cita, str):
        return None

    fecha = fecha_cita.strip().replace('T', ' ')
    if not fecha:
        return None

    if _SIN_SEGUNDOS.match(fecha):
        fecha = f"{fecha}:00"

    if not _CON_SEGUNDOS.match(fecha):
        return None

    try:
        datetime.strptime(fecha, FECHA_CITA_FORMAT)
    except ValueError:
        return None
    return fecha


def parse_fecha_cita(fecha_str):
    return datetime.strptime(fecha_str, FECHA_CITA_FORMAT)


def parse_fecha_filtro(value, campo):
    """Parse an ISO date or datetime used as list filter."""
    if not value:
        return None
    normalizada = normalizar_fecha_cita(value)
    if normalizada:
        return parse_fecha_cita(normalizada)
    try:
        return datetime.fromisoformat(value.strip())
    except ValueError:
        raise ValidationError(f'{campo} no tiene un formato de fecha válido')


def parse_id(value, campo='El id de la cita'):
    """Path/body ids must be positive integers."""
    if value is None or not _ENTERO_POSITIVO.match(str(value)) or int(value) == 0:
        raise ValidationError(f'{campo} debe ser un entero positivo')
    return int(value)


def parse_optional_int(value, campo):
    if value is None or value == '':
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{campo} debe ser un entero válido')


def format_datetime(value):
    return value.strftime(FECHA_CITA_FORMAT) if value else None


def format_date(value):
    return value.isoformat() if value else None


def parse_json_body(payload):
    """Request bodies must be JSON objects; a missing body counts as empty."""
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError('El cuerpo de la petición debe ser un objeto JSON')
    return payload
