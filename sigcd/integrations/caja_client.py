"""
Client for the Caja (billing) API.

Caja is the system of record for patient balances and charges. All calls use
the short CAJA_TIMEOUT; callers decide whether a failure is blocking.
"""
import logging

import requests
from flask import current_app

from sigcd.errors import ValidationError
from .http import json_or_text, safe_get, safe_post, wrap_error

logger = logging.getLogger(__name__)

CONTEXT = 'CAJA'


def _url(path):
    return f"{current_app.config['CAJA_BASE_URL'].rstrip('/')}{path}"


def _timeout():
    return current_app.config.get('CAJA_TIMEOUT', 2)


def registrar_paciente(paciente):
    """POST /api/pacientes"""
    return safe_post(_url('/api/pacientes'), paciente, CONTEXT, _timeout())


def crear_presupuesto(id_paciente, tratamientos):
    """POST /api/presupuestos/crear with {idPaciente, tratamientos}"""
    if not id_paciente or not isinstance(tratamientos, list) or not tratamientos:
        raise ValidationError('idPaciente y tratamientos son obligatorios para crear un presupuesto en Caja')
    return safe_post(
        _url('/api/presupuestos/crear'),
        {'idPaciente': id_paciente, 'tratamientos': tratamientos},
        CONTEXT,
        _timeout(),
    )


def obtener_saldo_paciente(id_paciente):
    """GET {CAJA_SALDO_PACIENTE_URL}/<id_paciente>"""
    if not id_paciente:
        raise ValidationError('idPaciente es obligatorio para consultar el saldo en Caja')
    base = current_app.config['CAJA_SALDO_PACIENTE_URL'].rstrip('/')
    return safe_get(f"{base}/{id_paciente}", 'CAJA_SALDO_PACIENTE', _timeout())


def bloquear_monto(id_paciente, monto):
    """POST /api/caja/bloquear-monto"""
    try:
        monto_valido = monto is not None and float(monto) > 0
    except (TypeError, ValueError):
        monto_valido = False
    if not id_paciente or not monto_valido:
        raise ValidationError('idPaciente y monto (> 0) son obligatorios para bloquear monto en Caja')
    return safe_post(
        _url('/api/caja/bloquear-monto'),
        {'idPaciente': id_paciente, 'monto': float(monto)},
        CONTEXT,
        _timeout(),
    )


def crear_cobro_en_caja(id_cita, id_paciente, monto, metodo_pago='EFECTIVO'):
    """
    POST /api/cobros

    A timeout is not an error here: Caja usually registers the charge even when
    the answer does not arrive in time, so the caller gets a soft result with
    ``timeout: True`` and staff reconcile in Caja.
    """
    url = _url('/api/cobros')
    body = {
        'idCita': id_cita,
        'idPaciente': id_paciente,
        'monto': monto,
        'metodoPago': metodo_pago,
    }
    try:
        response = requests.request('POST', url, json=body, timeout=_timeout())
        response.raise_for_status()
    except requests.exceptions.Timeout:
        logger.warning(
            "[CAJA] Timeout esperando respuesta de /api/cobros; "
            "es probable que el cobro se haya creado correctamente en Caja."
        )
        return {
            'mensaje': 'Cobro enviado a Caja (timeout al esperar la respuesta). Revisar en Caja si quedó registrado.',
            'timeout': True,
        }
    except requests.exceptions.RequestException as e:
        raise wrap_error(e, CONTEXT, 'POST', url) from e
    return json_or_text(response)


def sincronizar_tratamiento(tratamiento):
    """POST /api/tratamientos/sync-desde-sigcd with {tratamientos: [tratamiento]}"""
    if not tratamiento or not tratamiento.get('nombre'):
        raise ValidationError('Tratamiento inválido: falta al menos el campo "nombre" para sincronizar en Caja')
    return safe_post(
        _url('/api/tratamientos/sync-desde-sigcd'),
        {'tratamientos': [tratamiento]},
        CONTEXT,
        _timeout(),
    )
