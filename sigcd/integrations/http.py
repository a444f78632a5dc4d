"""
Shared HTTP helpers for the outbound integrations.

Every failure is logged with the downstream detail and re-raised as
IntegrationError carrying the downstream HTTP status (502 when there is none).
"""
import logging

import requests

from sigcd.errors import IntegrationError

logger = logging.getLogger(__name__)


def _detalle(error):
    """Downstream body when there is one, else the exception message."""
    response = getattr(error, 'response', None)
    if response is not None:
        try:
            return response.json()
        except ValueError:
            return response.text
    return str(error)


def json_or_text(response):
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def wrap_error(error, context, method, url):
    logger.error("[%s] Error en %s %s: %s", context, method, url, _detalle(error))
    response = getattr(error, 'response', None)
    status_code = response.status_code if response is not None else 502
    return IntegrationError(
        f"Error al comunicarse con {context} ({method} {url})",
        status_code=status_code,
        cause=error,
    )


def send(method, url, context, timeout, **kwargs):
    """Perform the request and return the decoded body; raises IntegrationError."""
    try:
        response = requests.request(method, url, timeout=timeout, **kwargs)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        raise wrap_error(e, context, method, url) from e
    return json_or_text(response)


def safe_post(url, body, context, timeout):
    return send('POST', url, context, timeout, json=body)


def safe_get(url, context, timeout, params=None):
    return send('GET', url, context, timeout, params=params)
