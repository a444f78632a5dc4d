"""Shared test fixtures."""
from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from sigcd import create_app
from sigcd.extensions import db
from sigcd.models import Medico, Paciente, Tratamiento


def make_response(status_code=200, body=None):
    """Fake requests.Response with a JSON body."""
    response = MagicMock()
    response.status_code = status_code
    response.content = b'{}'
    response.json.return_value = body if body is not None else {}
    response.text = str(body)
    response.raise_for_status.return_value = None
    return response


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture(autouse=True)
def http_mock():
    """Every outbound call to Caja / Atención Clínica goes through requests.request."""
    with patch('requests.request') as mock_request:
        mock_request.return_value = make_response(body={'saldo': 0})
        yield mock_request


@pytest.fixture
def catalogos(app):
    """Paciente 1, médicos 1 and 2, tratamiento 1."""
    paciente = Paciente(
        nombre='Ana',
        apellidos='López Ruiz',
        fecha_nacimiento=date(1990, 4, 12),
        telefono='5512345678',
        email='ana@example.com',
        canal_preferente='WHATSAPP',
    )
    otro_paciente = Paciente(nombre='Jorge', apellidos='Díaz Mora', telefono='5587654321')
    medico_1 = Medico(nombre='Laura', apellidos='Méndez Ortiz', especialidad='Odontología general')
    medico_2 = Medico(nombre='Ricardo', apellidos='Salas Pérez', especialidad='Endodoncia')
    tratamiento = Tratamiento(cve_trat='LIMP-01', nombre='Limpieza dental', precio_base=Decimal('600.00'), duracion_min=45)
    db.session.add_all([paciente, otro_paciente, medico_1, medico_2, tratamiento])
    db.session.commit()
    return {
        'id_paciente': paciente.id_paciente,
        'id_otro_paciente': otro_paciente.id_paciente,
        'id_medico_1': medico_1.id_medico,
        'id_medico_2': medico_2.id_medico,
        'id_tratamiento': tratamiento.id_tratamiento,
    }


@pytest.fixture
def agendar(client, catalogos):
    """POST /citas with sensible defaults; keyword arguments override the body."""
    def _agendar(**overrides):
        body = {
            'id_paciente': catalogos['id_paciente'],
            'id_medico': catalogos['id_medico_2'],
            'fecha_cita': '2025-12-05T16:00',
            'medio_solicitud': 'PRESENCIAL',
        }
        body.update(overrides)
        return client.post('/citas', json=body)
    return _agendar
