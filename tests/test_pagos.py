"""Tests for payment confirmation, the partial payment ledger and the Caja charge."""
import requests

from sigcd.extensions import db
from sigcd.models import AnticipoCita, Cita, PagoCita


def _cita(id_cita):
    db.session.expire_all()
    return db.session.get(Cita, id_cita)


class TestConfirmarPago:
    """POST /citas/<id>/confirmar-pago"""

    def test_settles_deposit_and_appointment(self, client, agendar):
        creada = agendar(requiere_anticipo=True, monto_anticipo=500).get_json()

        response = client.post(
            f"/citas/{creada['id_cita']}/confirmar-pago",
            json={'id_pago': 'CAJA-77', 'monto_pagado': 500},
        )

        assert response.status_code == 200
        data = response.get_json()
        assert data['id_pago_caja'] == 'CAJA-77'
        assert data['origen'] == 'CAJA'
        assert data['ya_confirmado'] is False
        assert data['anticipo']['id_anticipo'] == creada['id_anticipo']

        cita = _cita(creada['id_cita'])
        assert cita.estado_pago == 'PAGADO'
        assert cita.id_pago_caja == 'CAJA-77'
        assert float(cita.monto_pagado) == 500
        assert float(cita.saldo_pendiente) == 0
        anticipo = db.session.get(AnticipoCita, creada['id_anticipo'])
        assert anticipo.estado == 'PAGADO'
        assert anticipo.id_pago_caja == 'CAJA-77'
        assert anticipo.fecha_confirmacion is not None

    def test_without_deposit_still_marks_paid(self, client, agendar):
        id_cita = agendar().get_json()['id_cita']

        data = client.post(f'/citas/{id_cita}/confirmar-pago', json={'id_pago': 'P-1'}).get_json()

        assert data['anticipo'] is None
        cita = _cita(id_cita)
        assert cita.estado_pago == 'PAGADO'
        assert cita.monto_pagado is None

    def test_paid_amount_defaults_to_charge(self, client, agendar):
        id_cita = agendar(requiere_anticipo=True, monto_anticipo=500).get_json()['id_cita']

        client.post(f'/citas/{id_cita}/confirmar-pago', json={'id_pago': 'PAGO-123'})

        cita = _cita(id_cita)
        assert float(cita.monto_pagado) == 500
        assert float(cita.saldo_pendiente) == 0

    def test_repeated_confirmation_is_a_no_op(self, client, agendar):
        id_cita = agendar(requiere_anticipo=True, monto_anticipo=500).get_json()['id_cita']
        client.post(f'/citas/{id_cita}/confirmar-pago', json={'id_pago': 'P-1'})

        response = client.post(f'/citas/{id_cita}/confirmar-pago', json={'id_pago': 'P-2'})

        assert response.status_code == 200
        assert response.get_json()['ya_confirmado'] is True
        assert _cita(id_cita).id_pago_caja == 'P-1'

    def test_validation(self, client, agendar):
        id_cita = agendar().get_json()['id_cita']

        assert client.post(f'/citas/{id_cita}/confirmar-pago', json={}).status_code == 400
        assert client.post(
            f'/citas/{id_cita}/confirmar-pago', json={'id_pago': 'P-1', 'monto_pagado': -5}
        ).status_code == 400
        assert client.post('/citas/999/confirmar-pago', json={'id_pago': 'P-1'}).status_code == 404
        assert client.post('/citas/0/confirmar-pago', json={'id_pago': 'P-1'}).status_code == 400
        assert _cita(id_cita).estado_pago == 'SIN_PAGO'


class TestPagoParcial:
    """POST /citas/<id>/pagos"""

    def test_accumulates_and_clamps(self, client, agendar):
        creada = agendar(requiere_anticipo=True, monto_anticipo=500).get_json()
        url = f"/citas/{creada['id_cita']}/pagos"

        primero = client.post(url, json={'monto': 300, 'id_pago_caja': 'C-1'})
        assert primero.status_code == 201
        assert primero.get_json()['estado_pago'] == 'PAGO_PARCIAL'
        assert primero.get_json()['saldo_pendiente'] == 200
        assert db.session.get(AnticipoCita, creada['id_anticipo']).estado == 'PENDIENTE'

        segundo = client.post(url, json={'monto': 250, 'id_pago_caja': 'C-2'}).get_json()
        assert segundo['estado_pago'] == 'PAGADO'
        assert segundo['monto_pagado'] == 550
        assert segundo['saldo_pendiente'] == 0
        db.session.expire_all()
        assert db.session.get(AnticipoCita, creada['id_anticipo']).estado == 'PAGADO'

        assert client.post(url, json={'monto': 100}).status_code == 400
        assert PagoCita.query.filter_by(id_cita=creada['id_cita']).count() == 2
        cita = _cita(creada['id_cita'])
        assert float(cita.saldo_pendiente) == 0

    def test_ledger_shows_in_detail(self, client, agendar):
        id_cita = agendar(requiere_anticipo=True, monto_anticipo=500).get_json()['id_cita']
        client.post(f'/citas/{id_cita}/pagos', json={'monto': 150, 'origen': 'MOSTRADOR', 'observaciones': 'efectivo'})

        pagos = client.get(f'/citas/{id_cita}').get_json()['cita']['pagos']

        assert len(pagos) == 1
        assert pagos[0]['monto'] == 150
        assert pagos[0]['origen'] == 'MOSTRADOR'

    def test_rejects_invalid_amount(self, client, agendar):
        id_cita = agendar(requiere_anticipo=True, monto_anticipo=500).get_json()['id_cita']

        for monto in (0, -1, 'cien', None):
            assert client.post(f'/citas/{id_cita}/pagos', json={'monto': monto}).status_code == 400
        assert PagoCita.query.count() == 0

    def test_requires_charge_amount(self, client, agendar):
        id_cita = agendar().get_json()['id_cita']

        response = client.post(f'/citas/{id_cita}/pagos', json={'monto': 100})

        assert response.status_code == 400
        assert PagoCita.query.count() == 0

    def test_rejected_once_confirmed(self, client, agendar):
        id_cita = agendar(requiere_anticipo=True, monto_anticipo=500).get_json()['id_cita']
        client.post(f'/citas/{id_cita}/confirmar-pago', json={'id_pago': 'PAGO-123'})

        response = client.post(f'/citas/{id_cita}/pagos', json={'monto': 100})

        assert response.status_code == 400
        assert response.get_json()['code'] == 'INVALID_STATE'
        assert PagoCita.query.count() == 0
        cita = _cita(id_cita)
        assert cita.estado_pago == 'PAGADO'
        assert float(cita.monto_pagado) == 500
        assert float(cita.saldo_pendiente) == 0

    def test_rejects_non_object_body(self, client, agendar):
        id_cita = agendar(requiere_anticipo=True, monto_anticipo=500).get_json()['id_cita']

        response = client.post(f'/citas/{id_cita}/pagos', json=[100])

        assert response.status_code == 400
        assert response.get_json()['code'] == 'VALIDATION_ERROR'

    def test_unknown_appointment(self, client, catalogos):
        assert client.post('/citas/999/pagos', json={'monto': 100}).status_code == 404


class TestRegistrarCobroCaja:
    """POST /citas/<id>/registrar-cobro-caja"""

    def test_sends_charge(self, client, agendar, http_mock, catalogos):
        id_cita = agendar(requiere_anticipo=True, monto_anticipo=500).get_json()['id_cita']

        response = client.post(f'/citas/{id_cita}/registrar-cobro-caja')

        assert response.status_code == 200
        http_mock.assert_any_call(
            'POST',
            'http://caja.test/api/cobros',
            json={'idCita': id_cita, 'idPaciente': catalogos['id_paciente'], 'monto': 500.0, 'metodoPago': 'EFECTIVO'},
            timeout=2,
        )

    def test_timeout_is_soft(self, client, agendar, http_mock):
        id_cita = agendar(requiere_anticipo=True, monto_anticipo=500).get_json()['id_cita']
        http_mock.side_effect = requests.exceptions.ReadTimeout('slow')

        response = client.post(f'/citas/{id_cita}/registrar-cobro-caja')

        assert response.status_code == 200
        data = response.get_json()
        assert data['caja']['timeout'] is True
        assert 'no confirmada' in data['mensaje']

    def test_caja_error_is_reported(self, client, agendar, http_mock):
        id_cita = agendar(requiere_anticipo=True, monto_anticipo=500).get_json()['id_cita']
        http_mock.side_effect = requests.exceptions.ConnectionError('refused')

        response = client.post(f'/citas/{id_cita}/registrar-cobro-caja')

        assert response.status_code == 502
        assert response.get_json() == {'error': 'Error interno del servidor', 'code': 'INTEGRATION_ERROR'}

    def test_rejected_without_charge_or_when_paid(self, client, agendar):
        sin_cobro = agendar(fecha_cita='2025-12-05 09:00').get_json()['id_cita']
        assert client.post(f'/citas/{sin_cobro}/registrar-cobro-caja').status_code == 400

        pagada = agendar(fecha_cita='2025-12-06 09:00', requiere_anticipo=True, monto_anticipo=300).get_json()['id_cita']
        client.post(f'/citas/{pagada}/confirmar-pago', json={'id_pago': 'P-9'})
        assert client.post(f'/citas/{pagada}/registrar-cobro-caja').status_code == 400
