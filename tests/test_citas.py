"""End-to-end tests for appointment booking, listings and detail."""
from unittest.mock import patch

import requests

from sigcd.extensions import db
from sigcd.models import AnticipoCita, AuditLog, Cita, EstadoCita, EstadoPago


class TestCrearCita:
    """POST /citas"""

    def test_booking_with_deposit(self, agendar, catalogos):
        response = agendar(requiere_anticipo=True, monto_anticipo=500)

        assert response.status_code == 201
        data = response.get_json()
        assert data['message'] == 'Cita creada correctamente'
        assert data['folio_cita'].startswith('CITA-')
        assert data['estado_cita'] == 'PROGRAMADA'
        assert data['estado_pago'] == 'PENDIENTE'
        assert data['requiere_anticipo'] is True
        assert data['id_anticipo'] is not None

        cita = db.session.get(Cita, data['id_cita'])
        assert str(cita.fecha_cita) == '2025-12-05 16:00:00'
        assert float(cita.monto_cobro) == 500
        anticipo = db.session.get(AnticipoCita, data['id_anticipo'])
        assert anticipo.id_cita == cita.id_cita
        assert anticipo.estado == 'PENDIENTE'
        assert float(anticipo.monto_anticipo) == 500

    def test_same_slot_again_is_rejected(self, agendar):
        assert agendar(requiere_anticipo=True, monto_anticipo=500).status_code == 201

        response = agendar(requiere_anticipo=True, monto_anticipo=500)

        assert response.status_code == 409
        assert response.get_json()['code'] == 'CONFLICT'
        assert Cita.query.count() == 1

    def test_booking_without_deposit(self, agendar):
        response = agendar(requiere_anticipo='false')

        assert response.status_code == 201
        data = response.get_json()
        assert data['estado_pago'] == 'SIN_PAGO'
        assert data['id_anticipo'] is None
        cita = db.session.get(Cita, data['id_cita'])
        assert cita.monto_cobro is None
        assert AnticipoCita.query.count() == 0

    def test_missing_required_fields(self, client, catalogos):
        response = client.post('/citas', json={'id_paciente': catalogos['id_paciente']})

        assert response.status_code == 400
        assert response.get_json()['code'] == 'VALIDATION_ERROR'

    def test_body_must_be_an_object(self, client, catalogos):
        response = client.post('/citas', json=[{'id_paciente': catalogos['id_paciente']}])

        assert response.status_code == 400
        assert response.get_json()['code'] == 'VALIDATION_ERROR'
        assert Cita.query.count() == 0

    def test_invalid_deposit_writes_nothing(self, agendar):
        for monto in (0, -10, 'abc', None):
            response = agendar(requiere_anticipo='on', monto_anticipo=monto)
            assert response.status_code == 400

        assert Cita.query.count() == 0
        assert AnticipoCita.query.count() == 0

    def test_malformed_date(self, agendar):
        response = agendar(fecha_cita='05/12/2025 16:00')

        assert response.status_code == 400
        assert Cita.query.count() == 0

    def test_unknown_patient_or_doctor(self, agendar):
        assert agendar(id_paciente=999).status_code == 404
        assert agendar(id_medico=999).status_code == 404
        assert agendar(id_tratamiento=999).status_code == 404
        assert Cita.query.count() == 0

    def test_audit_entry_written(self, agendar):
        data = agendar().get_json()

        entry = AuditLog.query.filter_by(entity_type='cita', action='create').one()
        assert entry.entity_id == str(data['id_cita'])
        assert entry.usuario == 'SISTEMA'


class TestConflictos:
    """Doctor ±120 minute window and patient exact-slot rule"""

    def test_doctor_window(self, agendar, catalogos):
        assert agendar(fecha_cita='2025-12-05 16:00').status_code == 201

        otro = catalogos['id_otro_paciente']
        assert agendar(id_paciente=otro, fecha_cita='2025-12-05 18:00').status_code == 409
        assert agendar(id_paciente=otro, fecha_cita='2025-12-05 17:59').status_code == 409
        assert agendar(id_paciente=otro, fecha_cita='2025-12-05 14:00').status_code == 409
        assert agendar(id_paciente=otro, fecha_cita='2025-12-05 14:01').status_code == 409
        assert agendar(id_paciente=otro, fecha_cita='2025-12-05 18:01').status_code == 201

    def test_other_doctor_is_free(self, agendar, catalogos):
        assert agendar(fecha_cita='2025-12-05 16:00').status_code == 201

        response = agendar(
            id_paciente=catalogos['id_otro_paciente'],
            id_medico=catalogos['id_medico_1'],
            fecha_cita='2025-12-05 16:30',
        )
        assert response.status_code == 201

    def test_patient_exact_slot(self, agendar, catalogos):
        assert agendar(id_medico=catalogos['id_medico_1'], fecha_cita='2025-12-05 10:00').status_code == 201

        response = agendar(id_medico=catalogos['id_medico_2'], fecha_cita='2025-12-05 10:00')
        assert response.status_code == 409
        assert 'paciente' in response.get_json()['error']

        assert agendar(id_medico=catalogos['id_medico_2'], fecha_cita='2025-12-05 10:30').status_code == 201

    def test_cancelled_appointment_frees_the_slot(self, client, agendar):
        id_cita = agendar().get_json()['id_cita']
        assert client.post(f'/citas/{id_cita}/cancelar').status_code == 200

        assert agendar().status_code == 201

    def test_folio_is_unique_within_the_same_second(self, agendar, catalogos):
        with patch('sigcd.services.citas_service.generar_folio_cita', return_value='CITA-20251201-090000'):
            primera = agendar(fecha_cita='2025-12-05 09:00').get_json()
            segunda = agendar(fecha_cita='2025-12-06 09:00').get_json()
            tercera = agendar(fecha_cita='2025-12-07 09:00').get_json()

        assert primera['folio_cita'] == 'CITA-20251201-090000'
        assert segunda['folio_cita'] == 'CITA-20251201-090000-2'
        assert tercera['folio_cita'] == 'CITA-20251201-090000-3'

    def test_folio_taken_by_a_concurrent_booking(self, agendar, catalogos):
        with patch('sigcd.services.citas_service.generar_folio_cita', return_value='CITA-20251201-090000'):
            assert agendar(fecha_cita='2025-12-05 09:00').status_code == 201

            # The other booking committed after this one looked the folio up
            with patch('sigcd.repositories.citas.existe_folio', return_value=False):
                response = agendar(fecha_cita='2025-12-06 09:00', requiere_anticipo=True, monto_anticipo=300)

        assert response.status_code == 201
        data = response.get_json()
        assert data['folio_cita'] == 'CITA-20251201-090000-2'
        assert Cita.query.count() == 2
        assert db.session.get(AnticipoCita, data['id_anticipo']).id_cita == data['id_cita']


class TestNotificacionClinica:

    def test_booking_survives_clinical_failure(self, agendar, http_mock):
        http_mock.side_effect = requests.exceptions.ConnectionError('connection refused')

        response = agendar(requiere_anticipo=True, monto_anticipo=500)

        assert response.status_code == 201
        assert Cita.query.count() == 1

    def test_notification_payload(self, agendar, http_mock):
        data = agendar(requiere_anticipo=True, monto_anticipo=500, motivo_cita='Dolor de muela').get_json()

        llamadas = [c for c in http_mock.call_args_list if 'notificaciones-cita' in c.args[1]]
        assert len(llamadas) == 1
        payload = llamadas[0].kwargs['json']
        assert payload['id_cita'] == data['id_cita']
        assert payload['folio_cita'] == data['folio_cita']
        assert payload['fecha_cita'] == '2025-12-05 16:00:00'
        assert payload['requiere_anticipo'] is True
        assert payload['monto_anticipo'] == 500.0
        assert payload['motivo_cita'] == 'Dolor de muela'


class TestListados:

    def test_list_with_filters(self, client, agendar, catalogos):
        agendar(fecha_cita='2025-12-05 09:00')
        agendar(fecha_cita='2025-12-06 09:00', id_medico=catalogos['id_medico_1'])

        todas = client.get('/citas').get_json()
        assert len(todas) == 2
        assert todas[0]['fecha_cita'] == '2025-12-06 09:00:00'
        assert todas[0]['nombre_paciente'] == 'Ana'

        por_medico = client.get(f"/citas?id_medico={catalogos['id_medico_1']}").get_json()
        assert len(por_medico) == 1

        desde = client.get('/citas?fecha_desde=2025-12-06').get_json()
        assert [c['fecha_cita'] for c in desde] == ['2025-12-06 09:00:00']

    def test_invalid_estado_filter(self, client, catalogos):
        assert client.get('/citas?estado_cita=BORRADA').status_code == 400

    def test_resumen_paginated(self, client, agendar):
        for dia in range(1, 6):
            agendar(fecha_cita=f'2025-12-0{dia} 09:00')

        data = client.get('/citas/resumen?page=2&pageSize=2').get_json()

        assert data['total'] == 5
        assert data['page'] == 2
        assert data['pageSize'] == 2
        assert data['totalPages'] == 3
        assert [c['fecha_cita'] for c in data['citas']] == ['2025-12-03 09:00:00', '2025-12-02 09:00:00']

    def test_resumen_clamps_page_size(self, client, catalogos):
        data = client.get('/citas/resumen?pageSize=1000').get_json()
        assert data['pageSize'] == 20
        assert data['totalPages'] == 1
        assert data['citas'] == []


class TestDetalle:

    def test_detail_shape(self, client, agendar, catalogos, http_mock):
        id_cita = agendar(
            requiere_anticipo=True,
            monto_anticipo=500,
            id_tratamiento=catalogos['id_tratamiento'],
        ).get_json()['id_cita']

        response = client.get(f'/citas/{id_cita}')

        assert response.status_code == 200
        cita = response.get_json()['cita']
        assert cita['id_cita'] == id_cita
        assert cita['paciente']['nombre'] == 'Ana'
        assert cita['medico']['especialidad'] == 'Endodoncia'
        assert cita['tratamiento']['cve_trat'] == 'LIMP-01'
        assert cita['anticipo']['estado'] == 'PENDIENTE'
        assert cita['pagos'] == []
        assert cita['saldo_paciente_caja'] == {'saldo': 0}
        http_mock.assert_any_call('GET', f"http://caja.test/api/saldo/{catalogos['id_paciente']}", timeout=2, params=None)

    def test_detail_without_treatment(self, client, agendar):
        id_cita = agendar().get_json()['id_cita']

        cita = client.get(f'/citas/{id_cita}').get_json()['cita']
        assert cita['tratamiento'] is None
        assert cita['anticipo'] is None

    def test_caja_down_yields_null_balance(self, client, agendar, http_mock):
        id_cita = agendar().get_json()['id_cita']
        http_mock.side_effect = requests.exceptions.ConnectTimeout('caja down')

        response = client.get(f'/citas/{id_cita}')

        assert response.status_code == 200
        assert response.get_json()['cita']['saldo_paciente_caja'] is None

    def test_not_found_and_bad_id(self, client, catalogos):
        assert client.get('/citas/999').status_code == 404
        assert client.get('/citas/abc').status_code == 400

    def test_unknown_route(self, client):
        response = client.get('/no-existe')
        assert response.status_code == 404
        assert response.get_json()['code'] == 'NOT_FOUND'


class TestErroresInternos:

    def test_database_failure_is_masked(self, agendar):
        with patch('sigcd.repositories.citas.crear_cita', side_effect=RuntimeError('disk full')):
            response = agendar()

        assert response.status_code == 500
        assert response.get_json() == {'error': 'Error interno del servidor', 'code': 'INTERNAL_ERROR'}
        assert Cita.query.count() == 0
