"""Tests for the appointment status state machine."""
from sigcd.extensions import db
from sigcd.models import AuditLog, Cita


class TestTransiciones:

    def test_full_flow_with_deposit(self, client, agendar):
        id_cita = agendar(requiere_anticipo=True, monto_anticipo=500).get_json()['id_cita']

        response = client.post(f'/citas/{id_cita}/iniciar-atencion')
        assert response.status_code == 200
        assert response.get_json()['cita']['estado_cita'] == 'CONFIRMADA'

        # Pending deposit blocks ATENDIDA
        bloqueada = client.post(f'/citas/{id_cita}/atendida')
        assert bloqueada.status_code == 400
        assert bloqueada.get_json()['code'] == 'INVALID_STATE'

        client.post(f'/citas/{id_cita}/confirmar-pago', json={'id_pago': 'P-1'})

        atendida = client.post(f'/citas/{id_cita}/atendida')
        assert atendida.status_code == 200
        assert atendida.get_json()['cita']['estado_cita'] == 'ATENDIDA'
        assert atendida.get_json()['cita']['estado_pago'] == 'PAGADO'

    def test_attended_requires_confirmed(self, client, agendar):
        id_cita = agendar().get_json()['id_cita']

        response = client.post(f'/citas/{id_cita}/atendida')

        assert response.status_code == 400
        db.session.expire_all()
        assert db.session.get(Cita, id_cita).estado_cita == 'PROGRAMADA'

    def test_terminal_states(self, client, agendar):
        id_cita = agendar().get_json()['id_cita']
        assert client.post(f'/citas/{id_cita}/cancelar').status_code == 200

        assert client.post(f'/citas/{id_cita}/iniciar-atencion').status_code == 400
        assert client.post(f'/citas/{id_cita}/cancelar').status_code == 400

    def test_attended_cannot_be_cancelled(self, client, agendar):
        id_cita = agendar().get_json()['id_cita']
        client.post(f'/citas/{id_cita}/iniciar-atencion')
        assert client.post(f'/citas/{id_cita}/atendida').status_code == 200

        assert client.post(f'/citas/{id_cita}/cancelar').status_code == 400

    def test_unknown_appointment(self, client, catalogos):
        assert client.post('/citas/999/iniciar-atencion').status_code == 404

    def test_transition_is_audited(self, client, agendar):
        id_cita = agendar().get_json()['id_cita']
        client.post(f'/citas/{id_cita}/iniciar-atencion')

        entry = AuditLog.query.filter_by(entity_type='cita', action='estado').one()
        assert entry.entity_id == str(id_cita)
        assert '"a": "CONFIRMADA"' in entry.details
