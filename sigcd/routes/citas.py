"""
Appointment endpoints: booking, listings, detail, payments and status changes
"""
from flask import Blueprint, jsonify, request

from sigcd.services import citas_service

citas_bp = Blueprint('citas', __name__, url_prefix='/citas')


@citas_bp.route('', methods=['POST'])
def crear_cita():
    """
    Book an appointment
    Body: id_paciente, id_medico, fecha_cita, medio_solicitud (required),
          id_tratamiento, motivo_cita, info_relevante, observaciones,
          responsable_registro, requiere_anticipo, monto_anticipo
    """
    resultado = citas_service.crear_cita(request.get_json(silent=True))
    return jsonify({'message': 'Cita creada correctamente', **resultado}), 201


@citas_bp.route('', methods=['GET'])
def listar_citas():
    """
    List appointments
    Query params: fecha_desde, fecha_hasta, estado_cita, estado_pago, id_paciente, id_medico
    """
    return jsonify(citas_service.listar_citas(request.args)), 200


@citas_bp.route('/resumen', methods=['GET'])
def listar_resumen_citas():
    """Paginated summary. Query params: page, pageSize + the list filters"""
    return jsonify(citas_service.listar_resumen_citas(request.args)), 200


@citas_bp.route('/<id_cita>', methods=['GET'])
def obtener_detalle_cita(id_cita):
    return jsonify({'cita': citas_service.obtener_detalle_cita(id_cita)}), 200


@citas_bp.route('/<id_cita>/confirmar-pago', methods=['POST'])
def confirmar_pago_cita(id_cita):
    """Called by Caja once the payment is registered. Body: id_pago, monto_pagado, origen"""
    return jsonify(citas_service.confirmar_pago_cita(id_cita, request.get_json(silent=True))), 200


@citas_bp.route('/<id_cita>/pagos', methods=['POST'])
def registrar_pago_parcial(id_cita):
    """Body: monto, id_pago_caja, origen, observaciones"""
    return jsonify(citas_service.registrar_pago_parcial(id_cita, request.get_json(silent=True))), 201


@citas_bp.route('/<id_cita>/registrar-cobro-caja', methods=['POST'])
def registrar_cobro_caja(id_cita):
    return jsonify(citas_service.registrar_pago_anticipo_en_caja(id_cita)), 200


@citas_bp.route('/<id_cita>/iniciar-atencion', methods=['POST'])
def iniciar_atencion(id_cita):
    cita = citas_service.iniciar_atencion(id_cita)
    return jsonify({'message': 'Atención iniciada', 'cita': cita}), 200


@citas_bp.route('/<id_cita>/atendida', methods=['POST'])
def marcar_atendida(id_cita):
    cita = citas_service.marcar_atendida(id_cita)
    return jsonify({'message': 'Cita marcada como ATENDIDA', 'cita': cita}), 200


@citas_bp.route('/<id_cita>/cancelar', methods=['POST'])
def cancelar_cita(id_cita):
    cita = citas_service.cancelar_cita(id_cita)
    return jsonify({'message': 'Cita cancelada', 'cita': cita}), 200
