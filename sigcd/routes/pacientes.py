from flask import Blueprint, jsonify, request

from sigcd.services import pacientes_service

pacientes_bp = Blueprint('pacientes', __name__, url_prefix='/pacientes')


@pacientes_bp.route('', methods=['GET'])
def listar_pacientes():
    """
    List patients with pagination and search
    Query params: page, pageSize, q, canal_preferente
    """
    return jsonify(pacientes_service.listar_pacientes(request.args)), 200


@pacientes_bp.route('', methods=['POST'])
def crear_paciente():
    paciente = pacientes_service.crear_paciente(request.get_json(silent=True))
    return jsonify({'message': 'Paciente creado correctamente', 'paciente': paciente}), 201


@pacientes_bp.route('/<id_paciente>', methods=['GET'])
def obtener_paciente(id_paciente):
    return jsonify({'paciente': pacientes_service.obtener_paciente(id_paciente)}), 200


@pacientes_bp.route('/<id_paciente>', methods=['PUT'])
def actualizar_paciente(id_paciente):
    """Partial update of the patient data"""
    paciente = pacientes_service.actualizar_paciente(id_paciente, request.get_json(silent=True))
    return jsonify({'message': 'Paciente actualizado correctamente', 'paciente': paciente}), 200


@pacientes_bp.route('/<id_paciente>/saldo', methods=['GET'])
def obtener_saldo(id_paciente):
    """Live balance from Caja"""
    return jsonify(pacientes_service.obtener_saldo_paciente_caja(id_paciente)), 200
