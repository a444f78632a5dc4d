from flask import Blueprint, jsonify, request

from sigcd.services import medicos_service

medicos_bp = Blueprint('medicos', __name__, url_prefix='/medicos')


@medicos_bp.route('', methods=['GET'])
def listar_medicos():
    """Query params: activos"""
    return jsonify(medicos_service.listar_medicos(request.args)), 200


@medicos_bp.route('', methods=['POST'])
def crear_medico():
    medico = medicos_service.crear_medico(request.get_json(silent=True))
    return jsonify({'message': 'Médico creado correctamente', 'medico': medico}), 201


@medicos_bp.route('/<id_medico>', methods=['GET'])
def obtener_medico(id_medico):
    return jsonify({'medico': medicos_service.obtener_medico(id_medico)}), 200
