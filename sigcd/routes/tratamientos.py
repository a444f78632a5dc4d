from flask import Blueprint, jsonify, request

from sigcd.services import tratamientos_service

tratamientos_bp = Blueprint('tratamientos', __name__, url_prefix='/tratamientos')


@tratamientos_bp.route('', methods=['GET'])
def listar_tratamientos():
    """Query params: q, activos, page, pageSize"""
    return jsonify(tratamientos_service.listar_tratamientos(request.args)), 200


@tratamientos_bp.route('', methods=['POST'])
def crear_tratamiento():
    """Body: cve_trat, nombre, precio_base (required), descripcion, duracion_min, activo"""
    tratamiento = tratamientos_service.crear_tratamiento(request.get_json(silent=True))
    return jsonify({'message': 'Tratamiento creado correctamente', 'tratamiento': tratamiento}), 201


@tratamientos_bp.route('/<id_tratamiento>', methods=['GET'])
def obtener_tratamiento(id_tratamiento):
    return jsonify({'tratamiento': tratamientos_service.obtener_tratamiento(id_tratamiento)}), 200


@tratamientos_bp.route('/<id_tratamiento>', methods=['PUT'])
def actualizar_tratamiento(id_tratamiento):
    tratamiento = tratamientos_service.actualizar_tratamiento(id_tratamiento, request.get_json(silent=True))
    return jsonify({'message': 'Tratamiento actualizado correctamente', 'tratamiento': tratamiento}), 200
