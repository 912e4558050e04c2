from flask import Blueprint

from backend.controllers.zone_controller import ZoneController
from backend.session import auth_required

zone_bp = Blueprint('zones', __name__)

@zone_bp.route('/cities', methods=['GET'])
@auth_required
def get_zones(actor):
    return ZoneController.get_zones(actor)

@zone_bp.route('/cities', methods=['POST'])
@auth_required
def create_zone(actor):
    return ZoneController.create_zone(actor)

@zone_bp.route('/status-update', methods=['POST'])
@auth_required
def update_status(actor):
    return ZoneController.update_status(actor)

@zone_bp.route('/status-history/<int:city_id>', methods=['GET'])
@auth_required
def get_history(actor, city_id):
    return ZoneController.get_history(actor, city_id)
