from flask import jsonify, request

from backend.services import ledger, zones


class ZoneController:
    @staticmethod
    def get_zones(actor):
        return jsonify(zones.list_zones()), 200

    @staticmethod
    def create_zone(actor):
        data = request.get_json(silent=True) or {}
        return jsonify(zones.create_zone(actor, data.get('name'))), 201

    # --- Status Ledger ---
    @staticmethod
    def update_status(actor):
        data = request.get_json(silent=True) or {}
        # Older clients send snake_case
        city_id = data.get('cityId', data.get('city_id'))
        update = ledger.update_status(actor, city_id, data.get('status'), data.get('comment'))
        return jsonify(update), 201

    @staticmethod
    def get_history(actor, city_id):
        return jsonify(ledger.get_history(city_id)), 200
