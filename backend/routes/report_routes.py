from flask import Blueprint

from backend.controllers.report_controller import ReportController
from backend.session import auth_required

report_bp = Blueprint('reports', __name__)

@report_bp.route('/reports/task-status', methods=['GET'])
@auth_required
def task_status(actor):
    return ReportController.task_status(actor)

@report_bp.route('/reports/zone-performance', methods=['GET'])
@auth_required
def zone_performance(actor):
    return ReportController.zone_performance(actor)

@report_bp.route('/reports/zone-performance/export', methods=['GET'])
@auth_required
def export_zone_performance(actor):
    return ReportController.export_zone_performance(actor)
