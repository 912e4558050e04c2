from flask import jsonify, make_response, request

from backend.services import reports
from backend.services.export import export_zone_performance


class ReportController:
    @staticmethod
    def task_status(actor):
        timeframe = request.args.get('timeframe', 'weekly')
        return jsonify(reports.task_status_report(actor, timeframe)), 200

    @staticmethod
    def zone_performance(actor):
        return jsonify(reports.zone_performance_report(actor)), 200

    @staticmethod
    def export_zone_performance(actor):
        fmt = request.args.get('format', 'csv')
        report = reports.zone_performance_report(actor)
        body, mimetype, filename = export_zone_performance(report, fmt, generated_by=actor.username)

        response = make_response(body)
        response.headers["Content-Disposition"] = f"attachment; filename={filename}"
        response.headers["Content-type"] = mimetype
        return response
