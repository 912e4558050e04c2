import csv
import io
from datetime import datetime

from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from backend.errors import ValidationError

EXPORT_FORMATS = ('csv', 'pdf')
HEADERS = ['Zone Name', 'Zone ID', 'Total Tasks', 'Completed Tasks', 'Completion %']


def _row(item):
    return [
        item['zoneName'],
        item['zoneRef'],
        item['totalTasks'],
        item['completedTasks'],
        item['completionRate'],
    ]


def export_zone_performance(report, fmt='csv', generated_by='System'):
    """Returns (body bytes, mimetype, filename)."""
    if fmt == 'csv':
        return _to_csv(report), 'text/csv', 'zone_performance.csv'
    if fmt == 'pdf':
        return _to_pdf(report, generated_by), 'application/pdf', 'zone_performance.pdf'
    raise ValidationError(f"format must be one of {', '.join(EXPORT_FORMATS)}")


def _to_csv(report):
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(HEADERS)
    for item in report:
        writer.writerow(_row(item))
    return output.getvalue().encode('utf-8')


def _to_pdf(report, generated_by):
    buffer = io.BytesIO()
    p = canvas.Canvas(buffer, pagesize=letter)
    width, height = letter

    # Title
    p.setFont("Helvetica-Bold", 16)
    p.drawString(50, height - 50, "Zone Checker - Zone Performance")

    p.setFont("Helvetica", 12)
    p.drawString(50, height - 70, f"Date: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    p.drawString(50, height - 90, f"Generated By: {generated_by}")

    y = height - 130
    columns = [50, 200, 290, 380, 480]

    def draw_header(y):
        p.setFont("Helvetica-Bold", 10)
        for x, title in zip(columns, HEADERS):
            p.drawString(x, y, title)
        p.line(50, y - 5, 560, y - 5)
        p.setFont("Helvetica", 10)
        return y - 20

    y = draw_header(y)
    for item in report:
        for x, value in zip(columns, _row(item)):
            p.drawString(x, y, str(value))
        y -= 20
        if y < 50:
            p.showPage()
            y = draw_header(height - 50)

    p.save()
    return buffer.getvalue()
