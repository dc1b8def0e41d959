# Artwin Dashboard
# Department admin dashboard backend: review, comment, resolve, report

import sys
import os
from datetime import date

# Add parent directory to path for shared imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from flask import Flask, Response, request, jsonify, abort
from werkzeug.exceptions import HTTPException

from intake import (
    DEPARTMENT_TABLES,
    Department,
    Status,
    ValidationError,
    backup_filename,
    build_assistant,
    build_service,
    export_csv,
    setup_logging
)

setup_logging()
app = Flask(__name__)

service, notifier = build_service()
assistant = build_assistant()


def _department(key):
    try:
        return Department.from_key(key)
    except ValidationError:
        abort(404, description=f"Unknown department '{key}'")


def _item_or_404(dept, item_id):
    item = service.store.get_item(dept, item_id)
    if item is None:
        abort(404, description=f"Item {item_id} not found")
    return item


@app.errorhandler(ValidationError)
def validation_error(e):
    return jsonify({'error': str(e)}), 400


@app.errorhandler(404)
def not_found(e):
    return jsonify({'error': 'not_found', 'message': e.description}), 404


@app.errorhandler(Exception)
def internal_error(e):
    if isinstance(e, HTTPException):
        return e
    app.logger.exception("Unhandled dashboard error")
    return jsonify({
        'error': 'Internal server error',
        'details': str(e)
    }), 500


@app.route('/departments', methods=['GET'])
def departments():
    """Department picker for the dashboard login"""
    return jsonify([
        {'key': dept.name, 'label': dept.value, 'table': DEPARTMENT_TABLES[dept]}
        for dept in Department
    ])


@app.route('/departments/<dept_key>/items', methods=['GET'])
def list_items(dept_key):
    """Load a department's feedback, refreshing from its sheet if connected.

    Accepts:
        - status: Optional query filter, a Status key or label; ALL for everything
    """
    dept = _department(dept_key)
    items = service.load(dept)

    status_filter = (request.args.get('status') or '').strip()
    if status_filter and status_filter.upper() != 'ALL':
        status = Status.parse(status_filter)
        items = [item for item in items if item.status == status]

    return jsonify({
        'department': dept.value,
        'table': DEPARTMENT_TABLES[dept],
        'items': [item.to_dict() for item in items]
    })


@app.route('/departments/<dept_key>/items/<item_id>/status', methods=['PATCH'])
def change_status(dept_key, item_id):
    """Change an item's status.

    Accepts:
        - status: Status key or label
    """
    dept = _department(dept_key)
    data = request.get_json(silent=True) or {}
    status = Status.parse(data.get('status'))

    if not service.set_status(dept, item_id, status):
        abort(404, description=f"Item {item_id} not found")

    return jsonify(_item_or_404(dept, item_id).to_dict())


@app.route('/departments/<dept_key>/items/<item_id>/comments', methods=['POST'])
def add_comment(dept_key, item_id):
    """Add an admin comment.

    Accepts:
        - text: Comment text
    """
    dept = _department(dept_key)
    data = request.get_json(silent=True) or {}

    comment = service.add_comment(dept, item_id, f"{dept.value} Админ", data.get('text'))
    if comment is None:
        abort(404, description=f"Item {item_id} not found")

    return jsonify(comment.to_dict()), 201


@app.route('/departments/<dept_key>/items/<item_id>/analyze', methods=['POST'])
def analyze(dept_key, item_id):
    """Run AI analysis on an item and store the result"""
    dept = _department(dept_key)
    item = _item_or_404(dept, item_id)

    analysis = assistant.analyze(item.message, item.urgency)
    comment = service.record_analysis(dept, item_id, analysis)
    if comment is None:
        abort(404, description=f"Item {item_id} not found")

    return jsonify({
        'aiAnalysis': analysis.to_dict(),
        'comment': comment.to_dict()
    })


@app.route('/departments/<dept_key>/items/<item_id>/draft', methods=['POST'])
def draft(dept_key, item_id):
    """Draft a reply to the submitter. Nothing is stored or sent."""
    dept = _department(dept_key)
    item = _item_or_404(dept, item_id)
    return jsonify({'draft': assistant.draft_reply(item)})


@app.route('/departments/<dept_key>/report', methods=['POST'])
def generate_report(dept_key):
    """Generate a management report from the department's current items"""
    dept = _department(dept_key)
    items = service.store.get_by_department(dept)
    return jsonify({'report': assistant.summarize_report(items, dept)})


@app.route('/departments/<dept_key>/report/send', methods=['POST'])
def send_report(dept_key):
    """Send a generated report to Telegram.

    Accepts:
        - report: The report text
    """
    dept = _department(dept_key)
    data = request.get_json(silent=True) or {}
    report = (data.get('report') or '').strip()
    if not report:
        raise ValidationError('Report text is required')

    sent = notifier.send_report(report, dept)
    if not sent:
        return jsonify({'sent': False, 'error': 'Telegram delivery failed'}), 502
    return jsonify({'sent': True})


@app.route('/departments/<dept_key>/sheet-config', methods=['GET', 'PUT', 'DELETE'])
def sheet_config(dept_key):
    """Read, save or disconnect the department's Google Sheet.

    PUT accepts:
        - sheetId: Spreadsheet ID or full sheet URL
        - tabName: Tab to use (defaults to the department table name)
        - accessToken: OAuth token; without it the connection is read-only
    """
    dept = _department(dept_key)

    if request.method == 'DELETE':
        service.store.remove_sheet_config(dept)
        return jsonify({'connected': False})

    if request.method == 'PUT':
        data = request.get_json(silent=True) or {}
        config = service.store.save_sheet_config(
            dept,
            sheet_id=data.get('sheetId'),
            tab_name=data.get('tabName'),
            access_token=data.get('accessToken')
        )
    else:
        config = service.store.get_sheet_config(dept)

    if config is None:
        return jsonify({'connected': False, 'defaultTab': DEPARTMENT_TABLES[dept]})

    return jsonify({
        'connected': True,
        'syncEnabled': config.sync_enabled,
        'sheetId': config.sheet_id,
        'tabName': config.tab_name
    })


@app.route('/telegram-config', methods=['GET', 'PUT'])
def telegram_config():
    """Read or save the Telegram bot used for alerts and reports"""
    if request.method == 'PUT':
        data = request.get_json(silent=True) or {}
        config = service.store.save_telegram_config(data.get('botToken'), data.get('chatId'))
    else:
        config = service.store.get_telegram_config()

    if config is None:
        return jsonify({'configured': False})
    return jsonify({'configured': True, 'chatId': config.chat_id})


@app.route('/export.csv', methods=['GET'])
def export():
    """Download a CSV backup of every department"""
    content = export_csv(service.all_items())
    return Response(
        content.encode('utf-8'),
        mimetype='text/csv',
        headers={
            'Content-Type': 'text/csv; charset=utf-8',
            'Content-Disposition': f'attachment; filename={backup_filename(date.today())}'
        }
    )


@app.route('/health', methods=['GET'])
def health():
    """Health check endpoint"""
    return jsonify({
        'status': 'healthy',
        'service': 'Artwin Dashboard',
        'version': '1.0'
    })


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 8080))
    app.run(host='0.0.0.0', port=port)
