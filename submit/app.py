# Artwin Submit
# Feedback submission wizard backend: role, type, then the form

import sys
import os

# Add parent directory to path for shared imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from flask import Flask, request, jsonify

from intake import (
    DEPARTMENT_TABLES,
    Role,
    FeedbackType,
    Department,
    Urgency,
    ValidationError,
    build_assistant,
    build_service,
    new_feedback,
    setup_logging
)

setup_logging()
app = Flask(__name__)

service, notifier = build_service()
assistant = build_assistant()

# Short messages aren't worth a classification call
MIN_SUGGEST_LENGTH = 20


def _flag(value):
    """Read a JSON boolean; form-style strings only count when explicitly true"""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ('true', '1')
    return False


def _choices(enum_cls):
    return [{'key': member.name, 'label': member.value} for member in enum_cls]


@app.route('/options', methods=['GET'])
def options():
    """Choices for each wizard step"""
    return jsonify({
        'roles': _choices(Role),
        'types': _choices(FeedbackType),
        'departments': _choices(Department),
        'urgencies': _choices(Urgency)
    })


@app.route('/suggest-department', methods=['POST'])
def suggest_department():
    """Suggest a department for the message typed so far.

    Accepts:
        - message: The feedback text

    Returns:
        - department: Suggested department key and label
    """
    data = request.get_json(silent=True) or {}
    message = (data.get('message') or '').strip()

    department = Department.OTHER
    if len(message) > MIN_SUGGEST_LENGTH:
        department = assistant.suggest_department(message)

    return jsonify({
        'department': {'key': department.name, 'label': department.value}
    })


@app.route('/feedback', methods=['POST'])
def submit_feedback():
    """Submit a complaint or proposal.

    Accepts:
        - role, type: Chosen in the first two wizard steps
        - department, message, urgency: From the form
        - isAnonymous, name, contact: Submitter identity
        - attachmentName: Filename only, no content is stored

    Returns:
        - item: The stored feedback item
        - table: The department table it was filed in
    """
    try:
        data = request.get_json(silent=True) or {}

        item = new_feedback(
            role=data.get('role'),
            type=data.get('type'),
            department=data.get('department') or Department.OTHER,
            message=data.get('message'),
            urgency=data.get('urgency') or Urgency.NORMAL,
            is_anonymous=_flag(data.get('isAnonymous')),
            name=data.get('name'),
            contact=data.get('contact'),
            attachment_name=data.get('attachmentName')
        )

        service.submit(item)

        return jsonify({
            'item': item.to_dict(),
            'table': DEPARTMENT_TABLES[item.department]
        }), 201

    except ValidationError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        app.logger.exception("Feedback submission failed")
        return jsonify({
            'error': 'Internal server error',
            'details': str(e)
        }), 500


@app.route('/health', methods=['GET'])
def health():
    """Health check endpoint"""
    return jsonify({
        'status': 'healthy',
        'service': 'Artwin Submit',
        'version': '1.0'
    })


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 8080))
    app.run(host='0.0.0.0', port=port)
