"""
Automation API Routes

HTTP endpoints for creating and managing automation rules from natural
language. The caller identifies the rule owner with the X-User-Id header
(and optionally the PSA connection with X-Connection-Id).
"""

from flask import jsonify, request

from app import app
from .automation_rules import AutomationRuleManager
from .error_responses import bad_request
from .service_logger import get_service_logger
from .version import VERSION


def _require_user_id():
    """Return the caller's user id, or None if the header is missing."""
    user_id = request.headers.get('X-User-Id', '').strip()
    return user_id or None


def _missing_user():
    return bad_request(detail='X-User-Id header is required')


def _parse_bool(value, default=False):
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('true', '1', 'yes', 'on')


@app.route('/health', methods=['GET'])
def health():
    """Liveness check."""
    return jsonify({
        'status': 'healthy',
        'service': app.config['SERVICE_NAME'],
        'version': VERSION
    })


# ==================== Automation Rules ====================

@app.route('/api/automation/rules', methods=['POST'])
def create_automation_rule():
    """
    Create an automation rule from a natural-language description.

    Body:
        name: Short name for the rule
        description: e.g. "When a P1 ticket is created, notify the on-call team"

    Returns 201 on success, 422 when the description could not be understood
    (with phrase suggestions) and 503 when the rule store failed.
    """
    logger = get_service_logger()

    user_id = _require_user_id()
    if not user_id:
        return _missing_user()

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return bad_request(detail='Request body must be a JSON object')

    name = data.get('name')
    description = data.get('description')
    if not isinstance(name, str) or not name.strip():
        return bad_request(detail='"name" is required')
    if not isinstance(description, str):
        return bad_request(detail='"description" is required')

    connection_id = request.headers.get('X-Connection-Id') or data.get('connection_id')

    logger.info(f"Automation rule requested by {user_id}: {description[:100]}")
    result = AutomationRuleManager().create_rule(name, description, user_id, connection_id)

    if result['success']:
        return jsonify(result), 201
    if 'suggestions' in result:
        return jsonify(result), 422
    return jsonify(result), 503


@app.route('/api/automation/rules', methods=['GET'])
def list_automation_rules():
    """
    List the caller's automation rules, newest first.

    Query parameters:
        active_only: Only return enabled rules (default false)
    """
    user_id = _require_user_id()
    if not user_id:
        return _missing_user()

    active_only = _parse_bool(request.args.get('active_only'))
    result = AutomationRuleManager().list_rules(user_id, active_only=active_only)

    return jsonify(result), 200 if result['success'] else 503


@app.route('/api/automation/rules/<rule_id>/active', methods=['PUT'])
def toggle_automation_rule(rule_id: str):
    """
    Enable or disable a rule.

    Body:
        is_active: true to enable, false to disable
    """
    user_id = _require_user_id()
    if not user_id:
        return _missing_user()

    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not isinstance(data.get('is_active'), bool):
        return bad_request(detail='"is_active" must be true or false')

    result = AutomationRuleManager().toggle_rule(rule_id, user_id, data['is_active'])

    if result['success']:
        return jsonify(result)
    return jsonify(result), 404 if result.get('not_found') else 503


@app.route('/api/automation/rules/<rule_id>', methods=['DELETE'])
def delete_automation_rule(rule_id: str):
    """Delete a rule."""
    user_id = _require_user_id()
    if not user_id:
        return _missing_user()

    result = AutomationRuleManager().delete_rule(rule_id, user_id)

    if result['success']:
        return jsonify(result)
    return jsonify(result), 404 if result.get('not_found') else 503


@app.route('/api/automation/suggestions', methods=['GET'])
def suggest_automation_rules():
    """
    Suggested rules based on common helpdesk patterns.

    Query parameters:
        focus: tickets, sla, assignment, notifications or all (default)
    """
    focus = request.args.get('focus', 'all')
    result = AutomationRuleManager().suggest_rules(focus)

    return jsonify(result), 200 if result['success'] else 400


@app.route('/api/automation/parse', methods=['POST'])
def parse_automation_rule():
    """
    Show how a description would be interpreted, without saving a rule.

    Body:
        description: Natural-language rule description
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not isinstance(data.get('description'), str):
        return bad_request(detail='"description" is required')

    return jsonify(AutomationRuleManager().preview_rule(data['description']))
