"""
Automation Rule Tools

Tools the assistant calls to create and manage automation rules. Each tool is
a thin wrapper around the Automation service API; any error is returned as
{'success': False, 'error': ...} so the assistant always gets a usable answer.

Environment:
    AUTOMATION_URL: Base URL of the Automation service (default http://localhost:5060)
    AUTOMATION_USER_ID: User the rules belong to
    AUTOMATION_CONNECTION_ID: PSA connection the rules apply to (optional)
"""

import os
from typing import Dict, Any, Optional

import requests

REQUEST_TIMEOUT = 10


def _quote(rule_id) -> str:
    """Escape a rule id for use as a single URL path segment."""
    return requests.utils.quote(str(rule_id), safe='')


def _call_automation(method: str, path: str, json: Optional[Dict] = None,
                     params: Optional[Dict] = None) -> Dict:
    """Call the Automation service as the configured user and return the JSON body."""
    base_url = os.environ.get('AUTOMATION_URL', 'http://localhost:5060').rstrip('/')
    user_id = os.environ.get('AUTOMATION_USER_ID')
    if not user_id:
        return {'success': False, 'error': 'AUTOMATION_USER_ID is not set'}

    headers = {'X-User-Id': user_id}
    connection_id = os.environ.get('AUTOMATION_CONNECTION_ID')
    if connection_id:
        headers['X-Connection-Id'] = connection_id

    response = requests.request(
        method,
        f"{base_url}{path}",
        json=json,
        params=params,
        headers=headers,
        timeout=REQUEST_TIMEOUT
    )

    try:
        data = response.json()
    except ValueError:
        return {
            'success': False,
            'error': f'Automation service returned {response.status_code}: {response.text[:200]}'
        }

    if not isinstance(data, dict):
        return {'success': False, 'error': f'Unexpected response from Automation service ({response.status_code})'}

    # Problem documents (400s) carry their message in "detail"
    if 'success' not in data:
        return {
            'success': False,
            'error': data.get('detail') or data.get('title') or f'HTTP {response.status_code}'
        }
    return data


def create_automation_rule(name: str, description: str) -> dict:
    """
    Create an automation rule from a natural language description.

    Args:
        name: Short name for the rule
        description: What the rule should do

    Returns:
        {
            "success": true,
            "rule": {"id": "...", "trigger": {...}, "action": {...}, ...},
            "message": "Automation rule \"P1 Alert\" created successfully!"
        }
        or {"success": false, "error": "...", "suggestions": [...]}

    Example:
        >>> create_automation_rule(
        ...     "P1 Alert",
        ...     "When a P1 ticket is created, notify the on-call team"
        ... )
    """
    try:
        return _call_automation('POST', '/api/automation/rules',
                                json={'name': name, 'description': description})
    except Exception as e:
        return {'success': False, 'error': str(e) or 'Failed to create automation rule'}


def list_automation_rules(active_only: bool = False) -> dict:
    """
    List all automation rules for the current user.

    Args:
        active_only: Only show active rules
    """
    try:
        return _call_automation('GET', '/api/automation/rules',
                                params={'active_only': 'true' if active_only else 'false'})
    except Exception as e:
        return {'success': False, 'error': str(e) or 'Failed to list automation rules'}


def toggle_automation_rule(rule_id: str, is_active: bool) -> dict:
    """Enable or disable an automation rule."""
    try:
        return _call_automation('PUT', f'/api/automation/rules/{_quote(rule_id)}/active',
                                json={'is_active': bool(is_active)})
    except Exception as e:
        return {'success': False, 'error': str(e) or 'Failed to toggle automation rule'}


def delete_automation_rule(rule_id: str) -> dict:
    """Delete an automation rule."""
    try:
        return _call_automation('DELETE', f'/api/automation/rules/{_quote(rule_id)}')
    except Exception as e:
        return {'success': False, 'error': str(e) or 'Failed to delete automation rule'}


def suggest_automation_rules(focus: str = 'all') -> dict:
    """
    Get suggested automation rules based on common patterns and best practices.

    Args:
        focus: 'tickets', 'sla', 'assignment', 'notifications' or 'all'
    """
    try:
        return _call_automation('GET', '/api/automation/suggestions', params={'focus': focus})
    except Exception as e:
        return {'success': False, 'error': str(e) or 'Failed to get automation suggestions'}


def preview_automation_rule(description: str) -> dict:
    """Show how a description would be interpreted, without creating a rule."""
    try:
        return _call_automation('POST', '/api/automation/parse', json={'description': description})
    except Exception as e:
        return {'success': False, 'error': str(e) or 'Failed to parse automation rule'}


TOOL_DEFINITIONS = [
    {
        'name': 'create_automation_rule',
        'description': (
            'Create an automation rule from a natural language description.\n\n'
            'Examples:\n'
            '- "When a P1 ticket is created, notify the on-call team"\n'
            '- "When a ticket about VPN is created, add the networking tag"\n'
            '- "When status changes to P1 add note: escalate immediately"\n\n'
            'The description is parsed into a structured trigger, action and conditions.'
        ),
        'parameters': {
            'type': 'object',
            'properties': {
                'name': {'type': 'string', 'description': 'Short name for the rule'},
                'description': {
                    'type': 'string',
                    'description': 'Natural language description of what the rule should do'
                }
            },
            'required': ['name', 'description']
        },
        'function': create_automation_rule
    },
    {
        'name': 'list_automation_rules',
        'description': 'List all automation rules for the current user.',
        'parameters': {
            'type': 'object',
            'properties': {
                'active_only': {'type': 'boolean', 'description': 'Only show active rules'}
            }
        },
        'function': list_automation_rules
    },
    {
        'name': 'toggle_automation_rule',
        'description': 'Enable or disable an automation rule.',
        'parameters': {
            'type': 'object',
            'properties': {
                'rule_id': {'type': 'string', 'description': 'The ID of the rule to toggle'},
                'is_active': {'type': 'boolean', 'description': 'Whether to enable or disable the rule'}
            },
            'required': ['rule_id', 'is_active']
        },
        'function': toggle_automation_rule
    },
    {
        'name': 'delete_automation_rule',
        'description': 'Delete an automation rule.',
        'parameters': {
            'type': 'object',
            'properties': {
                'rule_id': {'type': 'string', 'description': 'The ID of the rule to delete'}
            },
            'required': ['rule_id']
        },
        'function': delete_automation_rule
    },
    {
        'name': 'suggest_automation_rules',
        'description': 'Get suggested automation rules based on common patterns and best practices.',
        'parameters': {
            'type': 'object',
            'properties': {
                'focus': {
                    'type': 'string',
                    'enum': ['tickets', 'sla', 'assignment', 'notifications', 'all'],
                    'description': 'Focus area for suggestions'
                }
            }
        },
        'function': suggest_automation_rules
    },
    {
        'name': 'preview_automation_rule',
        'description': 'Show how a rule description would be understood without creating the rule.',
        'parameters': {
            'type': 'object',
            'properties': {
                'description': {'type': 'string', 'description': 'Natural language rule description'}
            },
            'required': ['description']
        },
        'function': preview_automation_rule
    },
]

_TOOLS_BY_NAME = {tool['name']: tool for tool in TOOL_DEFINITIONS}


def get_tool_schemas() -> list:
    """Tool definitions without the Python callables, ready to send to the model."""
    return [
        {key: value for key, value in tool.items() if key != 'function'}
        for tool in TOOL_DEFINITIONS
    ]


def run_tool(name: str, arguments: Optional[Dict[str, Any]] = None) -> dict:
    """
    Dispatch a tool call from the model.

    Args:
        name: Tool name from TOOL_DEFINITIONS
        arguments: Keyword arguments chosen by the model
    """
    tool = _TOOLS_BY_NAME.get(name)
    if tool is None:
        return {'success': False, 'error': f'Unknown tool: {name}'}
    try:
        return tool['function'](**(arguments or {}))
    except TypeError as e:
        return {'success': False, 'error': f'Invalid arguments for {name}: {e}'}
