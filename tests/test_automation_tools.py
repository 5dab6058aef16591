"""
Tests for the assistant's automation tools.

HTTP calls to the Automation service are mocked at requests.request.
"""

from unittest.mock import patch, MagicMock

import pytest
import requests

from ai_tools import automation_tools
from ai_tools.automation_tools import (
    create_automation_rule,
    list_automation_rules,
    toggle_automation_rule,
    delete_automation_rule,
    suggest_automation_rules,
    preview_automation_rule,
    get_tool_schemas,
    run_tool,
)


@pytest.fixture(autouse=True)
def automation_env(monkeypatch):
    monkeypatch.setenv('AUTOMATION_URL', 'http://automation.test/')
    monkeypatch.setenv('AUTOMATION_USER_ID', 'alice')
    monkeypatch.setenv('AUTOMATION_CONNECTION_ID', 'halo-1')


def _response(status_code, body):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = body
    response.text = str(body)
    return response


@patch('ai_tools.automation_tools.requests.request')
def test_create_sends_identity_headers(mock_request):
    mock_request.return_value = _response(201, {'success': True, 'rule': {'id': 'rule-1'}})

    result = create_automation_rule('P1 Alert', 'When a P1 ticket is created, notify the on-call team')

    assert result['success'] is True
    args, kwargs = mock_request.call_args
    assert args == ('POST', 'http://automation.test/api/automation/rules')
    assert kwargs['headers'] == {'X-User-Id': 'alice', 'X-Connection-Id': 'halo-1'}
    assert kwargs['json']['name'] == 'P1 Alert'


@patch('ai_tools.automation_tools.requests.request')
def test_inference_failure_passed_through(mock_request):
    body = {'success': False, 'error': 'Could not understand the trigger condition.', 'suggestions': ['ticket created']}
    mock_request.return_value = _response(422, body)

    assert create_automation_rule('x', 'Auto-assign printer issues to John') == body


@patch('ai_tools.automation_tools.requests.request')
def test_problem_document_mapped_to_error(mock_request):
    mock_request.return_value = _response(400, {'title': 'Bad Request', 'status': 400, 'detail': '"name" is required'})

    result = create_automation_rule('', 'anything')

    assert result == {'success': False, 'error': '"name" is required'}


@patch('ai_tools.automation_tools.requests.request')
def test_transport_error_mapped_to_error(mock_request):
    mock_request.side_effect = requests.ConnectionError('connection refused')

    for call in (
        lambda: list_automation_rules(),
        lambda: toggle_automation_rule('rule-1', False),
        lambda: delete_automation_rule('rule-1'),
        lambda: suggest_automation_rules('sla'),
        lambda: preview_automation_rule('When a new ticket is created, notify the team'),
    ):
        result = call()
        assert result['success'] is False
        assert 'connection refused' in result['error']


@patch('ai_tools.automation_tools.requests.request')
def test_rule_id_is_escaped_in_path(mock_request):
    mock_request.return_value = _response(200, {'success': True})

    toggle_automation_rule('a/b?c', True)
    assert mock_request.call_args.args == ('PUT', 'http://automation.test/api/automation/rules/a%2Fb%3Fc/active')

    delete_automation_rule('../rules')
    assert mock_request.call_args.args == ('DELETE', 'http://automation.test/api/automation/rules/..%2Frules')


@patch('ai_tools.automation_tools.requests.request')
def test_non_json_response(mock_request):
    response = _response(502, None)
    response.json.side_effect = ValueError('no json')
    response.text = 'Bad Gateway'
    mock_request.return_value = response

    result = list_automation_rules(active_only=True)

    assert result['success'] is False
    assert '502' in result['error']
    assert mock_request.call_args.kwargs['params'] == {'active_only': 'true'}


def test_missing_user_id(monkeypatch):
    monkeypatch.delenv('AUTOMATION_USER_ID')

    result = list_automation_rules()

    assert result == {'success': False, 'error': 'AUTOMATION_USER_ID is not set'}


def test_tool_schemas_have_no_callables():
    schemas = get_tool_schemas()
    names = [schema['name'] for schema in schemas]

    assert 'create_automation_rule' in names
    assert all('function' not in schema for schema in schemas)
    create = next(schema for schema in schemas if schema['name'] == 'create_automation_rule')
    assert create['parameters']['required'] == ['name', 'description']


@patch('ai_tools.automation_tools.requests.request')
def test_run_tool_dispatches(mock_request):
    mock_request.return_value = _response(200, {'success': True, 'suggestions': [], 'message': 'Found 0'})

    result = run_tool('suggest_automation_rules', {'focus': 'sla'})

    assert result['success'] is True
    assert mock_request.call_args.kwargs['params'] == {'focus': 'sla'}


def test_run_tool_unknown_or_bad_arguments():
    assert run_tool('drop_tables') == {'success': False, 'error': 'Unknown tool: drop_tables'}

    result = run_tool('delete_automation_rule', {'wrong': 1})
    assert result['success'] is False
    assert 'Invalid arguments' in result['error']


def test_every_definition_points_at_module_function():
    for tool in automation_tools.TOOL_DEFINITIONS:
        assert getattr(automation_tools, tool['name']) is tool['function']
