"""
Automation Tools for the AI assistant

Python tools that let the assistant create and manage helpdesk automation
rules through the Automation service.
"""

from .automation_tools import (
    create_automation_rule,
    list_automation_rules,
    toggle_automation_rule,
    delete_automation_rule,
    suggest_automation_rules,
    preview_automation_rule,
    TOOL_DEFINITIONS,
    get_tool_schemas,
    run_tool
)

__all__ = [
    # Rule creation
    'create_automation_rule',
    'preview_automation_rule',
    'suggest_automation_rules',

    # Rule management
    'list_automation_rules',
    'toggle_automation_rule',
    'delete_automation_rule',

    # Tool plumbing
    'TOOL_DEFINITIONS',
    'get_tool_schemas',
    'run_tool',
]
