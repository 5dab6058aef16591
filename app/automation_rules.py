"""
Automation Rules

Creates and manages automation rules described in plain English, e.g.
"When a P1 ticket is created, notify the on-call team".

Every public method returns a result dict with a ``success`` key, the shape
the assistant's tools and the HTTP routes pass straight back to the caller.
Expected failures (unrecognized wording, unknown rule, store outage) are
reported in that dict instead of being raised.
"""

from typing import Dict, List, Optional

from .lexicon import TRIGGER_LEXICON, ACTION_LEXICON, suggestions
from .rule_inference import parse_rule
from .rule_store import RuleStore, RuleNotFoundError, get_rule_store
from .service_logger import get_service_logger


UNKNOWN_TRIGGER_ERROR = (
    'Could not understand the trigger condition. Try using phrases like '
    '"When a ticket is created" or "When priority changes".'
)
UNKNOWN_ACTION_ERROR = (
    'Could not understand the action. Try using phrases like '
    '"assign to", "notify", or "change priority".'
)

SUGGESTION_FOCUSES = ('tickets', 'sla', 'assignment', 'notifications', 'all')

RULE_TEMPLATES: List[Dict[str, str]] = [
    {
        'name': 'Auto-categorize Printer Issues',
        'description': 'When a ticket is created with "printer" in the subject, add the Printing category',
        'category': 'tickets'
    },
    {
        'name': 'Flag VIP Clients',
        'description': 'When a ticket is created from a VIP client, set priority to High',
        'category': 'tickets'
    },
    {
        'name': 'SLA Warning Alert',
        'description': 'When a ticket is 80% through its SLA time, notify the assigned agent',
        'category': 'sla'
    },
    {
        'name': 'SLA Breach Escalation',
        'description': 'When SLA is breached, escalate to team lead and add urgent tag',
        'category': 'sla'
    },
    {
        'name': 'Network Issues to Network Team',
        'description': 'When a ticket mentions network, VPN, or connectivity, assign to Network Team',
        'category': 'assignment'
    },
    {
        'name': 'After-Hours Assignment',
        'description': 'When a P1 ticket is created outside business hours, assign to on-call team',
        'category': 'assignment'
    },
    {
        'name': 'New Ticket Notification',
        'description': 'When any ticket is created, notify the service desk manager',
        'category': 'notifications'
    },
    {
        'name': 'P1 Alert',
        'description': 'When a P1 ticket is created, immediately notify the management team',
        'category': 'notifications'
    },
]


class AutomationRuleManager:
    """
    Builds automation rules from natural language and manages stored rules.

    The owner (user_id, optional connection_id) is passed to every call, so
    one manager can serve any number of users concurrently.
    """

    def __init__(self, store: Optional[RuleStore] = None):
        self.store = store if store is not None else get_rule_store()
        self.logger = get_service_logger()

    def preview_rule(self, description: str) -> Dict:
        """
        Show how a description would be interpreted without saving anything.

        Returns:
            {
                "success": true,
                "trigger": {"type": "TICKET_CREATED", "config": {...}} or None,
                "action": {"type": "SEND_NOTIFICATION", "config": {...}} or None,
                "conditions": [{"field": "priority", "operator": "equals", "value": "P1"}],
                "complete": true
            }
        """
        parsed = parse_rule(description)
        result = {'success': True}
        result.update(parsed.to_dict())
        return result

    def create_rule(self, name: str, description: str, user_id: str,
                    connection_id: Optional[str] = None) -> Dict:
        """
        Parse a natural-language description and save it as an automation rule.

        Args:
            name: Short name for the rule
            description: What the rule should do, e.g.
                "When a P1 ticket is created, notify the on-call team"
            user_id: Owner of the rule
            connection_id: PSA connection the rule applies to (optional)

        Returns:
            On success:
            {
                "success": true,
                "rule": {
                    "id": "...",
                    "name": "P1 Alert",
                    "description": "When a P1 ticket is created, ...",
                    "trigger": {"type": "TICKET_CREATED", "config": {"priority": "P1"}},
                    "action": {"type": "SEND_NOTIFICATION", "config": {"notifyTarget": "on-call team"}},
                    "conditions": [...],
                    "is_active": true
                },
                "message": "Automation rule \"P1 Alert\" created successfully!"
            }

            On failure:
            {"success": false, "error": "...", "suggestions": ["ticket created", ...]}
        """
        if not name or not name.strip():
            return {'success': False, 'error': 'A rule name is required.'}

        parsed = parse_rule(description)

        if parsed.trigger is None:
            self.logger.info(f"No trigger recognized in rule description for user {user_id}")
            return {
                'success': False,
                'error': UNKNOWN_TRIGGER_ERROR,
                'suggestions': suggestions(TRIGGER_LEXICON)
            }

        if parsed.action is None:
            self.logger.info(f"No action recognized in rule description for user {user_id}")
            return {
                'success': False,
                'error': UNKNOWN_ACTION_ERROR,
                'suggestions': suggestions(ACTION_LEXICON)
            }

        trigger_config = parsed.trigger.config.to_dict()
        action_config = parsed.action.config.to_dict()
        conditions = [condition.to_dict() for condition in parsed.conditions]

        payload = {
            'user_id': user_id,
            'connection_id': connection_id or None,
            'name': name,
            'description': description,
            'trigger_type': parsed.trigger.type,
            'trigger_config': trigger_config,
            'action_type': parsed.action.type,
            'action_config': action_config,
            'conditions': conditions or None,
            'is_active': True
        }

        try:
            rule = self.store.create(payload)
        except Exception as e:
            self.logger.error(f"Failed to create automation rule '{name}': {e}", exc_info=True)
            return {'success': False, 'error': str(e) or 'Failed to create automation rule'}

        self.logger.info(
            f"Created automation rule {rule.id} for user {user_id}: "
            f"{rule.trigger_type} -> {rule.action_type}"
        )

        return {
            'success': True,
            'rule': {
                'id': rule.id,
                'name': rule.name,
                'description': rule.description,
                'trigger': {'type': rule.trigger_type, 'config': trigger_config},
                'action': {'type': rule.action_type, 'config': action_config},
                'conditions': conditions,
                'is_active': rule.is_active
            },
            'message': f'Automation rule "{name}" created successfully!'
        }

    def list_rules(self, user_id: str, active_only: bool = False) -> Dict:
        """List a user's rules, newest first."""
        try:
            rules = self.store.list(user_id=user_id, is_active=True if active_only else None)
        except Exception as e:
            self.logger.error(f"Failed to list automation rules for {user_id}: {e}", exc_info=True)
            return {'success': False, 'error': str(e) or 'Failed to list automation rules'}

        return {
            'success': True,
            'count': len(rules),
            'rules': [
                {
                    'id': rule.id,
                    'name': rule.name,
                    'description': rule.description,
                    'trigger': rule.trigger_type,
                    'action': rule.action_type,
                    'is_active': rule.is_active,
                    'execution_count': rule.execution_count,
                    'last_executed_at': rule.last_executed_at.isoformat() if rule.last_executed_at else None
                }
                for rule in rules
            ]
        }

    def _get_owned_rule(self, rule_id: str, user_id: str):
        """Fetch a rule, treating rules owned by someone else as missing."""
        rule = self.store.get(rule_id)
        if rule.user_id != user_id:
            raise RuleNotFoundError(rule_id)
        return rule

    def toggle_rule(self, rule_id: str, user_id: str, is_active: bool) -> Dict:
        """Enable or disable one of the user's rules."""
        try:
            self._get_owned_rule(rule_id, user_id)
            rule = self.store.update(rule_id, {'is_active': bool(is_active)})
        except RuleNotFoundError as e:
            return {'success': False, 'error': str(e), 'not_found': True}
        except Exception as e:
            self.logger.error(f"Failed to toggle automation rule {rule_id}: {e}")
            return {'success': False, 'error': str(e) or 'Failed to toggle automation rule'}

        state = 'enabled' if is_active else 'disabled'
        self.logger.info(f"Automation rule {rule_id} {state} by {user_id}")

        return {
            'success': True,
            'rule': {
                'id': rule.id,
                'name': rule.name,
                'is_active': rule.is_active
            },
            'message': f'Rule "{rule.name}" {state} successfully!'
        }

    def delete_rule(self, rule_id: str, user_id: str) -> Dict:
        """Delete one of the user's rules."""
        try:
            rule = self._get_owned_rule(rule_id, user_id)
            self.store.delete(rule_id)
        except RuleNotFoundError as e:
            return {'success': False, 'error': str(e), 'not_found': True}
        except Exception as e:
            self.logger.error(f"Failed to delete automation rule {rule_id}: {e}")
            return {'success': False, 'error': str(e) or 'Failed to delete automation rule'}

        self.logger.info(f"Automation rule {rule_id} deleted by {user_id}")
        return {
            'success': True,
            'message': f'Rule "{rule.name}" deleted successfully!'
        }

    def suggest_rules(self, focus: str = 'all') -> Dict:
        """
        Suggest common automation rules.

        Args:
            focus: 'tickets', 'sla', 'assignment', 'notifications' or 'all'
        """
        focus = focus or 'all'
        if focus not in SUGGESTION_FOCUSES:
            return {
                'success': False,
                'error': f"Unknown focus '{focus}'. Use one of: {', '.join(SUGGESTION_FOCUSES)}"
            }

        found = [
            dict(template) for template in RULE_TEMPLATES
            if focus == 'all' or template['category'] == focus
        ]

        return {
            'success': True,
            'suggestions': found,
            'message': f'Found {len(found)} automation suggestions. Would you like to create any of these?'
        }

