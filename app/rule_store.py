"""
Automation Rule Store

Persistence collaborator for automation rules. Rules are kept in a key-value
store keyed by rule id; this module only defines the record shape and two
ways of reaching a store:

- InMemoryRuleStore: process-local store, used for development and tests
- ServiceRuleStore: remote rule store service reached through call_service
"""

import copy
import threading
import uuid
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Dict, List, Any, Optional

import requests
from flask import current_app

from .service_client import call_service
from .service_logger import get_service_logger


class RuleStoreError(Exception):
    """The rule store could not complete a request."""


class RuleNotFoundError(RuleStoreError):
    """No rule exists with the requested id."""

    def __init__(self, rule_id: str):
        super().__init__(f"Automation rule {rule_id} not found")
        self.rule_id = rule_id


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value):
    if value is None or isinstance(value, datetime):
        return value
    # fromisoformat only accepts a trailing Z from Python 3.11
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    try:
        return datetime.fromisoformat(value)
    except ValueError as e:
        raise RuleStoreError(f"Invalid timestamp from rule store: {value!r}") from e


@dataclass
class AutomationRule:
    """
    A persisted automation rule.

    ``conditions`` is None rather than an empty list when the description
    had no conditions.
    """
    id: str
    user_id: str
    name: str
    description: str
    trigger_type: str
    action_type: str
    trigger_config: Dict[str, Any] = field(default_factory=dict)
    action_config: Dict[str, Any] = field(default_factory=dict)
    conditions: Optional[List[Dict[str, str]]] = None
    connection_id: Optional[str] = None
    is_active: bool = True
    execution_count: int = 0
    last_executed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __repr__(self):
        return f'<AutomationRule {self.id} user={self.user_id} {self.trigger_type}->{self.action_type}>'

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses."""
        data = asdict(self)
        for key in ('last_executed_at', 'created_at', 'updated_at'):
            value = data[key]
            data[key] = value.isoformat() if value else None
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AutomationRule':
        """Build a rule from an API payload, ignoring unknown keys."""
        known = {name: data[name] for name in cls.__dataclass_fields__ if name in data}
        for key in ('last_executed_at', 'created_at', 'updated_at'):
            if key in known:
                known[key] = _parse_timestamp(known[key])
        return cls(**known)


class RuleStore:
    """
    Interface every rule store implements.

    ``create`` receives a payload without an id; the store assigns it.
    ``update`` applies a partial patch. Both ``update`` and ``delete`` return
    the affected rule and raise RuleNotFoundError for unknown ids.
    """

    def create(self, payload: Dict[str, Any]) -> AutomationRule:
        raise NotImplementedError

    def get(self, rule_id: str) -> AutomationRule:
        raise NotImplementedError

    def update(self, rule_id: str, patch: Dict[str, Any]) -> AutomationRule:
        raise NotImplementedError

    def delete(self, rule_id: str) -> AutomationRule:
        raise NotImplementedError

    def list(self, user_id: str = None, is_active: bool = None,
             connection_id: str = None) -> List[AutomationRule]:
        raise NotImplementedError


class InMemoryRuleStore(RuleStore):
    """Thread-safe dict-backed store."""

    # Fields a patch is allowed to change
    MUTABLE_FIELDS = (
        'name', 'description', 'trigger_type', 'trigger_config', 'action_type',
        'action_config', 'conditions', 'is_active', 'execution_count', 'last_executed_at'
    )

    def __init__(self):
        self._rules: Dict[str, AutomationRule] = {}
        self._lock = threading.Lock()

    def create(self, payload: Dict[str, Any]) -> AutomationRule:
        now = _utcnow()
        data = copy.deepcopy(payload)
        data['id'] = str(uuid.uuid4())
        data['created_at'] = now
        data['updated_at'] = now
        rule = AutomationRule.from_dict(data)
        with self._lock:
            self._rules[rule.id] = rule
        return copy.deepcopy(rule)

    def get(self, rule_id: str) -> AutomationRule:
        with self._lock:
            rule = copy.deepcopy(self._rules.get(rule_id))
        if rule is None:
            raise RuleNotFoundError(rule_id)
        return rule

    def update(self, rule_id: str, patch: Dict[str, Any]) -> AutomationRule:
        with self._lock:
            rule = self._rules.get(rule_id)
            if rule is None:
                raise RuleNotFoundError(rule_id)
            for key, value in patch.items():
                if key in self.MUTABLE_FIELDS:
                    setattr(rule, key, copy.deepcopy(value))
            rule.updated_at = _utcnow()
            return copy.deepcopy(rule)

    def delete(self, rule_id: str) -> AutomationRule:
        with self._lock:
            rule = self._rules.pop(rule_id, None)
        if rule is None:
            raise RuleNotFoundError(rule_id)
        return rule

    def list(self, user_id: str = None, is_active: bool = None,
             connection_id: str = None) -> List[AutomationRule]:
        with self._lock:
            rules = [copy.deepcopy(rule) for rule in self._rules.values()]

        if user_id is not None:
            rules = [rule for rule in rules if rule.user_id == user_id]
        if is_active is not None:
            rules = [rule for rule in rules if rule.is_active == is_active]
        if connection_id is not None:
            rules = [rule for rule in rules if rule.connection_id == connection_id]

        return sorted(rules, key=lambda rule: rule.created_at, reverse=True)


class ServiceRuleStore(RuleStore):
    """Rule store backed by the remote rule store service."""

    def __init__(self, service_name: str = 'rulestore'):
        self.service_name = service_name
        self.logger = get_service_logger()

    def _call_store(self, endpoint: str, method: str = 'GET', data: Optional[Dict] = None,
                    params: Optional[Dict] = None, rule_id: str = None) -> Any:
        """
        Internal method to call the rule store service.

        Raises:
            RuleNotFoundError: The service answered 404 for a rule lookup
            RuleStoreError: Any other failure
        """
        try:
            response = call_service(self.service_name, endpoint, method=method, json=data, params=params)
        except (requests.RequestException, ValueError) as e:
            self.logger.error(f"Error calling rule store: {e}", exc_info=True)
            raise RuleStoreError(f"Rule store unavailable: {e}") from e

        if response.status_code == 404 and rule_id is not None:
            raise RuleNotFoundError(rule_id)
        if not 200 <= response.status_code < 300:
            self.logger.error(f"Rule store error: {response.status_code} - {response.text}")
            raise RuleStoreError(f"Rule store returned {response.status_code}")

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    @staticmethod
    def _serialize(payload: Dict[str, Any]) -> Dict[str, Any]:
        return {
            key: value.isoformat() if isinstance(value, datetime) else value
            for key, value in payload.items()
        }

    def create(self, payload: Dict[str, Any]) -> AutomationRule:
        self.logger.info(f"Creating automation rule for user {payload.get('user_id')}")
        data = self._call_store('/api/rules', method='POST', data=self._serialize(payload))
        return AutomationRule.from_dict(data)

    def get(self, rule_id: str) -> AutomationRule:
        data = self._call_store(f'/api/rules/{rule_id}', rule_id=rule_id)
        return AutomationRule.from_dict(data)

    def update(self, rule_id: str, patch: Dict[str, Any]) -> AutomationRule:
        self.logger.info(f"Updating automation rule {rule_id}: {list(patch.keys())}")
        data = self._call_store(f'/api/rules/{rule_id}', method='PATCH',
                                data=self._serialize(patch), rule_id=rule_id)
        return AutomationRule.from_dict(data)

    def delete(self, rule_id: str) -> AutomationRule:
        self.logger.info(f"Deleting automation rule {rule_id}")
        data = self._call_store(f'/api/rules/{rule_id}', method='DELETE', rule_id=rule_id)
        if data is None:
            # 204 No Content: the caller still gets the id back
            return AutomationRule(id=rule_id, user_id='', name='', description='',
                                  trigger_type='', action_type='')
        return AutomationRule.from_dict(data)

    def list(self, user_id: str = None, is_active: bool = None,
             connection_id: str = None) -> List[AutomationRule]:
        params = {}
        if user_id is not None:
            params['user_id'] = user_id
        if is_active is not None:
            params['is_active'] = 'true' if is_active else 'false'
        if connection_id is not None:
            params['connection_id'] = connection_id

        data = self._call_store('/api/rules', params=params)
        rules = data.get('rules', []) if isinstance(data, dict) else (data or [])
        return [AutomationRule.from_dict(item) for item in rules]


def init_rule_store(app) -> RuleStore:
    """Create the store selected by RULE_STORE_BACKEND and attach it to the app."""
    backend = app.config.get('RULE_STORE_BACKEND', 'memory')
    if backend == 'service':
        store = ServiceRuleStore(app.config.get('RULE_STORE_SERVICE', 'rulestore'))
    elif backend == 'memory':
        store = InMemoryRuleStore()
    else:
        raise ValueError(f"Unknown RULE_STORE_BACKEND: {backend}")

    app.extensions['rule_store'] = store
    return store


def get_rule_store() -> RuleStore:
    """Get the rule store of the running app."""
    return current_app.extensions['rule_store']
